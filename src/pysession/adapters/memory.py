# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""In-memory session store with millisecond TTL expiry."""

from __future__ import annotations

import asyncio
import copy
import time
from typing import Any

from pysession.ports.outbound import SetOptions


class InMemorySessionStore:
    """In-memory session store with TTL support and asyncio.Lock for safety.

    Suitable for development, testing, and single-process applications.
    Records are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self) -> None:
        self._store: dict[str, tuple[dict[str, Any], float]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str, max_age: int | str | None = None, ctx: Any = None) -> dict[str, Any] | None:
        """Return the record, or ``None`` if missing or expired."""
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            record, expires_at = entry
            if time.monotonic() > expires_at:
                del self._store[key]
                return None

            return copy.deepcopy(record)

    async def set(self, key: str, record: dict[str, Any], max_age: int, options: SetOptions | None = None) -> None:
        """Store a record for ``max_age`` milliseconds."""
        async with self._lock:
            expires_at = time.monotonic() + max_age / 1000
            self._store[key] = (copy.deepcopy(record), expires_at)

    async def destroy(self, key: str, ctx: Any = None) -> None:
        async with self._lock:
            self._store.pop(key, None)
