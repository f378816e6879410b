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
"""Redis-backed session store."""

from __future__ import annotations

import json
import logging
from typing import Any, cast

from pysession.exceptions import SessionStoreException
from pysession.logging import session_digest
from pysession.options import STORE_TTL_HEADROOM
from pysession.ports.outbound import SetOptions

_logger = logging.getLogger(__name__)


class RedisSessionStore:
    """Session store backed by ``redis.asyncio``.

    Records are JSON-serialized and written with a millisecond expiry
    (``PX``).  A write that only carries changed content keeps the record's
    remaining lifetime; unchanged, non-renewing saves skip the write.
    Client errors propagate to the caller; a record that cannot be
    serialized raises :class:`SessionStoreException`.
    """

    def __init__(self, client: Any, key_prefix: str = "") -> None:
        self._client = client
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str, max_age: int | str | None = None, ctx: Any = None) -> dict[str, Any] | None:
        """Retrieve and deserialize a record."""
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        try:
            return cast(dict[str, Any], json.loads(raw))
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError):
            _logger.warning("Failed to deserialize session record %s", session_digest(key))
            return None

    async def set(self, key: str, record: dict[str, Any], max_age: int, options: SetOptions) -> None:
        """Write a record; ``max_age`` is milliseconds."""
        if options.new_sess or options.renew:
            ttl = max_age
        elif options.changed:
            now = options.ctx.now if options.ctx is not None else None
            expire = record.get("_expire")
            if now is None or not isinstance(expire, int):
                ttl = max_age
            else:
                remaining = expire - now
                if remaining <= 0:
                    return
                ttl = min(max_age, remaining + STORE_TTL_HEADROOM)
        else:
            return

        try:
            raw = json.dumps(record, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise SessionStoreException(
                f"Session record {session_digest(key)} is not JSON serializable",
                context={"session": session_digest(key)},
            ) from exc
        await self._client.set(self._key(key), raw.encode(), px=int(ttl))

    async def destroy(self, key: str, ctx: Any = None) -> None:
        await self._client.delete(self._key(key))
