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
"""Shared fixtures: a fixed clock, a recording store and request contexts."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from pysession.request import HttpContext, MemoryCookieJar

NOW = 1_700_000_000_000


class RecordingStore:
    """SessionStore double that keeps records in a dict and logs every call."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[Any, ...]] = []

    async def get(self, key, max_age, ctx):
        self.calls.append(("get", key))
        return copy.deepcopy(self.records.get(key))

    async def set(self, key, record, max_age, options):
        self.calls.append(("set", key, copy.deepcopy(record), max_age, options))
        self.records[key] = copy.deepcopy(record)

    async def destroy(self, key, ctx):
        self.calls.append(("destroy", key))
        self.records.pop(key, None)

    @property
    def writes(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == "set"]

    @property
    def destroyed(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "destroy"]


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def make_ctx():
    """Build an HttpContext with the given incoming cookies and clock."""

    def _make(cookies: dict[str, str] | None = None, now: int | None = NOW) -> HttpContext:
        return HttpContext(cookies=MemoryCookieJar(cookies), now=now)

    return _make
