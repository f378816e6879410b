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
"""Tests for InMemorySessionStore."""

from __future__ import annotations

import asyncio

import pytest

from pysession.adapters.memory import InMemorySessionStore
from pysession.ports.outbound import SessionStore, SetOptions

NEW = SetOptions(changed=True, new_sess=True, renew=False)


class TestInMemorySessionStore:
    def test_protocol_compliance(self):
        assert isinstance(InMemorySessionStore(), SessionStore)

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        store = InMemorySessionStore()
        await store.set("sid", {"a": 1, "_expire": 5}, 60_000, NEW)
        assert await store.get("sid") == {"a": 1, "_expire": 5}
        assert len(store._store) == 1

    @pytest.mark.asyncio
    async def test_get_missing(self):
        assert await InMemorySessionStore().get("nope") is None

    @pytest.mark.asyncio
    async def test_records_are_copied(self):
        store = InMemorySessionStore()
        record = {"items": [1]}
        await store.set("sid", record, 60_000, NEW)
        record["items"].append(2)
        fetched = await store.get("sid")
        fetched["items"].append(3)
        assert await store.get("sid") == {"items": [1]}

    @pytest.mark.asyncio
    async def test_ttl_is_milliseconds(self):
        store = InMemorySessionStore()
        await store.set("sid", {"a": 1}, 50, NEW)
        assert await store.get("sid") == {"a": 1}
        await asyncio.sleep(0.1)
        assert await store.get("sid") is None
        assert store._store == {}

    @pytest.mark.asyncio
    async def test_destroy(self):
        store = InMemorySessionStore()
        await store.set("sid", {"a": 1}, 60_000, NEW)
        await store.destroy("sid")
        assert await store.get("sid") is None

    @pytest.mark.asyncio
    async def test_destroy_missing_is_noop(self):
        await InMemorySessionStore().destroy("nope")
