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
"""Outbound ports: session persistence, session id transport, lifecycle events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pysession.ports.http import RequestContext


@dataclass(frozen=True)
class SetOptions:
    """Change-intent metadata passed to :meth:`SessionStore.set`.

    Attributes:
        changed: The payload differs from what was loaded (or the save was forced).
        new_sess: The record has never been persisted before.
        renew: The expiry is being pushed forward.
        ctx: The request context of the save.
    """

    changed: bool
    new_sess: bool
    renew: bool
    ctx: RequestContext | None = None


@runtime_checkable
class SessionStore(Protocol):
    """External session persistence.

    ``max_age`` values are milliseconds.  A store must let failures
    propagate; the session controller never swallows them.
    """

    async def get(self, key: str, max_age: int | str | None, ctx: RequestContext) -> dict[str, Any] | None: ...

    async def set(self, key: str, record: dict[str, Any], max_age: int, options: SetOptions) -> None: ...

    async def destroy(self, key: str, ctx: RequestContext) -> None: ...


@runtime_checkable
class SessionIdSource(Protocol):
    """Reads and writes the session id somewhere other than a cookie.

    Used for clients without cookie support (native apps sending the id in
    a header, for example).
    """

    def get(self, ctx: RequestContext) -> str | None: ...

    def set(self, ctx: RequestContext, session_id: str) -> None: ...


@dataclass(frozen=True)
class SessionEvent:
    """Payload of a lifecycle notification."""

    name: str
    session_id: str | None
    value: Any
    ctx: RequestContext | None = field(default=None, repr=False)


@runtime_checkable
class SessionObserver(Protocol):
    """Receives lifecycle notifications such as ``invalid``."""

    def __call__(self, event: SessionEvent) -> None: ...
