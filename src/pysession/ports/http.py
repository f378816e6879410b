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
"""HTTP-side ports — framework-agnostic cookie jar and request context.

Framework types (e.g. Starlette) stay confined to the adapter layer; the
session controller only sees these protocols.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine, MutableMapping
from typing import Any, Protocol, runtime_checkable

from pysession.cookies import CookieOptions

# The downstream continuation of the session middleware.
CallNext = Callable[[], Coroutine[Any, Any, Any]]


@runtime_checkable
class CookieJar(Protocol):
    """Per-request cookie access.

    ``outgoing_headers`` returns the ``Set-Cookie`` values queued so far.
    """

    def get(self, name: str, options: CookieOptions | None = None) -> str | None: ...

    def set(self, name: str, value: str, options: CookieOptions | None = None) -> None: ...

    def outgoing_headers(self) -> list[str]: ...


@runtime_checkable
class RequestContext(Protocol):
    """Per-request bag the session controller is composed with.

    Attributes:
        cookies: The request's cookie jar.
        state: Arbitrary per-request key-value storage.
        now: Epoch milliseconds, stamped once per request.
    """

    cookies: CookieJar
    state: MutableMapping[str, Any]
    now: int | None
