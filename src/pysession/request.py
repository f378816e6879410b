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
"""HttpContext — a concrete request context exposing ``session``."""

from __future__ import annotations

from collections.abc import MutableMapping
from http.cookies import SimpleCookie
from typing import TYPE_CHECKING, Any

from pysession.cookies import CookieOptions
from pysession.exceptions import SessionNotLoadedException

if TYPE_CHECKING:
    from pysession.context import SessionContext
    from pysession.options import SessionOptions
    from pysession.ports.http import CookieJar
    from pysession.session import Session

SESSION_CONTEXT_KEY = "pysession.session_context"


def get_session_context(ctx: Any) -> SessionContext:
    """Return the SessionContext the middleware attached to ``ctx``."""
    sess_ctx = ctx.state.get(SESSION_CONTEXT_KEY)
    if sess_ctx is None:
        raise SessionNotLoadedException("No session for this request; is the session middleware installed?")
    return sess_ctx


class HttpContext:
    """Request context composed of a cookie jar, a state bag and ``now``."""

    def __init__(
        self,
        cookies: CookieJar,
        state: MutableMapping[str, Any] | None = None,
        now: int | None = None,
    ) -> None:
        self.cookies = cookies
        self.state: MutableMapping[str, Any] = state if state is not None else {}
        self.now = now

    @property
    def session(self) -> Session | None:
        return get_session_context(self).get()

    @session.setter
    def session(self, value: Any) -> None:
        get_session_context(self).set(value)

    @property
    def session_options(self) -> SessionOptions:
        return get_session_context(self).options


class MemoryCookieJar:
    """Cookie jar over a plain dict of incoming cookies.

    Writes are recorded in ``written`` and rendered as ``Set-Cookie`` header
    values by :meth:`outgoing_headers`.  Signing is not applied.
    """

    def __init__(self, incoming: dict[str, str] | None = None) -> None:
        self.incoming: dict[str, str] = dict(incoming or {})
        self.written: list[tuple[str, str, CookieOptions]] = []

    def get(self, name: str, options: CookieOptions | None = None) -> str | None:
        return self.incoming.get(name)

    def set(self, name: str, value: str, options: CookieOptions | None = None) -> None:
        options = options or CookieOptions()
        if options.overwrite:
            self.written = [w for w in self.written if w[0] != name]
        self.written.append((name, value, options))

    def last(self, name: str) -> tuple[str, CookieOptions] | None:
        """The most recent write of ``name``, if any."""
        for written_name, value, options in reversed(self.written):
            if written_name == name:
                return value, options
        return None

    def outgoing_headers(self) -> list[str]:
        return [_render(name, value, options) for name, value, options in self.written]


def _render(name: str, value: str, options: CookieOptions) -> str:
    cookie: SimpleCookie = SimpleCookie()
    cookie[name] = value
    morsel = cookie[name]
    morsel["path"] = options.path
    if options.domain:
        morsel["domain"] = options.domain
    if options.max_age is not None:
        morsel["max-age"] = options.max_age // 1000
    if options.expires is not None:
        morsel["expires"] = options.expires.strftime("%a, %d %b %Y %H:%M:%S GMT")
    if options.http_only:
        morsel["httponly"] = True
    if options.secure:
        morsel["secure"] = True
    if options.same_site:
        morsel["samesite"] = options.same_site
    return morsel.OutputString()
