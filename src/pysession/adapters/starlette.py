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
"""Starlette integration — cookie jar and pure ASGI session middleware.

Usage::

    app = Starlette(routes=[...])
    install_session(app, secret_keys=["s3cret"], store=InMemorySessionStore())

    async def handler(request):
        ctx = get_request_context(request)
        ctx.session["views"] = ctx.session.get("views", 0) + 1
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from itsdangerous import BadSignature, Signer
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pysession.cookies import CookieOptions
from pysession.exceptions import ConfigurationException, SessionDecodeException
from pysession.middleware import SessionMiddleware
from pysession.options import SessionOptions, format_options
from pysession.request import HttpContext

_SIGNER_SALT = "pysession.cookie"
_REQUEST_CONTEXT_STATE = "session_ctx"


class StarletteCookieJar:
    """Cookie jar over a Starlette request.

    Signed cookies carry an itsdangerous signature appended to the value.
    ``secret_keys`` are ordered oldest to newest; the newest signs, all
    verify, so keys can be rotated without logging users out.
    """

    def __init__(self, request: Request, secret_keys: Sequence[str] | None = None) -> None:
        self._request = request
        self._signer = Signer(list(secret_keys), salt=_SIGNER_SALT) if secret_keys else None
        self._outgoing: list[tuple[str, str]] = []

    def get(self, name: str, options: CookieOptions | None = None) -> str | None:
        raw = self._request.cookies.get(name)
        if not raw:
            return None
        if options is None or not options.signed:
            return raw
        if self._signer is None:
            raise ConfigurationException("secret_keys are required for signed cookies")
        try:
            return self._signer.unsign(raw).decode("utf-8")
        except BadSignature:
            return None

    def set(self, name: str, value: str, options: CookieOptions | None = None) -> None:
        options = options or CookieOptions()
        if value and options.signed:
            if self._signer is None:
                raise ConfigurationException("secret_keys are required for signed cookies")
            value = self._signer.sign(value).decode("utf-8")

        if options.overwrite:
            self._outgoing = [(n, h) for n, h in self._outgoing if n != name]
        self._outgoing.append((name, _render_set_cookie(name, value, options)))

    def outgoing_headers(self) -> list[str]:
        return [header for _, header in self._outgoing]


def _render_set_cookie(name: str, value: str, options: CookieOptions) -> str:
    """Render one ``Set-Cookie`` value with Starlette's cookie formatting."""
    response = Response()
    response.set_cookie(
        key=name,
        value=value,
        max_age=options.max_age // 1000 if options.max_age is not None else None,
        expires=options.expires,
        path=options.path,
        domain=options.domain,
        secure=options.secure,
        httponly=options.http_only,
        samesite=options.same_site,  # type: ignore[arg-type]
    )
    for header_name, header_value in response.raw_headers:
        if header_name == b"set-cookie":
            return header_value.decode("latin-1")
    raise RuntimeError("Starlette did not render a Set-Cookie header")


def get_request_context(request: Request) -> HttpContext:
    """Return the session-aware context of a request handled by the middleware."""
    return request.scope["state"][_REQUEST_CONTEXT_STATE]


class StarletteSessionMiddleware:
    """Pure ASGI middleware running :class:`SessionMiddleware` around the app.

    The session is committed when the downstream app starts its response,
    and the resulting ``Set-Cookie`` headers are added to that start
    message; body messages pass through untouched, so streaming responses
    are never buffered.  Changes made after the response started still
    reach the store but not the cookie.  A fatal cookie decode error raised
    before the response started becomes a 400 response that clears the
    cookie.
    """

    def __init__(
        self,
        app: ASGIApp,
        options: SessionOptions | None = None,
        secret_keys: Sequence[str] | None = None,
        **overrides: Any,
    ) -> None:
        self.app = app
        self._session = SessionMiddleware(options, **overrides)
        self._secret_keys = list(secret_keys or [])
        if self._session.options.signed and not self._secret_keys:
            raise ConfigurationException("secret_keys are required when signed cookies are enabled")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        jar = StarletteCookieJar(request, self._secret_keys)
        state = scope.setdefault("state", {})
        ctx = HttpContext(cookies=jar, state=state)
        state[_REQUEST_CONTEXT_STATE] = ctx

        sess_ctx = self._session.context_for(ctx)
        auto_commit = self._session.options.auto_commit
        response_started = False

        async def send_with_session(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                # Headers leave with this message, so the session is committed now.
                if auto_commit:
                    await sess_ctx.commit()
                message.setdefault("headers", [])
                headers = MutableHeaders(scope=message)
                for value in jar.outgoing_headers():
                    headers.append("set-cookie", value)
            await send(message)

        async def _call_app() -> None:
            await self.app(scope, receive, send_with_session)

        try:
            await self._session(ctx, _call_app)
        except SessionDecodeException as exc:
            if response_started:
                raise
            response = PlainTextResponse("Bad Request", status_code=400)
            for value in exc.headers.get("set-cookie", []):
                response.raw_headers.append((b"set-cookie", value.encode("latin-1")))
            await response(scope, receive, send)



def install_session(
    app: Any,
    options: SessionOptions | None = None,
    secret_keys: Sequence[str] | None = None,
    **overrides: Any,
) -> SessionOptions:
    """Register the session middleware on a Starlette application.

    Options are validated here, before the application serves a request.
    """
    if not callable(getattr(app, "add_middleware", None)):
        raise ConfigurationException("A Starlette application instance is required")

    resolved = format_options(options, **overrides)
    if resolved.signed and not secret_keys:
        raise ConfigurationException("secret_keys are required when signed cookies are enabled")

    app.add_middleware(StarletteSessionMiddleware, options=resolved, secret_keys=list(secret_keys or []))
    return resolved
