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
"""SessionMiddleware — wires a SessionContext into one request."""

from __future__ import annotations

from typing import Any

import structlog

from pysession.context import SessionContext, now_ms
from pysession.options import SessionOptions, format_options
from pysession.ports.http import CallNext, RequestContext
from pysession.request import SESSION_CONTEXT_KEY

logger = structlog.get_logger("pysession")


class SessionMiddleware:
    """Per-request session handler, independent of any web framework.

    Loads the session before ``call_next`` when a store is configured and
    commits it afterwards, whether ``call_next`` returned, raised, or was
    cancelled.  A downstream error always wins: if the commit that follows
    it fails too, the commit error is logged and attached to the downstream
    error as a note.
    """

    def __init__(self, options: SessionOptions | None = None, **overrides: Any) -> None:
        self.options = format_options(options, **overrides)

    def context_for(self, ctx: RequestContext) -> SessionContext:
        """Return the request's SessionContext, creating it on first use."""
        sess_ctx = ctx.state.get(SESSION_CONTEXT_KEY)
        if sess_ctx is None:
            sess_ctx = SessionContext(ctx, self.options)
            ctx.state[SESSION_CONTEXT_KEY] = sess_ctx
        return sess_ctx

    async def __call__(self, ctx: RequestContext, call_next: CallNext) -> Any:
        if ctx.now is None:
            ctx.now = now_ms()

        sess_ctx = self.context_for(ctx)
        if sess_ctx.store is not None:
            await sess_ctx.load()

        try:
            result = await call_next()
        except BaseException as exc:
            if self.options.auto_commit:
                await self._commit_after_failure(sess_ctx, exc)
            raise

        if self.options.auto_commit:
            await sess_ctx.commit()
        return result

    async def _commit_after_failure(self, sess_ctx: SessionContext, error: BaseException) -> None:
        try:
            await sess_ctx.commit()
        except Exception as commit_error:
            logger.error(
                "session_commit_failed",
                error=str(commit_error),
                error_type=type(commit_error).__name__,
                downstream_error_type=type(error).__name__,
            )
            error.add_note(f"session commit also failed: {commit_error!r}")


def session_middleware(options: SessionOptions | None = None, **overrides: Any) -> SessionMiddleware:
    """Validate options and build the per-request session handler."""
    return SessionMiddleware(options, **overrides)
