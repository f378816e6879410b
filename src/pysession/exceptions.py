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
"""Exception hierarchy for pysession.

All library exceptions inherit from PySessionException so callers can catch
one type for every session failure, or a specific subclass for targeted
handling.

Categories:
- ConfigurationException: rejected at setup time, before any request
- SessionMisuseException: programming errors in application code
- SessionDecodeException: a cookie value that cannot be decoded
- SessionStoreException: store adapter failures (adapters may raise it)
"""

from __future__ import annotations


class PySessionException(Exception):
    """Base exception for all pysession errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_CONFIG").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ConfigurationException(PySessionException):
    """Invalid options or an adapter that does not satisfy its contract."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_CONFIG", context=context)


class SessionMisuseException(PySessionException, TypeError):
    """Application code used the session API incorrectly."""

    def __init__(self, message: str, code: str = "SESSION_MISUSE", context: dict | None = None) -> None:
        super().__init__(message, code=code, context=context)


class SessionNotLoadedException(SessionMisuseException):
    """The session was read before it was hydrated for this request."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_NOT_LOADED", context=context)


class SessionDecodeException(PySessionException):
    """A session cookie failed to decode for a reason other than bad structure.

    ``headers`` holds the outgoing ``Set-Cookie`` values that clear the bad
    cookie, so a top-level error handler can still send them.
    """

    def __init__(
        self,
        message: str,
        headers: dict[str, list[str]] | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code="SESSION_DECODE", context=context)
        self.headers: dict[str, list[str]] = headers if headers is not None else {}


class SessionStoreException(PySessionException):
    """A store adapter could not complete an operation."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_STORE", context=context)
