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
"""pysession — request-scoped HTTP sessions backed by a cookie or an external store.

Import concrete store and framework adapters from the adapter package::

    from pysession.adapters.memory import InMemorySessionStore
    from pysession.adapters.redis import RedisSessionStore
    from pysession.adapters.starlette import install_session
"""

from pysession.context import SessionContext, SessionState
from pysession.cookies import CookieOptions
from pysession.exceptions import (
    ConfigurationException,
    PySessionException,
    SessionDecodeException,
    SessionMisuseException,
    SessionNotLoadedException,
    SessionStoreException,
)
from pysession.middleware import SessionMiddleware, session_middleware
from pysession.options import SESSION, SessionOptions, format_options
from pysession.ports.outbound import SessionEvent, SessionStore, SetOptions
from pysession.request import HttpContext, MemoryCookieJar, get_session_context
from pysession.session import Session

__all__ = [
    "SESSION",
    "ConfigurationException",
    "CookieOptions",
    "HttpContext",
    "MemoryCookieJar",
    "PySessionException",
    "Session",
    "SessionContext",
    "SessionDecodeException",
    "SessionEvent",
    "SessionMiddleware",
    "SessionMisuseException",
    "SessionNotLoadedException",
    "SessionOptions",
    "SessionState",
    "SessionStore",
    "SessionStoreException",
    "SetOptions",
    "format_options",
    "get_session_context",
    "session_middleware",
]
