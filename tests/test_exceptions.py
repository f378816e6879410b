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
"""Tests for the pysession exception hierarchy."""

import pytest

from pysession.exceptions import (
    ConfigurationException,
    PySessionException,
    SessionDecodeException,
    SessionMisuseException,
    SessionNotLoadedException,
    SessionStoreException,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (ConfigurationException("bad"), "SESSION_CONFIG"),
            (SessionMisuseException("bad"), "SESSION_MISUSE"),
            (SessionNotLoadedException("bad"), "SESSION_NOT_LOADED"),
            (SessionDecodeException("bad"), "SESSION_DECODE"),
            (SessionStoreException("bad"), "SESSION_STORE"),
        ],
    )
    def test_codes(self, exc, code):
        assert isinstance(exc, PySessionException)
        assert exc.code == code
        assert str(exc) == "bad"

    def test_misuse_is_type_error(self):
        assert issubclass(SessionMisuseException, TypeError)
        assert issubclass(SessionNotLoadedException, SessionMisuseException)

    def test_context_defaults_to_empty(self):
        assert ConfigurationException("bad").context == {}

    def test_decode_exception_carries_headers(self):
        exc = SessionDecodeException("bad", headers={"set-cookie": ["k=; Path=/"]}, context={"key": "k"})
        assert exc.headers == {"set-cookie": ["k=; Path=/"]}
        assert exc.context == {"key": "k"}
