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
"""Default cookie codec and session id generator.

The codec is base64 over compact JSON.  Any structural failure while
decoding surfaces as a ``ValueError`` subclass (``binascii.Error``,
``UnicodeDecodeError`` or ``json.JSONDecodeError``), which the session
controller treats as "no session".
"""

from __future__ import annotations

import base64
import json
import secrets
from typing import Any

SESSION_ID_BYTES = 16


def encode(record: dict[str, Any]) -> str:
    """Encode a session record into a cookie-safe string."""
    body = json.dumps(record, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(body.encode("utf-8")).decode("ascii")


def decode(value: str) -> dict[str, Any]:
    """Decode a cookie value produced by :func:`encode`."""
    body = base64.b64decode(value.encode("ascii", errors="strict"), validate=True).decode("utf-8")
    return json.loads(body)


def snapshot(payload: dict[str, Any]) -> str:
    """Serialize a payload for change detection; key order is preserved."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def gen_session_id(ctx: Any = None) -> str:
    """Return a random 32 character hex session id."""
    return secrets.token_hex(SESSION_ID_BYTES)


def prefixed_generator(prefix: str):
    """Build a generator that prepends ``prefix`` to :func:`gen_session_id`."""

    def _generate(ctx: Any = None) -> str:
        return f"{prefix}{gen_session_id(ctx)}"

    return _generate
