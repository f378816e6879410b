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
"""Cookie attributes shared by every cookie jar."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

# Expiry written when a session cookie is removed.
COOKIE_EXPIRED_DATE = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class CookieOptions:
    """Attributes of a session cookie.

    ``max_age`` is in milliseconds; ``None`` together with ``expires=None``
    makes a browser-session cookie.
    """

    path: str = "/"
    domain: str | None = None
    http_only: bool = True
    secure: bool = False
    same_site: str | None = None
    signed: bool = True
    overwrite: bool = True
    expires: datetime | None = None
    max_age: int | None = None
