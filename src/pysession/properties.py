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
"""Session configuration properties."""

from __future__ import annotations

from dataclasses import dataclass, field

from pysession.core.config import config_properties
from pysession.options import ONE_HOUR


@config_properties(prefix="pysession.session")
@dataclass
class SessionProperties:
    """Configuration for sessions (pysession.session.*).

    ``max_age`` is milliseconds, the string ``session``, or empty for the
    one day default.  ``store`` is ``none``, ``memory`` or ``redis``.
    """

    key: str = "koa.sess"
    max_age: str = ""
    renew: bool = False
    auto_commit: bool = True
    sess_store_age: int = ONE_HOUR
    http_only: bool = True
    signed: bool = True
    overwrite: bool = True
    secure: bool = False
    same_site: str = ""
    path: str = "/"
    domain: str = ""
    prefix: str = ""
    store: str = "none"
    redis: dict = field(default_factory=lambda: {"url": "redis://localhost:6379/0", "key-prefix": ""})
