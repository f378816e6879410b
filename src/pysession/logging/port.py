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
"""LoggingPort — where pysession's log events end up."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pysession.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Configures output for the ``pysession`` logger tree.

    ``configure`` applies the ``pysession.logging`` section; ``reset`` hands
    the tree back to the host application's logging setup.
    """

    def configure(self, config: Config) -> None: ...

    def set_level(self, name: str, level: str) -> None: ...

    def reset(self) -> None: ...
