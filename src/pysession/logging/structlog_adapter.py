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
"""StructlogAdapter — structured output for the ``pysession`` logger tree."""

from __future__ import annotations

import hashlib
import logging
import sys
from collections.abc import Mapping
from typing import IO, Any

import structlog

from pysession.core.config import Config

ROOT_LOGGER = "pysession"

# Event keys whose values identify a session; never rendered raw.
SESSION_ID_KEYS = frozenset({"session_id", "sid", "cookie"})


def session_digest(session_id: str | None) -> str | None:
    """Short stable stand-in for a session id in log output."""
    if not session_id:
        return None
    return hashlib.sha256(session_id.encode()).hexdigest()[:12]


def redact_session_ids(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor replacing raw session ids with their digest."""
    for key in SESSION_ID_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str):
            event_dict[key] = session_digest(value)
    return event_dict


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


class StructlogAdapter:
    """Routes pysession's structlog events to a handler of its own.

    Only the ``pysession`` logger tree is touched: it gets one stream
    handler and stops propagating, so the application's root logger keeps
    whatever setup it has.

    Settings under ``pysession.logging``:
        level: a level name for the whole tree, or a mapping of logger
            names to levels (``pysession.adapters.redis: DEBUG``).
        format: ``console`` (default) or ``json``.
        redact: hash session ids found in events (default ``true``).
    """

    def __init__(self, stream: IO[str] | None = None) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.levels: dict[str, str] = {ROOT_LOGGER: "INFO"}
        self.format = "console"
        self.redact = True
        self._handler: logging.Handler | None = None

    def configure(self, config: Config) -> None:
        level = config.get("pysession.logging.level", "INFO")
        if isinstance(level, Mapping):
            self.levels.update({str(name): str(value).upper() for name, value in level.items()})
        else:
            self.levels[ROOT_LOGGER] = str(level).upper()
        self.format = str(config.get("pysession.logging.format", "console")).lower()
        self.redact = _as_bool(config.get("pysession.logging.redact", True))

        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        self._install_handler()
        for name, value in self.levels.items():
            self.set_level(name, value)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))

    def reset(self) -> None:
        """Detach the handler installed by :meth:`configure`."""
        if self._handler is None:
            return
        root = logging.getLogger(ROOT_LOGGER)
        root.removeHandler(self._handler)
        root.propagate = True
        self._handler = None

    def _processors(self) -> list[structlog.types.Processor]:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ]
        if self.redact:
            processors.append(redact_session_ids)
        if self.format == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        return processors

    def _install_handler(self) -> None:
        self.reset()
        handler = logging.StreamHandler(self.stream)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root = logging.getLogger(ROOT_LOGGER)
        root.addHandler(handler)
        root.propagate = False
        self._handler = handler
