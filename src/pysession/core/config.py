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
"""Config — session settings from a YAML or TOML document and the environment.

Keys are dotted paths into the document (``pysession.session.max-age``).
An environment variable named after the key wins over the document:
``PYSESSION_SESSION_MAX_AGE`` overrides ``pysession.session.max-age``.
String values may reference ``${NAME}`` or ``${NAME:fallback}``; ``NAME``
is looked up in the environment first, then as a config key.
"""

from __future__ import annotations

import dataclasses
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]

T = TypeVar("T")

_REFERENCE = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")
_PREFIX_ATTR = "__pysession_config_prefix__"
_ENV_PREFIX = "PYSESSION_"
_MAX_REFERENCE_DEPTH = 10


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Tie a dataclass to the config section at ``prefix`` for :meth:`Config.bind`."""

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def env_name(key: str) -> str:
    """Name of the environment variable overriding ``key``."""
    return _ENV_PREFIX + key.removeprefix("pysession.").upper().replace(".", "_").replace("-", "_")


class Config:
    """Read-only view over a nested settings document."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load ``.toml`` with tomllib and anything else as YAML; a missing file is empty."""
        path = Path(path)
        if not path.exists():
            return cls()
        if path.suffix == ".toml":
            with path.open("rb") as fh:
                return cls(tomllib.load(fh))
        with path.open() as fh:
            return cls(yaml.safe_load(fh) or {})

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        override = os.environ.get(env_name(key))
        if override is not None:
            return override
        value = self._find(key)
        if value is None:
            return default
        return self._expand(value) if isinstance(value, str) else value

    def get_section(self, prefix: str) -> dict[str, Any]:
        section = self._find(prefix)
        return dict(section) if isinstance(section, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Build a ``@config_properties`` dataclass from its section.

        ``max-age`` and ``max_age`` both fill ``max_age``; environment
        overrides apply per field and strings are converted to the field's
        int, float or bool type.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        section = {name.replace("-", "_"): value for name, value in self.get_section(prefix).items()}
        hints = get_type_hints(config_cls)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            raw = os.environ.get(env_name(f"{prefix}.{field.name}"), section.get(field.name))
            if raw is None:
                continue
            if isinstance(raw, str):
                raw = _convert(self._expand(raw), hints.get(field.name))
            values[field.name] = raw
        return config_cls(**values)

    def _find(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _expand(self, value: str, depth: int = 0) -> str:
        if depth > _MAX_REFERENCE_DEPTH:
            raise ValueError(f"Placeholders in '{value}' are circular or nested too deeply")

        def substitute(match: re.Match[str]) -> str:
            name, fallback = match.group(1), match.group(2)
            found = os.environ.get(name)
            if found is None:
                referenced = self._find(name)
                found = None if referenced is None else str(referenced)
            if found is None:
                if fallback is None:
                    raise ValueError(f"Unresolved placeholder '${{{name}}}'")
                return fallback
            return self._expand(found, depth + 1) if "${" in found else found

        return _REFERENCE.sub(substitute, value)


def _convert(value: str, expected_type: Any) -> Any:
    if expected_type is bool:
        return value.strip().lower() in ("true", "1", "yes", "on")
    if expected_type is int:
        return int(value)
    if expected_type is float:
        return float(value)
    return value
