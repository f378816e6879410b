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
"""Build session options and the session store from configuration."""

from __future__ import annotations

import importlib
from typing import Any

import structlog

from pysession.core.config import Config
from pysession.exceptions import ConfigurationException
from pysession.logging import LoggingPort, StructlogAdapter
from pysession.options import SESSION, SessionOptions, format_options
from pysession.ports.outbound import SessionStore
from pysession.properties import SessionProperties

logger = structlog.get_logger("pysession.auto_configuration")


def is_available(module_name: str) -> bool:
    """Check if a Python package is importable."""
    try:
        importlib.import_module(module_name)
        return True
    except ImportError:
        return False


def _parse_max_age(value: Any) -> int | str | None:
    if value is None or value == "":
        return None
    if value == SESSION:
        return SESSION
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationException(
            f"pysession.session.max-age must be milliseconds or '{SESSION}', got {value!r}"
        ) from exc


def create_session_store(config: Config, properties: SessionProperties | None = None) -> SessionStore | None:
    """Create the store named by ``pysession.session.store``, or ``None`` for cookie-only sessions."""
    props = properties or config.bind(SessionProperties)
    store_type = props.store.strip().lower()

    if store_type in ("", "none", "cookie"):
        return None

    if store_type == "memory":
        from pysession.adapters.memory import InMemorySessionStore

        return InMemorySessionStore()

    if store_type == "redis":
        if not is_available("redis.asyncio"):
            raise ConfigurationException("pysession.session.store=redis requires the 'redis' package")
        import redis.asyncio as aioredis

        from pysession.adapters.redis import RedisSessionStore

        url = str(props.redis.get("url", "redis://localhost:6379/0"))
        key_prefix = str(props.redis.get("key-prefix", props.redis.get("key_prefix", "")))
        client = aioredis.from_url(url)  # type: ignore[no-untyped-call,unused-ignore]
        logger.info("session_store_configured", store="redis", key_prefix=key_prefix)
        return RedisSessionStore(client=client, key_prefix=key_prefix)

    raise ConfigurationException(f"Unknown session store '{props.store}'", context={"store": props.store})


def configure_logging(config: Config, port: LoggingPort | None = None) -> LoggingPort | None:
    """Apply ``pysession.logging.*`` through ``port`` (a StructlogAdapter by default).

    Returns ``None`` and leaves logging alone when the section is absent.
    """
    if not config.get_section("pysession.logging"):
        return None
    port = port if port is not None else StructlogAdapter()
    port.configure(config)
    return port


def session_options_from_config(
    config: Config,
    logging_port: LoggingPort | None = None,
    **overrides: Any,
) -> SessionOptions:
    """Resolve :class:`SessionOptions` from ``pysession.session.*``.

    Logging is configured first when a ``pysession.logging`` section is
    present.  Keyword overrides take precedence; pass callables such as
    ``valid`` or ``observer`` this way since they cannot come from a
    config file.
    """
    configure_logging(config, logging_port)
    props = config.bind(SessionProperties)
    options = SessionOptions(
        key=props.key,
        max_age=_parse_max_age(props.max_age),
        renew=props.renew,
        auto_commit=props.auto_commit,
        sess_store_age=props.sess_store_age,
        http_only=props.http_only,
        signed=props.signed,
        overwrite=props.overwrite,
        secure=props.secure,
        same_site=props.same_site or None,
        path=props.path,
        domain=props.domain or None,
        prefix=props.prefix or None,
    )
    if "store" not in overrides and "context_store" not in overrides:
        options.store = create_session_store(config, props)
    return format_options(options, **overrides)
