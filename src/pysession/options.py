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
"""SessionOptions — resolved session configuration and its setup-time checks."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from pysession import codec
from pysession.cookies import CookieOptions
from pysession.exceptions import ConfigurationException
from pysession.ports.outbound import SessionIdSource, SessionObserver, SessionStore

logger = structlog.get_logger("pysession")

# max_age sentinel: the cookie lives for the browser session only.
SESSION = "session"

ONE_DAY = 24 * 60 * 60 * 1000
ONE_HOUR = 60 * 60 * 1000

# Extra store lifetime so a record always outlives the cookie that points at it.
STORE_TTL_HEADROOM = 5000

# Remaining-lifetime fraction below which a renewable session is renewed.
RENEW_THRESHOLD = 0.6

MaxAge = int | str


@dataclass
class SessionOptions:
    """Options for the session middleware.

    ``max_age`` and ``sess_store_age`` are milliseconds.  ``max_age`` may
    also be :data:`SESSION`; ``None`` means the one day default.
    """

    key: str = "koa.sess"
    max_age: MaxAge | None = None
    overwrite: bool = True
    http_only: bool = True
    signed: bool = True
    auto_commit: bool = True
    sess_store_age: int = ONE_HOUR
    renew: bool = False
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    same_site: str | None = None
    store: SessionStore | None = None
    context_store: Callable[[Any], SessionStore] | None = None
    custom_sess_id: SessionIdSource | None = None
    gen_sess_id: Callable[[Any], str] | None = None
    prefix: str | None = None
    valid: Callable[[Any, dict[str, Any]], bool] | None = None
    encode: Callable[[dict[str, Any]], str] = codec.encode
    decode: Callable[[str], dict[str, Any]] = codec.decode
    observer: SessionObserver | None = None

    def copy(self) -> SessionOptions:
        """Shallow copy used as the per-request options."""
        return dataclasses.replace(self)

    def cookie_options(self, max_age: int | None = None, **overrides: Any) -> CookieOptions:
        """Cookie attributes for a write; ``max_age`` is milliseconds."""
        attrs: dict[str, Any] = {
            "path": self.path,
            "domain": self.domain,
            "http_only": self.http_only,
            "secure": self.secure,
            "same_site": self.same_site,
            "signed": self.signed,
            "overwrite": self.overwrite,
            "max_age": max_age,
        }
        attrs.update(overrides)
        return CookieOptions(**attrs)


def _require_methods(obj: Any, label: str, names: tuple[str, ...]) -> None:
    for name in names:
        if not callable(getattr(obj, name, None)):
            raise ConfigurationException(f"{label}.{name} must be a callable", context={"adapter": type(obj).__name__})


def _check_max_age(value: Any, field: str) -> None:
    if value is None or value == SESSION:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationException(f"{field} must be a positive number of milliseconds or '{SESSION}'")


def format_options(options: SessionOptions | None = None, **overrides: Any) -> SessionOptions:
    """Validate options and fill in derived defaults.

    Raises ConfigurationException for adapters that do not satisfy their
    contract, so a broken setup fails before any request is served.
    """
    opts = dataclasses.replace(options or SessionOptions(), **overrides)
    opts.key = opts.key or "koa.sess"

    _check_max_age(opts.max_age, "max_age")
    if isinstance(opts.sess_store_age, bool) or not isinstance(opts.sess_store_age, int) or opts.sess_store_age <= 0:
        raise ConfigurationException("sess_store_age must be a positive number of milliseconds")

    if not callable(opts.encode):
        opts.encode = codec.encode
    if not callable(opts.decode):
        opts.decode = codec.decode

    if opts.store is not None:
        _require_methods(opts.store, "store", ("get", "set", "destroy"))

    if opts.custom_sess_id is not None:
        _require_methods(opts.custom_sess_id, "custom_sess_id", ("get", "set"))

    if opts.context_store is not None:
        if not callable(opts.context_store):
            raise ConfigurationException("context_store must be a class or factory")
        if isinstance(opts.context_store, type):
            _require_methods(opts.context_store, "context_store", ("get", "set", "destroy"))

    if opts.valid is not None and not callable(opts.valid):
        raise ConfigurationException("valid must be a callable")

    if opts.observer is not None and not callable(opts.observer):
        raise ConfigurationException("observer must be a callable")

    if opts.gen_sess_id is None:
        opts.gen_sess_id = codec.prefixed_generator(opts.prefix) if opts.prefix else codec.gen_session_id
    elif not callable(opts.gen_sess_id):
        raise ConfigurationException("gen_sess_id must be a callable")

    logger.debug(
        "session_options",
        key=opts.key,
        max_age=opts.max_age,
        renew=opts.renew,
        auto_commit=opts.auto_commit,
        store=type(opts.store).__name__ if opts.store is not None else None,
    )
    return opts
