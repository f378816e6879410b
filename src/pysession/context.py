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
"""SessionContext — per-request session lifecycle controller.

Lifecycle:
1. Hydration - from the cookie (lazily, on first access) or from the
   store (eagerly, via :meth:`SessionContext.load`)
2. Validation - missing, expired, or rejected by the custom validator
3. Mutation - the handler reads and writes the :class:`Session`
4. Commit - remove, save, renew, or do nothing

Concurrent requests carrying the same session id are not coordinated:
each loads its own copy and the last store write wins.
"""

from __future__ import annotations

import asyncio
import enum
import time
from collections.abc import Mapping
from typing import Any

import structlog

from pysession.codec import snapshot
from pysession.cookies import COOKIE_EXPIRED_DATE
from pysession.exceptions import SessionDecodeException, SessionMisuseException, SessionNotLoadedException
from pysession.logging import session_digest
from pysession.options import (
    ONE_DAY,
    RENEW_THRESHOLD,
    SESSION,
    STORE_TTL_HEADROOM,
    SessionOptions,
)
from pysession.ports.http import RequestContext
from pysession.ports.outbound import SessionEvent, SessionStore, SetOptions
from pysession.session import EXPIRE_KEY, MAX_AGE_KEY, Session

logger = structlog.get_logger("pysession")


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    READY = "ready"
    DESTROYED = "destroyed"
    COMMITTING = "committing"
    COMMITTED = "committed"


class SaveReason(enum.Enum):
    FORCED = "forced"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class Validity(enum.Enum):
    VALID = "valid"
    MISSING = "missing"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    REJECTED = "rejected"


class SessionContext:
    """Owns the session of one request.

    Attributes:
        ctx: The request context this controller is composed with.
        options: A per-request copy of the middleware options; a stored
            ``_maxAge`` or an assignment to ``Session.max_age`` changes it
            for this request only.
        store: The store in use, or ``None`` in cookie-only mode.
        prev_hash: Snapshot of the payload as hydrated, ``None`` if nothing
            valid was loaded.
        need_renew: Whether the last commit decided to push the expiry forward.
    """

    def __init__(self, ctx: RequestContext, options: SessionOptions) -> None:
        self.ctx = ctx
        self.options = options.copy()
        self.store: SessionStore | None = (
            options.context_store(ctx) if options.context_store is not None else options.store
        )
        self.prev_hash: str | None = None
        self.need_renew = False
        self.state = SessionState.UNINITIALIZED
        self._session: Session | None = None
        self._session_id: str | None = None
        self._destroyed = False
        self._removed = False
        self._saved = False

    # -- accessors --------------------------------------------------------

    @property
    def session_id(self) -> str | None:
        """The store key; generated on first use, ``None`` without a store."""
        if self.store is None:
            return None
        if self._session_id is None:
            self._session_id = self.options.gen_sess_id(self.ctx)  # type: ignore[misc]
        return self._session_id

    @property
    def now(self) -> int:
        if self.ctx.now is None:
            self.ctx.now = now_ms()
        return self.ctx.now

    def get(self) -> Session | None:
        """Return the session, hydrating from the cookie on first access.

        Returns ``None`` once the session has been destroyed.
        """
        if self._destroyed:
            return None
        if self._session is not None:
            return self._session
        if self.store is not None:
            raise SessionNotLoadedException(
                "Session accessed before it was loaded from the store; await load() first"
            )
        self._init_from_cookie()
        return self._session

    def set(self, value: Any) -> None:
        """Replace the session: ``None`` destroys it, a mapping repopulates it."""
        if value is None:
            self._destroyed = True
            self._session = None
            self.state = SessionState.DESTROYED
            return

        if isinstance(value, Mapping):
            data = value.to_json() if isinstance(value, Session) else dict(value)
            self._destroyed = False
            self._removed = False
            # Keep the existing id so the old record is overwritten, not orphaned.
            self._create_session(data, self._session_id)
            return

        raise SessionMisuseException(
            "session can only be set to None or a mapping",
            context={"type": type(value).__name__},
        )

    # -- hydration --------------------------------------------------------

    async def load(self) -> None:
        """Hydrate from the store.  A no-op in cookie-only mode."""
        if self.store is None or self._session is not None or self._destroyed:
            return

        self.state = SessionState.HYDRATING
        if self.options.custom_sess_id is not None:
            session_id = self.options.custom_sess_id.get(self.ctx)
            source = "custom"
        else:
            session_id = self.ctx.cookies.get(self.options.key, self.options.cookie_options())
            source = "cookie"

        if not session_id:
            logger.debug("session_id_missing", source=source)
            self._create_session()
            return

        record = await self.store.get(session_id, self.options.max_age, self.ctx)
        validity = self._validate(record, session_id)
        if validity is not Validity.VALID:
            logger.debug("session_discarded", reason=validity.value, session=session_digest(session_id))
            if validity is not Validity.REJECTED:
                await self.store.destroy(session_id, self.ctx)
            self._create_session()
            return

        self._create_session(record, session_id)
        self.prev_hash = snapshot(self._session.to_json())  # type: ignore[union-attr]
        logger.debug("session_hydrated", source="store", session=session_digest(session_id))

    def _init_from_cookie(self) -> None:
        key = self.options.key
        cookie = self.ctx.cookies.get(key, self.options.cookie_options())
        if not cookie:
            self._create_session()
            return

        try:
            record = self.options.decode(cookie)
        except ValueError as exc:
            # Malformed or legacy cookie: start over.
            logger.debug("session_cookie_unreadable", error=str(exc), error_type=type(exc).__name__)
            self._create_session()
            return
        except Exception as exc:
            # Clear it so the next request does not fail the same way.
            self.ctx.cookies.set(key, "", self._removal_cookie_options())
            logger.warning("session_cookie_decode_failed", error=str(exc), error_type=type(exc).__name__)
            raise SessionDecodeException(
                f"Failed to decode session cookie '{key}'",
                headers={"set-cookie": self.ctx.cookies.outgoing_headers()},
                context={"key": key},
            ) from exc

        if self._validate(record) is not Validity.VALID:
            self._create_session()
            return

        self._create_session(record)
        self.prev_hash = snapshot(self._session.to_json())  # type: ignore[union-attr]
        logger.debug("session_hydrated", source="cookie")

    def _validate(self, record: Any, session_id: str | None = None) -> Validity:
        if record is None or not isinstance(record, Mapping):
            return Validity.MISSING

        expire = record.get(EXPIRE_KEY)
        if expire is not None and not _is_timestamp(expire):
            return Validity.MALFORMED
        if MAX_AGE_KEY in record and not _is_stored_max_age(record[MAX_AGE_KEY]):
            return Validity.MALFORMED
        if expire and expire < self.now:
            return Validity.EXPIRED

        valid = self.options.valid
        if valid is not None and not valid(self.ctx, dict(record)):
            self._emit("invalid", session_id, record)
            return Validity.REJECTED

        return Validity.VALID

    def _emit(self, name: str, session_id: str | None, value: Any) -> None:
        observer = self.options.observer
        if observer is None:
            return
        event = SessionEvent(name=name, session_id=session_id, value=value, ctx=self.ctx)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            observer(event)
            return
        loop.call_soon(observer, event)

    def _create_session(self, data: Mapping[str, Any] | None = None, session_id: str | None = None) -> None:
        if self.store is not None:
            self._session_id = session_id
        self._session = Session(self, data)
        self.state = SessionState.READY

    # -- commit -----------------------------------------------------------

    async def commit(self) -> None:
        """Persist, renew, or remove the session as its state requires."""
        if self._destroyed:
            if not self._removed:
                self.state = SessionState.COMMITTING
                await self._remove()
                self._removed = True
            self.state = SessionState.COMMITTED
            return

        session = self._session
        if session is None:
            return

        self.state = SessionState.COMMITTING
        payload = session.to_json()
        self.need_renew = self._should_renew(session)
        reason = self._save_reason(session, payload)
        logger.debug(
            "session_commit",
            reason=reason.value if reason else None,
            renew=self.need_renew,
            session=session_digest(self._session_id),
        )

        if reason is not None and (reason is not SaveReason.UNCHANGED or self.need_renew):
            await self._save(session, payload, changed=reason is not SaveReason.UNCHANGED)
        self.state = SessionState.COMMITTED

    def _should_renew(self, session: Session) -> bool:
        max_age = self.options.max_age
        if max_age == SESSION:
            return not self._saved

        if not self.options.renew or not session.expire:
            return False

        # Judge the remaining lifetime against the max age the expiry was
        # written with; fall back to the configured one.
        policy = session.stored_max_age
        if not _is_duration(policy):
            policy = max_age
        if not _is_duration(policy):
            return False
        return session.expire - self.now < policy * RENEW_THRESHOLD  # type: ignore[operator]

    def _save_reason(self, session: Session, payload: dict[str, Any]) -> SaveReason | None:
        if session.require_save:
            return SaveReason.FORCED
        if self.prev_hash is None and not payload:
            return None
        if snapshot(payload) != self.prev_hash:
            return SaveReason.CHANGED
        return SaveReason.UNCHANGED

    async def _save(self, session: Session, payload: dict[str, Any], changed: bool) -> None:
        opts = self.options
        now = self.now
        new_sess = session.expire is None
        max_age = opts.max_age or ONE_DAY

        if max_age == SESSION:
            expire = now + opts.sess_store_age
            retention = opts.sess_store_age
            cookie_max_age = None
        else:
            if self.need_renew or new_sess:
                expire = now + max_age
            else:
                expire = session.expire  # type: ignore[assignment]
            retention = max(max_age, expire - now)
            cookie_max_age = max_age

        record = dict(payload)
        record[EXPIRE_KEY] = expire
        record[MAX_AGE_KEY] = max_age
        cookie_options = opts.cookie_options(max_age=cookie_max_age)

        if self.store is not None:
            session_id = self.session_id
            await self.store.set(
                session_id,
                record,
                retention + STORE_TTL_HEADROOM,
                SetOptions(changed=changed, new_sess=new_sess, renew=self.need_renew, ctx=self.ctx),
            )
            if opts.custom_sess_id is not None:
                opts.custom_sess_id.set(self.ctx, session_id)
            else:
                self.ctx.cookies.set(opts.key, session_id, cookie_options)
            logger.debug("session_saved", target="store", session=session_digest(session_id), changed=changed)
        else:
            self.ctx.cookies.set(opts.key, opts.encode(record), cookie_options)
            logger.debug("session_saved", target="cookie", changed=changed)

        session._mark_saved(expire, max_age)
        self.prev_hash = snapshot(payload)
        self.need_renew = False
        self._saved = True

    async def _remove(self) -> None:
        session_id = self._session_id
        if self.store is not None and session_id:
            await self.store.destroy(session_id, self.ctx)
        self.ctx.cookies.set(self.options.key, "", self._removal_cookie_options())
        logger.debug("session_removed", session=session_digest(session_id))

    def _removal_cookie_options(self):
        return self.options.cookie_options(max_age=None, expires=COOKIE_EXPIRED_DATE)


def _is_duration(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_timestamp(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_stored_max_age(value: Any) -> bool:
    return value == SESSION or _is_duration(value)
