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
"""Session — the request-scoped session data container."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pysession.context import SessionContext

EXPIRE_KEY = "_expire"
MAX_AGE_KEY = "_maxAge"


class Session(MutableMapping[str, Any]):
    """Ordered mapping of application values with expiry metadata.

    The reserved ``_expire`` and ``_maxAge`` record fields are held as
    attributes and never appear in iteration or :meth:`to_json`.  Other
    ``_``-prefixed keys may be set but are never persisted.

    Attributes:
        is_new: ``True`` if no valid prior session existed for this request.
        require_save: ``True`` once a save was forced via :meth:`save` or
            by assigning :attr:`max_age`.
    """

    def __init__(
        self,
        context: SessionContext,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        self._context = context
        self._data: dict[str, Any] = {}
        self._expire: int | None = None
        self._max_age: int | str | None = None
        self.is_new = data is None
        self.require_save = False

        for key, value in (data or {}).items():
            if key == EXPIRE_KEY:
                self._expire = value
            elif key == MAX_AGE_KEY:
                # A stored max age wins over the configured one for this request.
                self._max_age = value
                context.options.max_age = value
            else:
                self._data[key] = value

    # -- mapping protocol -------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in (EXPIRE_KEY, MAX_AGE_KEY):
            raise KeyError(f"'{key}' is reserved for session metadata")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_json())

    def __len__(self) -> int:
        return len(self.to_json())

    def __repr__(self) -> str:
        return f"Session({self.to_json()!r})"

    # -- public API -------------------------------------------------------

    def to_json(self) -> dict[str, Any]:
        """Return the application payload in insertion order."""
        return {k: v for k, v in self._data.items() if not k.startswith("_")}

    @property
    def length(self) -> int:
        return len(self)

    @property
    def populated(self) -> bool:
        return len(self) > 0

    @property
    def expire(self) -> int | None:
        """Absolute expiry in epoch milliseconds, ``None`` until first saved."""
        return self._expire

    @property
    def stored_max_age(self) -> int | str | None:
        """The max age this session was last persisted with."""
        return self._max_age

    @property
    def max_age(self) -> int | str | None:
        return self._context.options.max_age

    @max_age.setter
    def max_age(self, value: int | str | None) -> None:
        self._context.options.max_age = value
        self.require_save = True

    @property
    def session_id(self) -> str | None:
        """The store key, or ``None`` in cookie-only mode."""
        return self._context.session_id

    def save(self) -> None:
        """Persist this session at commit even if nothing changed."""
        self.require_save = True

    async def manually_commit(self) -> None:
        """Commit now; for handlers running with ``auto_commit=False``."""
        await self._context.commit()

    def _mark_saved(self, expire: int, max_age: int | str) -> None:
        self._expire = expire
        self._max_age = max_age
        self.is_new = False
        self.require_save = False
