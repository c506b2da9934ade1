"""Per-request cookie jar.

The jar starts from the cookies sent by the browser and records every
``Set-Cookie`` the engine wants to emit.  Reads after a write see the new
value, so one request never observes stale state.  :meth:`CookieJar.apply`
copies the pending writes onto whatever response is finally returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, TypeVar

from starlette.responses import Response

SAMESITE = "lax"

R = TypeVar("R", bound=Response)


@dataclass(frozen=True)
class PendingCookie:
    name: str
    value: str
    max_age: int  # 0 expires the cookie


class CookieJar:
    """Cookies of one request/response cycle."""

    def __init__(
            self,
            incoming: Mapping[str, str],
            secure: bool = False,
            path: str = "/",
            domain: Optional[str] = None,
            ) -> None:
        self._values: Dict[str, str] = dict(incoming)
        self._pending: Dict[str, PendingCookie] = {}
        self.secure = secure
        self.path = path or "/"
        self.domain = domain or None

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def set(self, name: str, value: str, max_age: int) -> None:
        self._values[name] = value
        self._pending[name] = PendingCookie(name, value, max_age)

    def expire(self, name: str) -> bool:
        """Queue deletion of ``name`` if the jar holds it.

        Returns:
            True if a deletion was queued, False when there was nothing to
            delete.
        """
        if name not in self._values:
            return False
        del self._values[name]
        self._pending[name] = PendingCookie(name, "", 0)
        return True

    @property
    def pending(self) -> List[PendingCookie]:
        return list(self._pending.values())

    def apply(self, response: R) -> R:
        """Write the pending cookies as ``Set-Cookie`` headers."""
        for cookie in self._pending.values():
            if cookie.max_age > 0:
                response.set_cookie(
                    cookie.name,
                    cookie.value,
                    max_age=cookie.max_age,
                    expires=cookie.max_age,
                    path=self.path,
                    domain=self.domain,
                    secure=self.secure,
                    httponly=True,
                    samesite=SAMESITE,
                )
            else:
                response.delete_cookie(
                    cookie.name,
                    path=self.path,
                    domain=self.domain,
                    secure=self.secure,
                    httponly=True,
                    samesite=SAMESITE,
                )
        return response


__all__ = ["CookieJar", "PendingCookie"]
