"""Cookie access for services, independent of the web framework."""

from dataclasses import dataclass
from typing import Literal, Protocol

from fastapi import Request, Response

SameSite = Literal["lax", "strict", "none"]


class CookieJar(Protocol):
    """Read and write the cookies of one client."""

    def get(self, name: str) -> str | None: ...

    def set(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = False,
        samesite: SameSite = "lax",
    ) -> None: ...

    def delete(self, name: str, *, path: str = "/", domain: str | None = None) -> None: ...


class ResponseCookieJar:
    """Cookies of an HTTP exchange: read from the request, written to the response.

    Writes are visible to later reads in the same request.
    """

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response
        self._pending: dict[str, str | None] = {}

    def get(self, name: str) -> str | None:
        if name in self._pending:
            return self._pending[name]
        return self.request.cookies.get(name)

    def set(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = False,
        samesite: SameSite = "lax",
    ) -> None:
        self.response.set_cookie(
            name,
            value,
            max_age=max_age,
            path=path,
            domain=domain,
            secure=secure,
            httponly=httponly,
            samesite=samesite,
        )
        self._pending[name] = value

    def delete(self, name: str, *, path: str = "/", domain: str | None = None) -> None:
        self.response.delete_cookie(name, path=path, domain=domain)
        self._pending[name] = None

    def written_header(self, name: str) -> dict[str, str]:
        """The latest Set-Cookie header written for ``name``, as a header dict (or empty)."""
        prefix = f"{name}=".encode("latin-1")
        for key, value in reversed(self.response.raw_headers):
            if key == b"set-cookie" and value.startswith(prefix):
                return {"set-cookie": value.decode("latin-1")}
        return {}


@dataclass
class StoredCookie:
    value: str
    max_age: int | None
    path: str
    domain: str | None
    secure: bool
    httponly: bool
    samesite: SameSite


class MemoryCookieJar:
    """Cookie jar kept in a dict, for callers outside an HTTP request."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.cookies: dict[str, StoredCookie] = {
            name: StoredCookie(value, None, "/", None, False, False, "lax")
            for name, value in (initial or {}).items()
        }

    def get(self, name: str) -> str | None:
        cookie = self.cookies.get(name)
        return cookie.value if cookie else None

    def set(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = False,
        samesite: SameSite = "lax",
    ) -> None:
        self.cookies[name] = StoredCookie(value, max_age, path, domain, secure, httponly, samesite)

    def delete(self, name: str, *, path: str = "/", domain: str | None = None) -> None:
        self.cookies.pop(name, None)
