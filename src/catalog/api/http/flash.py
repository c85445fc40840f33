"""One-time status messages that survive a redirect.

The message travels in a cookie set on the redirect and removed by the page
that displays it.
"""

from __future__ import annotations

from typing import Literal
from urllib.parse import quote, unquote

from fastapi import Request, Response
from pydantic import BaseModel
from starlette.responses import RedirectResponse

FLASH_COOKIE = "flash"
HOME_PATH = "/books"

FlashKind = Literal["success", "error"]


class Flash(BaseModel):
    kind: FlashKind
    message: str


def redirect_home(kind: FlashKind | None = None, message: str | None = None) -> RedirectResponse:
    """Redirect to the book list, optionally carrying a flash message."""
    response = RedirectResponse(url=HOME_PATH, status_code=303)
    if kind is not None and message is not None:
        response.set_cookie(FLASH_COOKIE, quote(f"{kind}:{message}"), httponly=True, samesite="lax")
    return response


def pop_flash(request: Request, response: Response) -> Flash | None:
    """Read the pending flash message and clear it so it is shown once."""
    raw = request.cookies.get(FLASH_COOKIE)
    if not raw:
        return None

    response.delete_cookie(FLASH_COOKIE)
    kind, _, message = unquote(raw).partition(":")
    if kind not in ("success", "error"):
        return None
    return Flash(kind=kind, message=message)
