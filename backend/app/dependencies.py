"""
Snapbook Backend - Request Dependencies
========================================

What:  FastAPI dependencies shared by the owner-side routes.

Identity:
    Authentication happens upstream (identity provider / gateway), which
    forwards the authenticated user's id in the X-User-ID header. The backend
    only checks its shape; a missing or malformed header is a 401.
"""

import re
from typing import Optional

from fastapi import Header

from app.exceptions import AuthenticationError

USER_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-ID"),
) -> str:
    if not x_user_id or not USER_ID_RE.fullmatch(x_user_id):
        raise AuthenticationError()
    return x_user_id
