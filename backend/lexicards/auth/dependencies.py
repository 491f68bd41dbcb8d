"""FastAPI dependencies identifying the caller.

There is no authentication: the X-User-Id header only selects which card
collection a request works on, the way each browser kept its own cards.
"""

from fastapi import HTTPException, Header, status
from pydantic import BaseModel

USER_ID_MAX_LENGTH = 128


class CurrentUser(BaseModel):
    """
    Represents the caller of a request.

    Attributes:
        user_id: Opaque identifier taken from the X-User-Id header.
    """

    user_id: str


async def get_current_user(
    x_user_id: str | None = Header(None, description="Caller ID selecting the card collection"),
) -> CurrentUser:
    """
    FastAPI dependency that returns the caller named by the X-User-Id header.

    Raises:
        HTTPException: 401 if the header is missing or blank, 400 if it is too long.
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    user_id = x_user_id.strip()
    if len(user_id) > USER_ID_MAX_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"X-User-Id must be at most {USER_ID_MAX_LENGTH} characters",
        )

    return CurrentUser(user_id=user_id)
