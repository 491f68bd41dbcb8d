"""Caller identification for per-user card collections."""

from .dependencies import get_current_user, CurrentUser

__all__ = [
    "get_current_user",
    "CurrentUser",
]
