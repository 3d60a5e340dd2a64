"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Cookie, Header, HTTPException

from crowelogic.assistant import Assistant
from crowelogic.config import get_settings
from crowelogic.store import Store, build_store

USER_COOKIE = "userId"

_store: Store | None = None
_assistant: Assistant | None = None


def get_store() -> Store:
    """
    Return the process-wide store. The backend is chosen on first use and
    kept for the lifetime of the process.
    """
    global _store
    if _store:
        return _store

    _store = build_store(get_settings())
    return _store


async def close_store() -> None:
    global _store
    if _store:
        await _store.aclose()
        _store = None


def get_assistant() -> Assistant:
    global _assistant
    if _assistant:
        return _assistant

    settings = get_settings()
    _assistant = Assistant(api_key=settings.gemini_api_key, model=settings.gemini_model)
    return _assistant


def get_user_id(
    user_cookie: Optional[str] = Cookie(default=None, alias=USER_COOKIE),
    x_user_id: Optional[str] = Header(default=None),
) -> str:
    """
    Session identity issued by the auth layer, read from the `userId`
    cookie or the `X-User-Id` header.
    """
    user_id = (user_cookie or x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing user session")
    return user_id
