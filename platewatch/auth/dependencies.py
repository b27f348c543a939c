from __future__ import annotations

from fastapi import Depends, HTTPException, Request


def get_current_user(request: Request) -> dict | None:
    """Signed-in user from the session, or ``None`` for a guest voter."""
    return request.session.get("user")


def require_user(user: dict | None = Depends(get_current_user)) -> dict:
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(user: dict = Depends(require_user)) -> dict:
    """401 for guests, 403 for voters."""
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
