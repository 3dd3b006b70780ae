from __future__ import annotations

from fastapi import Depends, HTTPException, Request


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def ensure_group_member(user: dict, group_id: str) -> None:
    if group_id not in user.get("groups", []):
        raise HTTPException(status_code=403, detail="Not a member of this group")


def require_group_member(group_id: str, user: dict = Depends(require_user)) -> dict:
    """For routes with a ``{group_id}`` path parameter: 401 or 403 unless a member."""
    ensure_group_member(user, group_id)
    return user
