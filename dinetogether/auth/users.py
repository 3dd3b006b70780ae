from __future__ import annotations

from typing import Any

import bcrypt
from pydantic import BaseModel

_users: dict[str, dict[str, Any]] = {}


class LoginRequest(BaseModel):
    username: str
    password: str


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed demo users on import. Both belong to the demo dining group."""
    _users["user"] = {
        "id": "user-1",
        "password_hash": _hash_password("user123"),
        "role": "user",
        "groups": ["friday-dinner"],
    }
    _users["admin"] = {
        "id": "admin-1",
        "password_hash": _hash_password("admin123"),
        "role": "admin",
        "groups": ["friday-dinner", "team-lunch"],
    }


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{id, username, role, groups}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {
            "id": record["id"],
            "username": username,
            "role": record["role"],
            "groups": list(record["groups"]),
        }
    return None


_seed_users()
