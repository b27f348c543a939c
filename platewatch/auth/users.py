from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register_user(username: str, password: str, role: str = "voter", display_name: str | None = None) -> None:
    _users[username] = {
        "password_hash": _hash_password(password),
        "role": role,
        "display_name": display_name or username,
    }


def _seed_users() -> None:
    """Demo accounts: two voters and one admin."""
    register_user("alice", "alice123", display_name="Alice")
    register_user("bob", "bob123", display_name="Bob")
    register_user("admin", "admin123", role="admin", display_name="Admin")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role, display_name}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {
            "username": username,
            "role": record["role"],
            "display_name": record["display_name"],
        }
    return None


_seed_users()
