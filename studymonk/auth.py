from __future__ import annotations

import typing as t

JsonDict = dict[str, t.Any]

ROLE_HIERARCHY = ("user", "instructor", "admin", "super_admin")

DEFAULT_ADMIN_FRONTEND_URL = "https://study-monk-admin-frontend.onrender.com"


def role_rank(role: str | None) -> int:
    try:
        return ROLE_HIERARCHY.index(str(role or "user"))
    except ValueError:
        return -1


def has_role(user: JsonDict | None, required: str = "user") -> bool:
    if not user:
        return False
    if required == "any":
        return True
    return role_rank(user.get("role")) >= role_rank(required)


def can_access_admin(user: JsonDict | None) -> bool:
    return bool(user) and role_rank(t.cast(JsonDict, user).get("role")) >= role_rank("instructor")


def user_id_of(user: JsonDict | None) -> str:
    if not user:
        return ""
    return str(user.get("_id") or user.get("id") or user.get("email") or "")


def public_user(user: JsonDict | None) -> JsonDict | None:
    if not user:
        return None
    return {k: v for k, v in user.items() if k not in ("password", "token")}
