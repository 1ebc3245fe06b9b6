"""
novastore/auth/session.py
-------------------------
Session lifecycle on top of Flask's signed cookie session.

There is no server-side session table: the cookie IS the state.
The payload is always {'user': {'userId', 'email', 'role'}}.
A missing, tampered or structurally invalid cookie reads as "no session".
"""
from dataclasses import dataclass
from typing import Optional

from flask import request, session

from novastore.auth.models import RoleEnum

USER_SESSION_KEY = 'user'


class Unauthenticated(Exception):
    """No valid session. Carries the path+query to return to after login."""

    def __init__(self, redirect_to: str):
        super().__init__(redirect_to)
        self.redirect_to = redirect_to


class Forbidden(Exception):
    """Valid session, wrong role."""

    def __init__(self, user: 'SessionUser', required: RoleEnum):
        super().__init__(f"{user.email} lacks role {required.value}")
        self.user = user
        self.required = required


@dataclass(frozen=True)
class SessionUser:
    user_id: str
    email: str
    role: RoleEnum

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin

    def to_payload(self) -> dict:
        return {'userId': self.user_id, 'email': self.email, 'role': self.role.value}

    @classmethod
    def from_payload(cls, value) -> Optional['SessionUser']:
        """Structural check of a decoded cookie payload; None if it does not fit."""
        if not isinstance(value, dict):
            return None
        user_id = value.get('userId')
        email = value.get('email')
        role = value.get('role')
        if not isinstance(user_id, str) or not isinstance(email, str):
            return None
        if role not in (RoleEnum.admin.value, RoleEnum.viewer.value):
            return None
        return cls(user_id=user_id, email=email, role=RoleEnum(role))


def establish_session(user: SessionUser, remember: bool = False) -> None:
    """
    Write the user into the signed session cookie.
    remember=False → browser-session cookie (no expiry).
    remember=True  → persists for PERMANENT_SESSION_LIFETIME (one week).
    """
    session.clear()
    session[USER_SESSION_KEY] = user.to_payload()
    session.permanent = bool(remember)


def current_user() -> Optional[SessionUser]:
    return SessionUser.from_payload(session.get(USER_SESSION_KEY))


def require_user(role: Optional[RoleEnum] = None) -> SessionUser:
    """
    Return the signed-in user or raise.
    Unauthenticated → caller is redirected to login with the current path+query.
    Forbidden       → a role was demanded and the session has another one.
    """
    user = current_user()
    if user is None:
        raise Unauthenticated(request_target())
    if role is not None and user.role != role:
        raise Forbidden(user, role)
    return user


def end_session() -> None:
    """Unconditionally drop the session cookie."""
    session.clear()


def request_target() -> str:
    query = request.query_string.decode('utf-8', errors='replace')
    return f"{request.path}?{query}" if query else request.path


def safe_redirect(to, default: str = '/dashboard') -> str:
    """Only allow local absolute paths as redirect targets."""
    if not to or not isinstance(to, str):
        return default
    if not to.startswith('/') or to.startswith(('//', '/\\')):
        return default
    return to
