"""
novastore/auth/credentials.py
-----------------------------
Credential store: one configured admin plus self-registered viewers.

Viewer digests are werkzeug salted hashes over "<pepper>:<email>:<password>",
so a leaked row is useless without the server-side pepper.
"""
import hmac
import uuid
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from novastore import db
from novastore.auth.models import RoleEnum, ViewerUser
from novastore.auth.session import SessionUser

ADMIN_USER_ID = 'admin'

# Checked against when the email is unknown, so both failure paths cost one hash.
_TIMING_DUMMY_HASH = generate_password_hash('novastore:timing:dummy')


class RegistrationError(Exception):
    """Signup refused. `kind` is 'reserved_email' or 'email_exists'."""

    def __init__(self, kind: str):
        super().__init__(kind)
        self.kind = kind


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def _peppered(email: str, password: str) -> str:
    return f"{current_app.config['PASSWORD_PEPPER']}:{email}:{password}"


def hash_password(email: str, password: str) -> str:
    return generate_password_hash(_peppered(email, password))


def verify_password(email: str, password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, _peppered(email, password))


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))


def _admin_credentials():
    return current_app.config['ADMIN_EMAIL'], current_app.config['ADMIN_PASSWORD']


def authenticate(email: str, password: str) -> Optional[SessionUser]:
    """
    Resolve an email/password pair to a session user, or None.
    Unknown email and wrong password are indistinguishable to the caller.
    """
    normalized = normalize_email(email)
    password = password or ''
    admin_email, admin_password = _admin_credentials()

    # Both comparisons always run
    email_ok = _same(normalized, admin_email)
    password_ok = _same(password, admin_password)
    if email_ok & password_ok:
        return SessionUser(user_id=ADMIN_USER_ID, email=admin_email, role=RoleEnum.admin)

    viewer = ViewerUser.query.filter_by(email=normalized).first()
    if viewer is None:
        check_password_hash(_TIMING_DUMMY_HASH, _peppered(normalized, password))
        return None

    if not verify_password(normalized, password, viewer.password_hash):
        return None

    return SessionUser(user_id=viewer.user_id, email=viewer.email, role=RoleEnum.viewer)


def register(email: str, password: str) -> SessionUser:
    """
    Create a viewer account and return its session user.
    Raises RegistrationError('reserved_email') for the admin address and
    RegistrationError('email_exists') for an already registered viewer.
    """
    normalized = normalize_email(email)
    admin_email, _ = _admin_credentials()

    if normalized == admin_email:
        raise RegistrationError('reserved_email')

    if ViewerUser.query.filter_by(email=normalized).first() is not None:
        raise RegistrationError('email_exists')

    viewer = ViewerUser(
        user_id=f"viewer-{uuid.uuid4().hex}",
        email=normalized,
        password_hash=hash_password(normalized, password),
    )
    try:
        db.session.add(viewer)
        db.session.commit()
    except IntegrityError:
        # Another signup claimed the email between the check and the insert.
        db.session.rollback()
        raise RegistrationError('email_exists')

    return SessionUser(user_id=viewer.user_id, email=viewer.email, role=RoleEnum.viewer)
