import enum
from datetime import datetime
from novastore import db


class RoleEnum(enum.Enum):
    admin  = "admin"
    viewer = "viewer"


class ViewerUser(db.Model):
    """
    A self-registered, read-only account.
    Rows are only ever appended; the admin never lives in this table.
    """
    __tablename__ = 'viewer_users'

    id            = db.Column(db.Integer, primary_key=True)
    user_id       = db.Column(db.String(64), unique=True, nullable=False)
    email         = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at    = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    @property
    def role(self) -> RoleEnum:
        return RoleEnum.viewer

    def __repr__(self) -> str:
        return f"<ViewerUser {self.email!r}>"
