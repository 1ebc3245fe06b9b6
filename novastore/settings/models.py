from datetime import datetime
from novastore import db


class ProfileSettings(db.Model):
    """
    Free-form profile settings, one row per signed-in identity.
    `data` is read field-by-field; anything of the wrong type falls back
    to the default for that field.
    """
    __tablename__ = 'profile_settings'

    user_id    = db.Column(db.String(64), primary_key=True)
    data       = db.Column(db.JSON, nullable=False, default=dict)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    def __repr__(self):
        return f"<ProfileSettings {self.user_id!r}>"
