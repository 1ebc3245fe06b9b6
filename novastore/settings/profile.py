"""
novastore/settings/profile.py
-----------------------------
Load / validate / save the profile settings page.
"""
import re

from novastore import db
from novastore.settings.models import ProfileSettings
from novastore.utils.messages import message_for

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

TEXT_FIELDS = ('fullName', 'profileEmail', 'phone', 'city', 'company', 'bio')
FLAG_FIELDS = ('receiveOrderAlerts', 'receiveMarketingEmails')


def defaults_for(user) -> dict:
    return {
        'fullName': '',
        'profileEmail': user.email if user is not None else '',
        'phone': '',
        'city': '',
        'company': '',
        'bio': '',
        'receiveOrderAlerts': True,
        'receiveMarketingEmails': False,
    }


def _merge(defaults: dict, stored) -> dict:
    if not isinstance(stored, dict):
        return defaults
    merged = dict(defaults)
    for key in TEXT_FIELDS:
        if isinstance(stored.get(key), str):
            merged[key] = stored[key]
    for key in FLAG_FIELDS:
        if isinstance(stored.get(key), bool):
            merged[key] = stored[key]
    return merged


def load_profile(user) -> dict:
    row = db.session.get(ProfileSettings, user.user_id)
    defaults = defaults_for(user)
    if row is None:
        return defaults
    return _merge(defaults, row.data)


def validate_profile(data: dict) -> dict:
    """Returns {field: message}; empty when the profile can be saved."""
    errors = {}
    for key in TEXT_FIELDS:
        if data.get(key) is not None and not isinstance(data[key], str):
            errors[key] = message_for('profile_field_invalid')

    full_name = data.get('fullName')
    if 'fullName' not in errors and not (isinstance(full_name, str) and full_name.strip()):
        errors['fullName'] = message_for('profile_name_required')
    email = data.get('profileEmail')
    if 'profileEmail' not in errors and not (isinstance(email, str) and EMAIL_RE.match(email.strip())):
        errors['profileEmail'] = message_for('profile_email_invalid')
    return errors


def save_profile(user, data: dict) -> dict:
    """Persist a validated profile and return what was stored."""
    profile = _merge(load_profile(user), data)
    profile['fullName'] = profile['fullName'].strip()
    profile['profileEmail'] = profile['profileEmail'].strip()

    row = db.session.get(ProfileSettings, user.user_id)
    if row is None:
        row = ProfileSettings(user_id=user.user_id)
        db.session.add(row)
    row.data = profile
    db.session.commit()
    return profile


def reset_profile(user) -> dict:
    row = db.session.get(ProfileSettings, user.user_id)
    if row is not None:
        db.session.delete(row)
        db.session.commit()
    return defaults_for(user)
