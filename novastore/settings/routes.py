from flask import current_app, g, jsonify, request

from novastore.auth.decorators import login_required
from novastore.settings import settings
from novastore.settings.profile import (
    FLAG_FIELDS, load_profile, reset_profile, save_profile, validate_profile,
)
from novastore.utils.messages import error_body

THEMES = ('light', 'dark', 'system')
LANGUAGES = ('en', 'tr')
PREFERENCE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

TRUTHY = ('1', 'true', 'on', 'yes')


def _submitted_profile() -> dict:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    data = request.form.to_dict()
    # Unchecked checkboxes are simply absent from a form post
    for key in FLAG_FIELDS:
        data[key] = data.get(key, '').lower() in TRUTHY
    return data


def _pick(value, allowed, default):
    return value if value in allowed else default


def current_preferences() -> dict:
    """Theme and language from cookies, falling back to configured defaults."""
    default_theme = _pick(current_app.config['DEFAULT_THEME'], THEMES, 'system')
    default_language = _pick(current_app.config['DEFAULT_LANGUAGE'], LANGUAGES, 'en')
    return {
        'theme': _pick(request.cookies.get('theme'), THEMES, default_theme),
        'language': _pick(request.cookies.get('lang'), LANGUAGES, default_language),
    }


# ── PROFILE ───────────────────────────────────────────────────────────────────

@settings.route('/profile')
@login_required
def profile():
    return jsonify(load_profile(g.user))


@settings.route('/profile', methods=['POST'])
@login_required
def update_profile():
    data = _submitted_profile()
    errors = validate_profile(data)
    if errors:
        return jsonify(error_body('validation_failed', fields=errors)), 400

    saved = save_profile(g.user, data)
    current_app.logger.info(f"Profile settings saved for {g.user.email}")
    return jsonify(saved)


@settings.route('/profile', methods=['DELETE'])
@login_required
def delete_profile():
    return jsonify(reset_profile(g.user))


# ── PREFERENCES ───────────────────────────────────────────────────────────────

@settings.route('/preferences')
@login_required
def preferences():
    return jsonify(current_preferences())


@settings.route('/preferences', methods=['POST'])
@login_required
def update_preferences():
    data = request.get_json(silent=True) if request.is_json else request.form.to_dict()
    if not isinstance(data, dict):
        data = {}
    prefs = current_preferences()
    prefs['theme'] = _pick(data.get('theme'), THEMES, prefs['theme'])
    prefs['language'] = _pick(data.get('language'), LANGUAGES, prefs['language'])

    response = jsonify(prefs)
    response.set_cookie('theme', prefs['theme'], max_age=PREFERENCE_COOKIE_MAX_AGE,
                        path='/', samesite='Lax')
    response.set_cookie('lang', prefs['language'], max_age=PREFERENCE_COOKIE_MAX_AGE,
                        path='/', samesite='Lax')
    return response
