from flask import g, redirect, url_for, request, jsonify, current_app
from novastore.auth import auth
from novastore.auth.credentials import authenticate, register, RegistrationError
from novastore.auth.decorators import login_required
from novastore.auth.session import current_user, establish_session, end_session, safe_redirect
from novastore.utils.messages import error_body

TRUTHY = ('1', 'true', 'on', 'yes')


def _form_values():
    """Read credentials from a form post or a JSON body."""
    data = request.get_json(silent=True) if request.is_json else None
    if not isinstance(data, dict):
        data = request.form.to_dict()
    remember = data.get('rememberMe')
    return {
        'email':           str(data.get('email') or '').strip(),
        'password':        str(data.get('password') or ''),
        'confirmPassword': str(data.get('confirmPassword') or ''),
        'rememberMe':      remember is True or str(remember).lower() in TRUTHY,
        'redirectTo':      safe_redirect(data.get('redirectTo')),
    }


def _form_error(kind, values):
    return jsonify(error_body(kind, values={
        'email':      values['email'],
        'rememberMe': values['rememberMe'],
        'redirectTo': values['redirectTo'],
    })), 400


@auth.route('/login', methods=['GET', 'POST'])
def login():
    """
    GET  → where the form should send the user afterwards.
    POST → validate credentials, mint the session cookie, redirect.
    """
    # Already logged in → go straight to the target
    if current_user() is not None:
        return redirect(safe_redirect(request.args.get('redirectTo')))

    if request.method == 'GET':
        return jsonify({'redirectTo': safe_redirect(request.args.get('redirectTo'))})

    values = _form_values()
    if not values['email'] or not values['password']:
        return _form_error('login_validation', values)

    user = authenticate(values['email'], values['password'])
    if user is None:
        # Deliberately vague — don't reveal which field was wrong
        current_app.logger.warning(f"Failed login attempt for email: {values['email']}")
        return _form_error('invalid_credentials', values)

    establish_session(user, remember=values['rememberMe'])
    current_app.logger.info(f"User {user.email} ({user.role.value}) logged in successfully.")
    return redirect(values['redirectTo'])


@auth.route('/signup', methods=['GET', 'POST'])
def signup():
    """
    GET  → where the form should send the user afterwards.
    POST → create a viewer account and sign it in.
    """
    if current_user() is not None:
        return redirect(safe_redirect(request.args.get('redirectTo')))

    if request.method == 'GET':
        return jsonify({'redirectTo': safe_redirect(request.args.get('redirectTo'))})

    values = _form_values()
    if not values['email'] or not values['password'] or not values['confirmPassword']:
        return _form_error('signup_validation', values)

    if len(values['password']) < current_app.config['SIGNUP_PASSWORD_MIN_LENGTH']:
        return _form_error('signup_password_min', values)

    if values['password'] != values['confirmPassword']:
        return _form_error('signup_password_mismatch', values)

    try:
        user = register(values['email'], values['password'])
    except RegistrationError as e:
        current_app.logger.warning(f"Signup refused for {values['email']}: {e.kind}")
        return _form_error(e.kind, values)

    establish_session(user, remember=values['rememberMe'])
    current_app.logger.info(f"Viewer {user.email} signed up.")
    return redirect(values['redirectTo'])


@auth.route('/logout', methods=['POST'])
def logout():
    """Clear the session and redirect to login."""
    user = current_user()
    end_session()
    if user is not None:
        current_app.logger.info(f"User {user.email} logged out.")
    return redirect(url_for('auth.login'))


@auth.route('/me')
@login_required
def me():
    return jsonify(g.user.to_payload())
