import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from config import config

db = SQLAlchemy()


def create_app(config_name='default'):
    """Application factory — creates and configures the Flask app."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    _check_required_config(app)

    # ── Logging ───────────────────────────────────────────────────
    from novastore.utils.logging import setup_logging
    setup_logging(app)

    # ── Extensions ────────────────────────────────────────────────
    db.init_app(app)

    # ── Blueprints ────────────────────────────────────────────────
    from novastore.main import main as main_blueprint
    app.register_blueprint(main_blueprint)

    from novastore.auth import auth as auth_blueprint
    app.register_blueprint(auth_blueprint, url_prefix='/auth')

    from novastore.catalog import catalog as catalog_blueprint
    app.register_blueprint(catalog_blueprint, url_prefix='/products')

    from novastore.settings import settings as settings_blueprint
    app.register_blueprint(settings_blueprint, url_prefix='/settings')

    # ── Error Handlers ────────────────────────────────────────────
    register_error_handlers(app)

    # ── CLI Commands ──────────────────────────────────────────────
    register_commands(app)

    # ── ProxyFix (HTTPS termination in front of gunicorn) ──
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app


def _check_required_config(app):
    """Refuse to start without the secrets the auth layer depends on."""
    if not app.config.get('SECRET_KEY'):
        raise RuntimeError('SECRET_KEY must be set: session cookies cannot be signed without it.')
    if not app.config.get('ADMIN_PASSWORD'):
        raise RuntimeError('ADMIN_PASSWORD must be set.')
    if not app.config.get('PASSWORD_PEPPER'):
        app.config['PASSWORD_PEPPER'] = app.config['SECRET_KEY']
    app.config['ADMIN_EMAIL'] = (app.config.get('ADMIN_EMAIL') or '').strip().lower()


def register_error_handlers(app):
    from flask import redirect, request, url_for
    from novastore.auth.session import Unauthenticated, Forbidden
    from novastore.utils.messages import error_body

    @app.errorhandler(Unauthenticated)
    def unauthenticated(e):
        app.logger.info(f"Unauthenticated request to {e.redirect_to}, redirecting to login.")
        return redirect(url_for('auth.login', redirectTo=e.redirect_to))

    @app.errorhandler(Forbidden)
    def forbidden_role(e):
        app.logger.warning(f"Forbidden: {e.user.email} ({e.user.role.value}) requested {request.path}")
        return jsonify(error_body('forbidden')), 403

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify(error_body('forbidden')), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify(error_body('not_found')), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify(error_body('method_not_allowed')), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify(error_body('generic_error')), 500


def register_commands(app):
    """Register custom Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('✅  Database tables created.')

    @app.cli.command('seed-catalog')
    @click.option('--force', is_flag=True, help='Replace collections that are already seeded.')
    def seed_catalog(force):
        """Populate categories and products from the seed documents."""
        from novastore.catalog import categories as category_store
        from novastore.catalog import store as product_store
        from novastore.catalog.seeding import SeedLoadError, reset_collection

        db.create_all()
        if force:
            reset_collection(category_store.COLLECTION)
            reset_collection(product_store.COLLECTION)

        try:
            categories = category_store.ensure_seeded()
            products = product_store.ensure_seeded()
        except SeedLoadError as e:
            click.echo(f'❌  Seeding failed: {e}')
            raise SystemExit(1)

        click.echo(f'✅  {len(categories)} categories, {len(products)} products in catalog.')

    @app.cli.command('reset-catalog')
    def reset_catalog():
        """Drop stored catalog rows so the next request reseeds them."""
        from novastore.catalog import categories as category_store
        from novastore.catalog import store as product_store
        from novastore.catalog.seeding import reset_collection

        reset_collection(product_store.COLLECTION)
        reset_collection(category_store.COLLECTION)
        click.echo('✅  Catalog cleared. It will be reseeded on next use.')

    @app.cli.command('show-viewers')
    def show_viewers():
        """List self-registered viewer accounts (diagnostic)."""
        from novastore.auth.models import ViewerUser

        rows = ViewerUser.query.order_by(ViewerUser.created_at.asc()).all()
        if not rows:
            click.echo('No viewer accounts registered.')
            return
        click.echo(f'{"User ID":<40} {"Email":<36} {"Created"}')
        click.echo('─' * 96)
        for row in rows:
            click.echo(f'{row.user_id:<40} {row.email:<36} {row.created_at:%Y-%m-%d %H:%M}')
