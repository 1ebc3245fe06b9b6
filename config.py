import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    """Base configuration shared across all environments."""
    # Cookie signing secret. No default here: create_app refuses to start without it.
    SECRET_KEY = os.environ.get('SECRET_KEY')
    PASSWORD_PEPPER = os.environ.get('PASSWORD_PEPPER')

    # The single admin identity lives in configuration, never in the viewer table
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@novastore.com').strip().lower()
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 300,
        "pool_pre_ping": True,
    }

    # Session cookie: signed, httpOnly, Lax, site-wide
    SESSION_COOKIE_NAME = 'novastore_session'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_PATH = '/'
    # "Remember me" sessions last one week
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)

    SIGNUP_PASSWORD_MIN_LENGTH = 6

    # Seed documents for first-use catalog population
    SEED_DIR = os.environ.get('SEED_DIR', os.path.join(BASE_DIR, 'novastore', 'seed'))
    LOG_DIR = os.environ.get('LOG_DIR', os.path.join(BASE_DIR, 'logs'))

    # UI preferences injected as plain configuration
    DEFAULT_THEME = os.environ.get('DEFAULT_THEME', 'system')
    DEFAULT_LANGUAGE = os.environ.get('DEFAULT_LANGUAGE', 'en')


class DevelopmentConfig(Config):
    """Development environment configuration."""
    DEBUG = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'novastore-dev-session-secret-change-me')
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(os.getcwd(), "novastore.db")}'
    )


class ProductionConfig(Config):
    """Production environment configuration."""
    DEBUG = False

    # Correct PostgreSQL scheme and accessing env var
    _db_url = os.environ.get('DATABASE_URL')
    if _db_url and _db_url.startswith('postgres://'):
        _db_url = _db_url.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = _db_url or f'sqlite:///{os.path.join(BASE_DIR, "novastore.db")}'

    # Production never falls back to the demo password
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')

    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing environment configuration."""
    TESTING = True
    SECRET_KEY = 'novastore-test-secret'
    ADMIN_EMAIL = 'admin@novastore.com'
    ADMIN_PASSWORD = 'admin123'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}  # SQLite doesn't use the prod pool settings
    SESSION_COOKIE_SECURE = False
    SEED_DIR = os.path.join(BASE_DIR, 'novastore', 'seed')
    LOG_DIR = None  # stdout only


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
