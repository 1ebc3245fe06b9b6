from novastore import create_app, db
import os

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

# ── Startup: make sure tables exist ──
# The catalog itself seeds lazily on first request.
with app.app_context():
    db.create_all()
    app.logger.info("✅ Database tables checked/created.")

if __name__ == "__main__":
    app.run()
