"""
novastore/utils/logging.py
──────────────────────────
Configures structured logging for the admin dashboard.
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request, session


class RequestFormatter(logging.Formatter):
    """
    Custom formatter that injects request info (IP, URL, signed-in email)
    into logs if context is available.
    """
    def format(self, record):
        if has_request_context():
            record.url = request.url
            record.remote_addr = request.remote_addr
            user = session.get('user')
            record.user = user.get('email') if isinstance(user, dict) else '-'
        else:
            record.url = None
            record.remote_addr = None
            record.user = '-'
        return super().format(record)


def setup_logging(app):
    """
    Configure rotating file logging: <LOG_DIR>/app.log
    Max size: 5MB
    Backup count: 5 files
    Format: timestamp | level | module | ip | user | url | message

    LOG_DIR = None disables the file handler (tests).
    """
    # 1. File Logger (skipped when the filesystem is read-only)
    log_dir = app.config.get('LOG_DIR')
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=5 * 1024 * 1024,
                backupCount=5
            )
        except OSError as e:
            app.logger.warning(f"File logging disabled ({e}); using stdout only.")
        else:
            file_handler.setFormatter(RequestFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(remote_addr)s | %(user)s | %(url)s | %(message)s'
            ))
            file_handler.setLevel(logging.INFO)
            app.logger.addHandler(file_handler)

    # 2. Stdout Logger (container / cloud logs)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s'
    ))
    stream_handler.setLevel(logging.INFO)
    app.logger.addHandler(stream_handler)

    app.logger.setLevel(logging.INFO)
    app.logger.info("NovaStore Admin startup")
