"""
Helper Functions
Utility functions used across the application
"""
from datetime import datetime, timezone
import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
import pytz

from examhall.errors import PersistenceError
from examhall.extensions import db

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def utc_to_local(utc_dt, tz_name=None):
    """Convert a UTC datetime to the school timezone"""
    if not utc_dt:
        return None
    tz = pytz.timezone(tz_name or current_app.config.get('TIMEZONE', 'UTC'))
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=pytz.utc)
    return utc_dt.astimezone(tz)


def local_today(tz_name=None):
    """Today's date in the school timezone, as YYYY-MM-DD"""
    return utc_to_local(now_utc(), tz_name).strftime('%Y-%m-%d')


def isoformat(dt):
    """Serialize a datetime for JSON payloads (None stays None)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def commit_or_raise(action):
    """
    Commit the current session
    Rolls back and raises PersistenceError if the write fails
    """
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Database write failed while %s', action)
        raise PersistenceError(f'Error {action}') from exc


def configure_logging(app):
    """Configure root logging once from LOG_LEVEL"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
    app.logger.setLevel(level)
