from functools import wraps
from flask import current_app
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from coursemarket.models import db
from coursemarket.classes.errors import StorageUnavailable


def transactional(f):
    """Run a manager operation as one bounded storage transaction.

    Any failure rolls the session back. Driver/pool timeouts surface as
    ``StorageUnavailable`` so callers can retry instead of treating them as a denial.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (OperationalError, PoolTimeoutError) as e:
            db.session.rollback()
            current_app.logger.warning("Storage failure in %s: %s", f.__name__, e)
            raise StorageUnavailable() from e
        except Exception:
            db.session.rollback()
            raise

    return wrapper
