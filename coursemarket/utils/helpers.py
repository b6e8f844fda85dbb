import uuid
from datetime import datetime, timezone


def generate_id():
    """Opaque identifier used as the primary key of every table."""
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp, matching what the database hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_datetime(datetime_obj):
    """Format datetime to an ISO-8601 string."""
    if not datetime_obj:
        return None
    return datetime_obj.isoformat()


def percentage(part, whole):
    """Integer percentage rounded half up; 0 when there is nothing to count."""
    if not whole:
        return 0
    return (200 * part + whole) // (2 * whole)
