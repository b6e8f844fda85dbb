import bleach
from coursemarket.classes.errors import InvalidInput, InvalidRating


def validate_length(field_name, value, max_length):
    if len(value) > max_length:
        raise InvalidInput(f"{field_name} must be {max_length} characters or fewer.")


def require_text(field_name, value, max_length=255):
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field_name} is required.")
    value = value.strip()
    validate_length(field_name, value, max_length)
    return value


def clean_text(value):
    """Strip markup from free text; ``None`` stays ``None``."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInput("Text fields must be strings.")
    return bleach.clean(value, tags=[], strip=True).strip()


def validate_non_negative_int(field_name, value):
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field_name} must be an integer.")
    if value < 0:
        raise InvalidInput(f"{field_name} cannot be negative.")
    return value


def validate_price(price):
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise InvalidInput("Price must be a number.")
    if value < 0:
        raise InvalidInput("Price cannot be negative.")
    return round(value, 2)


def validate_rating(rating):
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRating()
    return rating


def validate_bool(field_name, value):
    # JSON strings like "false" are truthy, so only real booleans pass
    if not isinstance(value, bool):
        raise InvalidInput(f"{field_name} must be true or false.")
    return value
