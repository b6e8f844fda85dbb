from functools import wraps
from flask import request, g
from coursemarket.classes.actor import Actor
from coursemarket.classes.errors import Unauthenticated
from coursemarket.utils.tokens import decode_jwt

COOKIE_NAME = "access_token"


def _actor_from_cookie():
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    return Actor.from_token(decode_jwt(token))


def login_required(f):
    """Resolve the actor from the access_token cookie into ``g.actor`` or answer 401."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor = _actor_from_cookie()
        if actor is None:
            raise Unauthenticated()
        g.actor = actor
        return f(*args, **kwargs)

    return decorated_function


def optional_login(f):
    """Like ``login_required`` but lets anonymous callers through with ``g.actor = None``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.actor = _actor_from_cookie()
        return f(*args, **kwargs)

    return decorated_function
