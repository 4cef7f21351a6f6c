"""Security utilities for Frota application."""

from functools import wraps
from flask import request, abort, jsonify
from flask_login import current_user
from passlib.context import CryptContext
import secrets

from frota.utils.logging_config import log_security_event


# Token hashing context
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto"
)


def hash_secret(secret):
    """Hash an API token secret for storage."""
    return pwd_context.hash(secret)


def verify_secret(secret, hashed):
    """Verify a stored token hash against the presented secret."""
    if not secret or not hashed:
        return False
    return pwd_context.verify(secret, hashed)


def generate_token_secret():
    return secrets.token_urlsafe(32)


def parse_bearer_token(header_value):
    """Split ``Bearer <user id>.<secret>`` into its parts.

    Returns ``(None, None)`` for anything malformed.
    """
    if not header_value or not header_value.startswith('Bearer '):
        return None, None

    token = header_value[len('Bearer '):].strip()
    user_id, _, secret = token.partition('.')
    if not user_id.isdigit() or not secret:
        return None, None
    return int(user_id), secret


def load_user_from_request(req):
    """Flask-Login request loader authenticating API calls by bearer token."""
    from frota import db
    from frota.models import User

    user_id, secret = parse_bearer_token(req.headers.get('Authorization'))
    if user_id is None:
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active or not user.check_api_token(secret):
        log_security_event('INVALID_API_TOKEN', user_id=user_id, ip_address=req.remote_addr)
        return None
    return user


def unauthorized():
    return jsonify({
        'error': 'Unauthorized',
        'message': 'Authentication required'
    }), 401


def role_required(*roles):
    """Decorator to require specific roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)

            if current_user.role not in roles:
                log_security_event('ROLE_DENIED', user_id=current_user.id,
                                   ip_address=request.remote_addr, details=request.path)
                abort(403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator
