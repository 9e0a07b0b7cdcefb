"""
Token Authentication
Signed bearer tokens and role decorators for the JSON API
"""
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from examhall.errors import AuthError, ForbiddenError
from examhall.extensions import db

ROLES = ('admin', 'teacher', 'student', 'parent')
AUTHOR_ROLES = ('admin', 'teacher')


def _serializer():
    return URLSafeTimedSerializer(
        current_app.config['SECRET_KEY'],
        salt=current_app.config.get('TOKEN_SALT', 'examhall-auth')
    )


def generate_token(user):
    """Sign a token carrying the user's id, email and role"""
    return _serializer().dumps({
        'id': user.id,
        'email': user.email,
        'role': user.role,
    })


def verify_token(token):
    """
    Decode a signed token
    Raises ForbiddenError if it is tampered with or expired
    """
    try:
        return _serializer().loads(token, max_age=current_app.config['TOKEN_MAX_AGE'])
    except SignatureExpired:
        raise ForbiddenError('Token expired')
    except BadSignature:
        raise ForbiddenError('Invalid or expired token')


def get_bearer_token():
    """Extract the token from an 'Authorization: Bearer <token>' header"""
    header = request.headers.get('Authorization', '')
    parts = header.split(' ', 1)
    if len(parts) == 2 and parts[0].lower() == 'bearer' and parts[1].strip():
        return parts[1].strip()
    return None


def get_current_user():
    """Get the user the request's token belongs to (None if anonymous)"""
    from examhall.models import User

    token = get_bearer_token()
    if not token:
        return None
    claims = verify_token(token)
    if claims.get('id') is None:
        return None
    return db.session.get(User, claims['id'])


# Decorators
def require_auth(f):
    """Decorator to require a valid bearer token"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_bearer_token():
            raise AuthError('Access token required')
        user = get_current_user()
        if user is None:
            raise ForbiddenError('Invalid or expired token')
        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function


def require_roles(*roles):
    """Decorator to require a valid token belonging to one of the given roles"""
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            if g.current_user.role not in roles:
                raise ForbiddenError(f"Requires one of roles: {', '.join(roles)}")
            return f(*args, **kwargs)
        return decorated_function
    return decorator
