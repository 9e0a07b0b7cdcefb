"""
Authentication Routes
Handles registration, login and profile for the JSON API
"""
import logging

from flask import Blueprint, g, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from examhall.errors import ValidationError
from examhall.extensions import db
from examhall.models import User
from examhall.utils import ROLES, commit_or_raise, generate_token, now_utc, require_auth

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _linked_student_id(value):
    """A parent links to their child's student account (the id results are stored under)"""
    try:
        child = db.session.get(User, int(value))
    except (TypeError, ValueError):
        child = None
    if child is None or child.role != 'student':
        raise ValidationError('Invalid input', {'studentId': 'studentId must be the id of a student account.'})
    return str(child.id)


@auth_bp.route('/register', methods=['POST'])
def register():
    """User registration"""
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    role = data.get('role') or 'student'

    errors = {}
    if not name:
        errors['name'] = 'Name is required.'
    if not email:
        errors['email'] = 'Email is required.'
    if not password:
        errors['password'] = 'Password is required.'
    if role not in ROLES:
        errors['role'] = f"Role must be one of: {', '.join(ROLES)}."
    if errors:
        raise ValidationError('Invalid input', errors)

    if User.query.filter_by(email=email).first():
        raise ValidationError('User already exists')

    child_id = None
    if role == 'parent' and data.get('studentId') not in (None, ''):
        child_id = _linked_student_id(data['studentId'])

    user = User(
        name=name,
        email=email,
        password=generate_password_hash(password),
        role=role,
        student_id=child_id,
        created_at=now_utc(),
    )
    db.session.add(user)
    commit_or_raise('registering user')

    logger.info('Registered %s as %s', user.email, user.role)
    return jsonify({
        'message': 'User registered successfully',
        'user': user.to_dict(),
        'token': generate_token(user),
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """User login"""
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password, password):
        raise ValidationError('Invalid email or password')

    return jsonify({
        'message': 'Login successful',
        'user': user.to_dict(),
        'token': generate_token(user),
    })


@auth_bp.route('/profile')
@require_auth
def profile():
    """Current user's profile"""
    return jsonify(g.current_user.to_dict())


def create_default_admin(app):
    """Seed the default admin account if it does not exist"""
    email = app.config['DEFAULT_ADMIN_EMAIL']
    if User.query.filter_by(email=email).first():
        logger.info('Default admin account already exists')
        return None

    admin = User(
        name='System Administrator',
        email=email,
        password=generate_password_hash(app.config['DEFAULT_ADMIN_PASSWORD']),
        role='admin',
        created_at=now_utc(),
    )
    db.session.add(admin)
    commit_or_raise('creating default admin')
    logger.warning('Default admin account created: %s (change its password)', email)
    return admin
