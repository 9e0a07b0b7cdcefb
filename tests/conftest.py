import pytest
from werkzeug.security import generate_password_hash

from examhall import create_app
from examhall.extensions import db, exam_sessions
from examhall.models import User
from examhall.utils import generate_token


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    exam_sessions.clear()
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(app, email, role, student_id=None):
    with app.app_context():
        user = User(
            name=email.split('@')[0].title(),
            email=email,
            password=generate_password_hash('password123'),
            role=role,
            student_id=student_id,
        )
        db.session.add(user)
        db.session.commit()
        return user.id, generate_token(user)


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def teacher(app):
    user_id, token = make_user(app, 'teacher@school.com', 'teacher')
    return {'id': user_id, 'token': token, 'headers': bearer(token)}


@pytest.fixture
def student(app):
    user_id, token = make_user(app, 'student@school.com', 'student')
    return {'id': user_id, 'token': token, 'headers': bearer(token)}


@pytest.fixture
def two_question_exam():
    """Two questions worth 1 and 2 marks, keys 0 and 1"""
    return {
        'title': 'Algebra Basics',
        'description': 'Short quiz',
        'duration': 1,
        'totalMarks': 999,
        'assignedTo': ['class-7a'],
        'questions': [
            {'question': '2 + 2 = ?', 'options': ['4', '3', '5', '22'], 'correctAnswer': 0, 'marks': 1},
            {'question': 'x + 1 = 3, x = ?', 'options': ['1', '2', '3', '4'], 'correctAnswer': 1, 'marks': 2},
        ],
    }


@pytest.fixture
def created_exam(client, teacher, two_question_exam):
    response = client.post('/api/exams', json=two_question_exam, headers=teacher['headers'])
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def account(app):
    """Factory for extra users: account(email, role, student_id=None)"""
    def _account(email, role, student_id=None):
        user_id, token = make_user(app, email, role, student_id)
        return {'id': user_id, 'token': token, 'headers': bearer(token)}
    return _account
