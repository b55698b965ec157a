from functools import wraps
from flask import request, g
from lifelessons import firestore_dao as dao
from lifelessons.errors import InvalidInput, Forbidden, NotFound
from lifelessons.services.identity import verify_bearer


def get_current_email():
    return g.principal.email


def is_admin(email):
    user = dao.get_user_by_email(email)
    return bool(user) and user.get('role') == 'admin'


def require_valid_id(value, message):
    if not dao.is_valid_id(value):
        raise InvalidInput(message)
    return value


def auth_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        g.principal = verify_bearer(request.headers.get('Authorization'))
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Verify the bearer token, then require role == 'admin' on the user record."""
    @wraps(f)
    @auth_required
    def decorated(*args, **kwargs):
        if not is_admin(get_current_email()):
            raise Forbidden()
        return f(*args, **kwargs)
    return decorated


def lesson_owner_or_admin(f):
    """Load the non-deleted lesson ``lesson_id`` into g.lesson for its creator or an admin."""
    @wraps(f)
    @auth_required
    def decorated(*args, **kwargs):
        lesson_id = require_valid_id(kwargs.get('lesson_id'), 'Invalid lesson id')
        lesson = dao.get_lesson(lesson_id)
        if lesson is None:
            raise NotFound('Lesson not found')

        email = get_current_email()
        if lesson.get('creatorEmail') != email and not is_admin(email):
            raise Forbidden()

        g.lesson = lesson
        return f(*args, **kwargs)
    return decorated
