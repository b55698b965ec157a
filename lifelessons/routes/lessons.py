from flask import Blueprint, jsonify, request, g

from lifelessons import firestore_dao as dao
from lifelessons.decorators import (auth_required, admin_required, lesson_owner_or_admin,
                                    get_current_email, require_valid_id)
from lifelessons.errors import InvalidInput, Forbidden, NotFound
from lifelessons.firestore_models import Lesson, Comment
from lifelessons.forms import LessonForm, LessonUpdateForm, CommentForm

bp = Blueprint('lessons', __name__, url_prefix='/lessons')

DEFAULT_PAGE_SIZE = 9
MAX_PAGE_SIZE = 50


def _int_arg(name, default):
    """Integer query parameter; missing, malformed or zero values give ``default``."""
    try:
        value = int(request.args.get(name, ''))
    except ValueError:
        return default
    return value or default


@bp.route('', methods=['POST'])
@auth_required
def create_lesson():
    form = LessonForm().require_valid()
    email = get_current_email()
    creator = dao.get_user_by_email(email) or {}

    lesson = Lesson(
        title=form.title.data,
        shortDescription=form.shortDescription.data,
        creatorEmail=email,
        details=form.details.data or '',
        creatorName=form.creatorName.data or creator.get('name', ''),
        creatorPhotoURL=form.creatorPhotoURL.data or creator.get('photoURL', ''),
    )
    # Blank optional fields keep the model defaults
    for name in ('category', 'emotionalTone', 'accessLevel', 'visibility'):
        if form[name].data:
            setattr(lesson, name, form[name].data)

    lesson_id = dao.create_lesson(lesson)
    return jsonify({'acknowledged': True, 'insertedId': lesson_id})


@bp.route('/my')
@auth_required
def my_lessons():
    email = request.args.get('email')
    if not email:
        raise InvalidInput('email query parameter is required')
    if email != get_current_email():
        raise Forbidden()
    return jsonify(dao.get_lessons_by_creator(email))


@bp.route('/my/<lesson_id>', methods=['DELETE'])
@auth_required
def delete_my_lesson(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    lesson = dao.get_lesson(lesson_id)
    if lesson is None:
        raise NotFound('Lesson not found')
    if lesson.get('creatorEmail') != get_current_email():
        raise Forbidden()

    dao.soft_delete_lesson(lesson_id)
    return jsonify({'matchedCount': 1, 'modifiedCount': 1})


@bp.route('/public')
def public_lessons():
    page = max(1, _int_arg('page', 1))
    limit = min(MAX_PAGE_SIZE, max(1, _int_arg('limit', DEFAULT_PAGE_SIZE)))

    lessons, total = dao.list_public_lessons(
        search=request.args.get('search', ''),
        category=request.args.get('category', ''),
        tone=request.args.get('tone', ''),
        sort=request.args.get('sort', 'newest'),
        page=page,
        limit=limit,
    )
    return jsonify({
        'lessons': lessons,
        'pagination': {
            'total': total,
            'page': page,
            'limit': limit,
            'totalPages': dao.total_pages(total, limit),
        },
    })


@bp.route('/featured')
def featured_lessons():
    return jsonify({'lessons': dao.get_featured_lessons()})


@bp.route('/most-saved')
def most_saved_lessons():
    return jsonify({'lessons': dao.get_most_saved_lessons()})


@bp.route('/<lesson_id>')
@auth_required
def lesson_detail(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    lesson = dao.get_lesson(lesson_id)
    if lesson is None:
        raise NotFound('Lesson not found')

    if lesson.get('accessLevel') == 'premium':
        email = get_current_email()
        if lesson.get('creatorEmail') != email and not dao.is_premium(email):
            raise Forbidden('Premium access required')

    return jsonify(lesson)


@bp.route('/<lesson_id>', methods=['PATCH'])
@lesson_owner_or_admin
def update_lesson(lesson_id):
    form = LessonUpdateForm().require_valid()
    dao.update_lesson(g.lesson['_id'], form.changes())
    return jsonify({'matchedCount': 1, 'modifiedCount': 1})


@bp.route('/<lesson_id>/like', methods=['PATCH', 'POST'])
@auth_required
def toggle_like(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    result = dao.toggle_like(lesson_id, get_current_email())
    if result is None:
        raise NotFound('Lesson not found')

    liked, likes_count = result
    return jsonify({'success': True, 'liked': liked, 'likesCount': likes_count})


@bp.route('/<lesson_id>/comments')
def list_comments(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    return jsonify({'comments': dao.get_comments(lesson_id)})


@bp.route('/<lesson_id>/comments', methods=['POST'])
@auth_required
def add_comment(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    form = CommentForm().require_valid()
    text = (form.comment.data or '').strip()
    if not text:
        raise InvalidInput('Comment text is required')

    email = get_current_email()
    user = dao.get_user_by_email(email) or {}
    comment = dao.create_comment(Comment(
        lessonId=lesson_id,
        userEmail=email,
        text=text,
        userName=user.get('name'),
        userPhoto=user.get('photoURL'),
    ))
    return jsonify(comment)


# Admin views of the raw collection

@bp.route('')
@admin_required
def all_lessons():
    return jsonify(dao.get_active_lessons())


@bp.route('/<lesson_id>', methods=['DELETE'])
@admin_required
def admin_soft_delete(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    if not dao.soft_delete_lesson(lesson_id):
        raise NotFound('Lesson not found')
    return jsonify({'matchedCount': 1, 'modifiedCount': 1})
