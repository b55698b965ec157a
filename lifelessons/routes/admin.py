from flask import Blueprint, jsonify, request

from lifelessons import firestore_dao as dao
from lifelessons.decorators import admin_required, get_current_email, require_valid_id
from lifelessons.errors import Conflict, NotFound
from lifelessons.forms import RoleForm, FeaturedForm, ReviewedForm

bp = Blueprint('admin', __name__, url_prefix='/admin')


# ---------------------------------------------------------------------------
# Users and roles
# ---------------------------------------------------------------------------

@bp.route('/users')
@admin_required
def users_with_lesson_counts():
    return jsonify(dao.list_users_with_lesson_counts())


@bp.route('/users/<user_id>/make-admin', methods=['PATCH'])
@admin_required
def make_admin(user_id):
    require_valid_id(user_id, 'Invalid user id')
    if not dao.update_user_role(user_id, 'admin'):
        raise NotFound('User not found')
    return jsonify({'matchedCount': 1, 'modifiedCount': 1})


@bp.route('/users/<user_id>/role', methods=['PATCH'])
@admin_required
def update_role(user_id):
    require_valid_id(user_id, 'Invalid user id')
    role = RoleForm().require_valid('Invalid role').role.data

    target = dao.get_user(user_id)
    if target is None:
        raise NotFound('User not found')
    if target.get('email') == get_current_email() and role != 'admin':
        raise Conflict('You cannot demote yourself')

    dao.update_user_role(user_id, role)
    return jsonify({'matchedCount': 1, 'modifiedCount': 1})


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

@bp.route('/stats')
@admin_required
def stats():
    return jsonify(dao.get_admin_stats())


# ---------------------------------------------------------------------------
# Lesson moderation
# ---------------------------------------------------------------------------

@bp.route('/lessons')
@admin_required
def lessons():
    return jsonify(dao.list_admin_lessons(
        visibility=request.args.get('visibility', 'all'),
        category=request.args.get('category', ''),
        flagged=request.args.get('flagged', 'all'),
    ))


@bp.route('/lessons/<lesson_id>/hard-delete', methods=['DELETE'])
@admin_required
def hard_delete(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    if not dao.hard_delete_lesson(lesson_id):
        raise NotFound('Lesson not found')
    return jsonify({'success': True})


@bp.route('/lessons/<lesson_id>/toggle-visibility', methods=['PATCH'])
@admin_required
def toggle_visibility(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    visibility = dao.toggle_lesson_visibility(lesson_id)
    if visibility is None:
        raise NotFound('Lesson not found')
    return jsonify({'success': True, 'visibility': visibility})


@bp.route('/lessons/<lesson_id>/featured', methods=['PATCH'])
@admin_required
def set_featured(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    featured = FeaturedForm().featured.data
    if not dao.set_lesson_fields(lesson_id, {'isFeatured': bool(featured)}):
        raise NotFound('Lesson not found')
    return jsonify({'success': True})


@bp.route('/lessons/<lesson_id>/reviewed', methods=['PATCH'])
@admin_required
def set_reviewed(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    reviewed = ReviewedForm().reviewed.data
    if not dao.set_lesson_fields(lesson_id, {'isReviewed': bool(reviewed)}):
        raise NotFound('Lesson not found')
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Reports grouped by lesson
# ---------------------------------------------------------------------------

@bp.route('/reported-lessons')
@admin_required
def reported_lessons():
    return jsonify(dao.get_reported_lessons())


@bp.route('/reported-lessons/<lesson_id>', methods=['DELETE'])
@admin_required
def ignore_reports(lesson_id):
    require_valid_id(lesson_id, 'Invalid lesson id')
    deleted = dao.delete_reports_for_lesson(lesson_id)
    return jsonify({'success': True, 'deleted': deleted})
