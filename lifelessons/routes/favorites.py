from flask import Blueprint, jsonify

from lifelessons import firestore_dao as dao
from lifelessons.decorators import auth_required, get_current_email, require_valid_id
from lifelessons.errors import Conflict, Forbidden, NotFound
from lifelessons.forms import FavoriteForm

bp = Blueprint('favorites', __name__, url_prefix='/favorites')


@bp.route('', methods=['POST'])
@auth_required
def add_favorite():
    form = FavoriteForm().require_valid()
    lesson_id = require_valid_id(form.lessonId.data, 'Valid lessonId is required')
    email = get_current_email()

    if dao.find_favorite(lesson_id, email):
        raise Conflict('Already in favorites')
    if dao.get_lesson(lesson_id) is None:
        raise NotFound('Lesson not found')

    favorite_id = dao.create_favorite(lesson_id, email)
    return jsonify({'acknowledged': True, 'insertedId': favorite_id})


@bp.route('')
@auth_required
def list_favorites():
    return jsonify({'favorites': dao.get_favorites_with_lessons(get_current_email())})


@bp.route('/<favorite_id>', methods=['DELETE'])
@auth_required
def remove_favorite(favorite_id):
    require_valid_id(favorite_id, 'Invalid favorite id')
    favorite = dao.get_favorite(favorite_id)
    if favorite is None:
        raise NotFound('Favorite not found')
    if favorite.get('userEmail') != get_current_email():
        raise Forbidden()

    dao.delete_favorite(favorite)
    return jsonify({'deletedCount': 1})
