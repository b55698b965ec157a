from flask import Blueprint, jsonify

from lifelessons import firestore_dao as dao
from lifelessons.decorators import auth_required, admin_required, get_current_email
from lifelessons.errors import Conflict, Forbidden, NotFound
from lifelessons.forms import UserProfileForm

bp = Blueprint('users', __name__, url_prefix='/users')


@bp.route('', methods=['POST'])
def upsert_user():
    form = UserProfileForm().require_valid()
    created = dao.upsert_user(
        form.email.data,
        name=form.name.data or form.displayName.data or '',
        photo_url=form.photoURL.data or '',
    )
    return jsonify({'acknowledged': True, 'upserted': created})


@bp.route('/<email>')
def get_user(email):
    return jsonify(dao.get_user_by_email(email) or {})


@bp.route('/admin/<email>')
@auth_required
def check_admin(email):
    # A user may only ask about themselves
    if email != get_current_email():
        raise Forbidden()
    user = dao.get_user_by_email(email) or {}
    return jsonify({'admin': user.get('role') == 'admin'})


@bp.route('')
@admin_required
def list_users():
    return jsonify(dao.list_users())


@bp.route('/<email>', methods=['DELETE'])
@admin_required
def delete_user(email):
    if email == get_current_email():
        raise Conflict('You cannot delete yourself')
    if not dao.delete_user(email):
        raise NotFound('User not found')
    return jsonify({'deletedCount': 1})
