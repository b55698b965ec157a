from flask import Blueprint, jsonify

from lifelessons import firestore_dao as dao
from lifelessons.errors import NotFound
from lifelessons.forms import TokenRequestForm
from lifelessons.services.identity import issue_token

bp = Blueprint('main', __name__)


@bp.route('/')
def index():
    return 'Digital Life Lessons server is running'


@bp.route('/jwt', methods=['POST'])
def create_token():
    """Issue a signed access token for an existing user (AUTH_PROVIDER=signed)."""
    email = TokenRequestForm().require_valid().email.data
    if dao.get_user_by_email(email) is None:
        raise NotFound('User not found')
    return jsonify({'token': issue_token(email)})
