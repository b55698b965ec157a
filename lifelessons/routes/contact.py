from flask import Blueprint, jsonify

from lifelessons import firestore_dao as dao
from lifelessons.firestore_models import ContactMessage
from lifelessons.forms import ContactMessageForm

bp = Blueprint('contact', __name__, url_prefix='/contact-messages')


@bp.route('', methods=['POST'])
def create_message():
    form = ContactMessageForm().require_valid()
    message_id = dao.create_contact_message(ContactMessage(
        name=form.name.data,
        email=form.email.data,
        subject=form.subject.data,
        message=form.message.data,
    ))
    return jsonify({'success': True, 'insertedId': message_id})
