from flask import Blueprint, jsonify, request, current_app

from lifelessons import firestore_dao as dao
from lifelessons.errors import Conflict, InvalidInput
from lifelessons.forms import CheckoutForm
from lifelessons.services import payments

bp = Blueprint('payments', __name__)


@bp.route('/create-checkout-session', methods=['POST'])
def create_checkout_session():
    form = CheckoutForm().require_valid()
    email = form.email.data

    if dao.is_premium(email):
        raise Conflict('You are already a Premium user. Lifetime access is active.')

    url = payments.create_checkout_session(email, plan=form.plan.data)
    return jsonify({'url': url})


@bp.route('/payment-success', methods=['PATCH'])
def payment_success():
    session_id = request.args.get('session_id')
    if not session_id:
        raise InvalidInput('session_id is required')

    session = payments.retrieve_checkout_session(session_id)
    email = session['email']

    if session['payment_status'] == 'paid' and email:
        dao.mark_premium(email, session['transaction_id'])
        current_app.logger.info('User %s upgraded to premium (%s)', email, session['transaction_id'])
        return jsonify({
            'success': True,
            'email': email,
            'transactionId': session['transaction_id'],
            'paymentStatus': session['payment_status'],
        })

    return jsonify({
        'success': False,
        'message': 'Payment not completed',
        'paymentStatus': session['payment_status'],
    })
