import stripe
from flask import current_app

from lifelessons.errors import UpstreamUnavailable

PREMIUM_PRICE = 1500
PREMIUM_PRODUCT_NAME = 'Digital Life Lessons Premium – Lifetime'
DEFAULT_PLAN = 'premium_lifetime'


def _api_key():
    secret = current_app.config.get('STRIPE_SECRET')
    if not secret:
        raise UpstreamUnavailable('Stripe not configured')
    return secret


def create_checkout_session(email, plan=None):
    """Create a one-time Stripe Checkout session for the premium upgrade.

    Returns the hosted checkout URL.
    """
    api_key = _api_key()
    site = current_app.config.get('SITE_DOMAIN', '')

    session = stripe.checkout.Session.create(
        api_key=api_key,
        payment_method_types=['card'],
        mode='payment',
        customer_email=email,
        line_items=[{
            'price_data': {
                'currency': current_app.config.get('STRIPE_CURRENCY', 'bdt'),
                'unit_amount': PREMIUM_PRICE * 100,
                'product_data': {'name': PREMIUM_PRODUCT_NAME},
            },
            'quantity': 1,
        }],
        metadata={'email': email, 'plan': plan or DEFAULT_PLAN},
        success_url=f'{site}/payment/success?session_id={{CHECKOUT_SESSION_ID}}',
        cancel_url=f'{site}/payment/cancel',
    )
    current_app.logger.info('Checkout session %s created for %s', session.id, email)
    return session.url


def retrieve_checkout_session(session_id):
    """Fetch a Checkout session and pull out what the success callback needs.

    Returns a dict with payment_status, email (customer_email, falling back
    to metadata.email) and transaction_id (the payment intent).
    """
    session = stripe.checkout.Session.retrieve(session_id, api_key=_api_key())
    metadata = getattr(session, 'metadata', None)
    email = getattr(session, 'customer_email', None) or getattr(metadata, 'email', None)
    return {
        'payment_status': getattr(session, 'payment_status', None),
        'email': email,
        'transaction_id': getattr(session, 'payment_intent', None),
    }
