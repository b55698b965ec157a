"""Bearer-token verification.

Two token sources are supported, picked by the AUTH_PROVIDER setting:

``firebase``
    ID tokens issued by Firebase Authentication, checked with the Admin SDK.
``signed``
    Tokens this service issues itself from POST /jwt, signed with
    TOKEN_SECRET and valid for TOKEN_MAX_AGE seconds.

Either way the caller gets back a ``Principal`` or ``Unauthenticated``; the
reason a token was rejected is never exposed.
"""

from dataclasses import dataclass

from firebase_admin import auth as firebase_auth
from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadData

from lifelessons.errors import Unauthenticated, UpstreamUnavailable
from lifelessons.firebase_init import get_auth

TOKEN_SALT = 'lifelessons-access-token'


@dataclass(frozen=True)
class Principal:
    email: str
    subject: str


def parse_bearer(header_value):
    """Extract the token from an Authorization header value, or None."""
    if not header_value:
        return None
    parts = header_value.split(' ')
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def _serializer(error):
    secret = current_app.config.get('TOKEN_SECRET')
    if not secret:
        raise error
    return URLSafeTimedSerializer(secret, salt=TOKEN_SALT)


def issue_token(email):
    """Sign a token for ``email``. The caller must have checked the user exists."""
    return _serializer(UpstreamUnavailable('Token signing not configured')).dumps({'email': email})


def _verify_signed(token):
    try:
        payload = _serializer(Unauthenticated()).loads(token, max_age=current_app.config.get('TOKEN_MAX_AGE'))
    except BadData:
        raise Unauthenticated()
    email = payload.get('email') if isinstance(payload, dict) else None
    if not email:
        raise Unauthenticated()
    return Principal(email=email, subject=email)


def _verify_firebase(token):
    try:
        decoded = get_auth().verify_id_token(token)
    except (ValueError, firebase_auth.InvalidIdTokenError,
            firebase_auth.CertificateFetchError, firebase_auth.UserDisabledError):
        raise Unauthenticated()
    if not decoded.get('email'):
        raise Unauthenticated()
    return Principal(email=decoded['email'], subject=decoded.get('uid'))


def verify_bearer(header_value):
    """Return the Principal behind an Authorization header."""
    token = parse_bearer(header_value)
    if token is None:
        raise Unauthenticated()
    if current_app.config.get('AUTH_PROVIDER') == 'signed':
        return _verify_signed(token)
    return _verify_firebase(token)
