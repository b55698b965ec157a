import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SITE_DOMAIN = os.environ.get('SITE_DOMAIN', '')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Input forms are fed from JSON bodies of a bearer-token API
    WTF_CSRF_ENABLED = False

    FIRESTORE_DATABASE = os.environ.get('FIRESTORE_DATABASE')

    # 'firebase' verifies Firebase ID tokens, 'signed' verifies tokens issued by POST /jwt
    AUTH_PROVIDER = os.environ.get('AUTH_PROVIDER', 'firebase')
    TOKEN_SECRET = os.environ.get('TOKEN_SECRET')
    TOKEN_MAX_AGE = int(os.environ.get('TOKEN_MAX_AGE', 7 * 24 * 3600))

    STRIPE_SECRET = os.environ.get('STRIPE_SECRET', '')
    STRIPE_CURRENCY = os.environ.get('STRIPE_CURRENCY', 'bdt')
