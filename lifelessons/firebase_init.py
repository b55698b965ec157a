import base64
import json
import logging
import os
import threading

import firebase_admin
from firebase_admin import credentials, firestore, auth

logger = logging.getLogger(__name__)

_app = None
_db = None
_lock = threading.Lock()


def _load_credentials():
    """Service account from FB_SERVICE_KEY (base64 JSON), a key file, or ADC."""
    encoded = os.environ.get('FB_SERVICE_KEY')
    if encoded:
        info = json.loads(base64.b64decode(encoded).decode('utf-8'))
        return credentials.Certificate(info)

    cred_path = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json')
    if os.path.exists(cred_path):
        return credentials.Certificate(cred_path)
    return credentials.ApplicationDefault()


def init_firebase(app_config=None):
    """Initialise the Firebase app and Firestore client once per process.

    Concurrent first callers block on the lock and then find the handle
    already set, so only one initialisation ever runs.
    """
    global _app, _db

    if _db is not None:
        return

    with _lock:
        if _db is not None:
            return

        database = None
        if app_config:
            database = app_config.get('FIRESTORE_DATABASE')
        if not database:
            database = os.environ.get('FIRESTORE_DATABASE')

        _app = firebase_admin.initialize_app(_load_credentials())
        _db = firestore.client(database_id=database) if database else firestore.client()
        logger.info('Firebase initialised (database=%s)', database or '(default)')


def get_db():
    if _db is None:
        init_firebase()
    return _db


def get_auth():
    if _app is None:
        init_firebase()
    return auth
