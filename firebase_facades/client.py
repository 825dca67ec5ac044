"""Firebase service connection shared by the facades."""

import threading
from typing import Optional

import firebase_admin
import requests
from firebase_admin import credentials, firestore

from .config import FirebaseConfig

DEFAULT_APP_NAME = '[DEFAULT]'


class FirebaseClient:
    """Holds the Firebase Admin app, the Firestore client and the HTTP session.

    Construct one per process and pass it to each facade. The Admin app and the
    Firestore client are created lazily on first use and never mutated afterwards.
    """

    def __init__(self, config: FirebaseConfig, db=None, session: Optional[requests.Session] = None,
                 app: Optional[firebase_admin.App] = None, app_name: str = DEFAULT_APP_NAME):
        self.config = config
        self.app_name = app_name
        self.session = session or requests.Session()
        self._app = app
        self._db = db
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, **kwargs) -> 'FirebaseClient':
        """Build a client from FIREBASE_* environment variables."""
        return cls(FirebaseConfig.from_env(), **kwargs)

    @property
    def app(self) -> firebase_admin.App:
        """Get the Firebase Admin app, initializing it on first access."""
        with self._lock:
            if self._app is None:
                self._app = self._initialize_app()
            return self._app

    @property
    def db(self):
        """Get Firestore database instance."""
        if self._db is None:
            app = self.app
            with self._lock:
                if self._db is None:
                    self._db = firestore.client(app=app)
        return self._db

    def _initialize_app(self) -> firebase_admin.App:
        try:
            # Reuse an app another component already registered under this name
            return firebase_admin.get_app(self.app_name)
        except ValueError:
            pass

        if self.config.service_account:
            cred = credentials.Certificate(self.config.service_account)
        else:
            cred = credentials.ApplicationDefault()
        options = {'projectId': self.config.project_id} if self.config.project_id else None
        return firebase_admin.initialize_app(cred, options, name=self.app_name)

    def close(self):
        """Release the HTTP session and the Firestore channel."""
        self.session.close()
        if self._db is not None and hasattr(self._db, 'close'):
            self._db.close()
