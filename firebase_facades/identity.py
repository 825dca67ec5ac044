"""Firebase Identity Toolkit REST client and local session state."""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from firebase_admin import auth

from .client import FirebaseClient

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"


@dataclass(frozen=True)
class AuthState:
    """What auth-state listeners receive."""

    signed_in: bool
    user: Optional[Dict] = None


@dataclass
class Session:
    user: Dict
    id_token: str
    refresh_token: str


class IdentityToolkit:
    """
    Talks to the Identity Toolkit REST API and keeps the current session.

    The Admin SDK cannot check passwords, so sign-up and sign-in go through the
    REST API with the project's Web API Key; user details are then read back
    with the Admin SDK.
    """

    def __init__(self, client: FirebaseClient):
        self.client = client
        self._session: Optional[Session] = None
        self._listeners: List[Callable[[AuthState], None]] = []
        self._lock = threading.Lock()
        # Held while listeners run so each sees states in the order they were set
        self._notify_lock = threading.RLock()

    # Session state
    @property
    def state(self) -> AuthState:
        with self._lock:
            return self._state_locked()

    @property
    def id_token(self) -> Optional[str]:
        with self._lock:
            return self._session.id_token if self._session else None

    def observe_session_state(self, listener: Callable[[AuthState], None]) -> Callable[[], None]:
        """Register a listener, call it with the current state, and return its remover."""
        with self._notify_lock:
            with self._lock:
                self._listeners.append(listener)
                state = self._state_locked()
            listener(state)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def _set_session(self, session: Optional[Session]):
        with self._notify_lock:
            with self._lock:
                self._session = session
                listeners = list(self._listeners)
                state = self._state_locked()
            for listener in listeners:
                listener(state)

    def _state_locked(self) -> AuthState:
        if self._session is None:
            return AuthState(signed_in=False)
        return AuthState(signed_in=True, user=dict(self._session.user))

    # Service calls
    def create_account(self, email: str, password: str) -> Dict:
        """Create an email/password account and sign it in."""
        data = self._post_identity('accounts:signUp', {
            'email': email,
            'password': password,
            'returnSecureToken': True,
        })
        return self._start_session(data)

    def verify_credential(self, email: str, password: str) -> Dict:
        """Sign in with email and password."""
        data = self._post_identity('accounts:signInWithPassword', {
            'email': email,
            'password': password,
            'returnSecureToken': True,
        })
        return self._start_session(data)

    def sign_in_with_idp(self, id_token: str, provider_id: str = 'google.com') -> Dict:
        """Exchange an identity provider's ID token for a Firebase session."""
        auth_domain = self.client.config.auth_domain
        data = self._post_identity('accounts:signInWithIdp', {
            'postBody': f"id_token={id_token}&providerId={provider_id}",
            'requestUri': f"https://{auth_domain}" if auth_domain else 'http://localhost',
            'returnSecureToken': True,
            'returnIdpCredential': True,
        })
        return self._start_session(data)

    def interactive_federated_sign_in(self, consent_flow) -> Dict:
        """Run a provider consent flow, then sign in with the token it yields."""
        id_token = consent_flow.obtain_id_token()
        return self.sign_in_with_idp(id_token, consent_flow.provider_id)

    def refresh(self) -> Dict:
        """Trade the refresh token for a new ID token."""
        with self._lock:
            session = self._session
        if session is None:
            raise RuntimeError("No user is signed in")

        response = self.client.session.post(
            f"{SECURE_TOKEN_URL}?key={self.client.config.require_api_key()}",
            data={'grant_type': 'refresh_token', 'refresh_token': session.refresh_token},
            timeout=self.client.config.request_timeout,
        )
        response.raise_for_status()
        data = response.json()
        user = self._get_user(data['user_id'])
        self._set_session(Session(user=user, id_token=data['id_token'], refresh_token=data['refresh_token']))
        return user

    def terminate_session(self):
        """Forget the current session. Tokens are not revoked server-side."""
        self._set_session(None)

    def _post_identity(self, endpoint: str, payload: Dict) -> Dict:
        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}?key={self.client.config.require_api_key()}"
        response = self.client.session.post(url, json=payload, timeout=self.client.config.request_timeout)
        response.raise_for_status()
        return response.json()

    def _start_session(self, data: Dict) -> Dict:
        user = self._get_user(data['localId'])
        self._set_session(Session(user=user, id_token=data['idToken'], refresh_token=data['refreshToken']))
        return user

    def _get_user(self, uid: str) -> Dict:
        # Get user details from Admin SDK
        user = auth.get_user(uid, app=self.client.app)
        return {
            'uid': user.uid,
            'email': user.email,
            'display_name': user.display_name
        }
