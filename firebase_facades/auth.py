"""Firebase Authentication facade."""

import re
from typing import Callable, Dict, Optional

from .client import FirebaseClient
from .federated import GoogleConsentFlow
from .identity import AuthState, IdentityToolkit
from .logger import FacadeLogger
from .result import Result, returns_result
from .subscription import Subscription


class FirebaseAuth:
    """Sign-up, sign-in and session observation with uniform results."""

    def __init__(self, client: FirebaseClient, identity: Optional[IdentityToolkit] = None,
                 logger: Optional[FacadeLogger] = None):
        self.client = client
        self.identity = identity or IdentityToolkit(client)
        self.logger = logger or FacadeLogger()

    @property
    def current_user(self) -> Optional[Dict]:
        return self.identity.state.user

    @returns_result("Sign up")
    def sign_up(self, email: str, password: str) -> Result[Dict]:
        """
        Create a new account with email and password.
        The new user is signed in on success.
        """
        if not self.validate_email(email):
            self.logger.log_auth_event("SIGN UP", email, False)
            return Result.fail("Invalid email address")
        valid, error = self.validate_password(password)
        if not valid:
            self.logger.log_auth_event("SIGN UP", email, False)
            return Result.fail(error)

        try:
            user = self.identity.create_account(email, password)
        except Exception:
            self.logger.log_auth_event("SIGN UP", email, False)
            raise
        self.logger.log_auth_event("SIGN UP", email, True)
        return Result.ok(user)

    @returns_result("Sign in")
    def sign_in(self, email: str, password: str) -> Result[Dict]:
        """Sign in with email and password."""
        try:
            user = self.identity.verify_credential(email, password)
        except Exception:
            self.logger.log_auth_event("SIGN IN", email, False)
            raise
        self.logger.log_auth_event("SIGN IN", email, True)
        return Result.ok(user)

    @returns_result("Google sign in")
    def sign_in_with_google(self, consent_flow=None) -> Result[Dict]:
        """
        Sign in through Google's consent page.

        Blocks until the user completes or dismisses the flow; a dismissed flow
        is reported as a failure like any other.
        """
        if consent_flow is None:
            secrets = self.client.config.oauth_client_secrets
            if not secrets:
                return Result.fail("GOOGLE_OAUTH_CLIENT_SECRETS is not configured")
            consent_flow = GoogleConsentFlow(secrets)
        user = self.identity.interactive_federated_sign_in(consent_flow)
        self.logger.log_auth_event("GOOGLE SIGN IN", user.get('email'), True)
        return Result.ok(user)

    @returns_result("Federated sign in")
    def sign_in_with_id_token(self, id_token: str, provider_id: str = 'google.com') -> Result[Dict]:
        """Sign in with a token already obtained from the identity provider."""
        user = self.identity.sign_in_with_idp(id_token, provider_id)
        self.logger.log_auth_event("FEDERATED SIGN IN", user.get('email'), True)
        return Result.ok(user)

    @returns_result("Session refresh")
    def refresh_session(self) -> Result[Dict]:
        """Refresh the signed-in user's ID token."""
        return Result.ok(self.identity.refresh())

    @returns_result("Sign out")
    def logout(self) -> Result[None]:
        """Sign out the current user."""
        email = self.current_user.get('email') if self.current_user else None
        self.identity.terminate_session()
        self.logger.log_auth_event("SIGN OUT", email, True)
        return Result.ok()

    def on_auth_state_change(self, callback: Callable[[AuthState], None]) -> Subscription:
        """
        Call ``callback`` with the current AuthState now and on every change.
        Cancel the returned subscription to stop.
        """
        subscription = Subscription(callback, name='auth state')

        def listener(state: AuthState):
            if state.signed_in:
                self.logger.log_success("Auth state change", f"signed in as {self.logger.mask_email(state.user.get('email'))}")
            else:
                self.logger.log_success("Auth state change", "signed out")
            subscription.deliver(state)

        subscription.attach(self.identity.observe_session_state(listener))
        return subscription

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(email) and bool(re.match(pattern, email))

    @staticmethod
    def validate_password(password: str) -> tuple[bool, Optional[str]]:
        """
        Validate password strength.
        Returns (is_valid, error_message)
        """
        if not password or len(password) < 6:
            return False, "Password must be at least 6 characters long"
        if len(password) > 128:
            return False, "Password must be less than 128 characters"
        return True, None
