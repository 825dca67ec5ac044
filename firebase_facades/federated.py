"""Interactive consent flows for federated sign-in."""

from google_auth_oauthlib.flow import InstalledAppFlow

GOOGLE_SCOPES = [
    'openid',
    'https://www.googleapis.com/auth/userinfo.email',
    'https://www.googleapis.com/auth/userinfo.profile',
]


class ConsentFlowError(Exception):
    """The provider flow finished without giving us an ID token."""


class GoogleConsentFlow:
    """
    Google sign-in through the browser.

    Opens the consent page and waits on a local loopback server for the
    redirect, so the call blocks until the user finishes or ``timeout_seconds``
    passes.
    """

    provider_id = 'google.com'

    def __init__(self, client_secrets_file: str, port: int = 0, open_browser: bool = True,
                 timeout_seconds: int = 300):
        self.client_secrets_file = client_secrets_file
        self.port = port
        self.open_browser = open_browser
        self.timeout_seconds = timeout_seconds

    def obtain_id_token(self) -> str:
        flow = InstalledAppFlow.from_client_secrets_file(self.client_secrets_file, scopes=GOOGLE_SCOPES)
        try:
            credentials = flow.run_local_server(
                port=self.port,
                open_browser=self.open_browser,
                timeout_seconds=self.timeout_seconds,
            )
        except Exception as e:
            # A timed-out or dismissed consent page surfaces as an arbitrary error here
            raise ConsentFlowError(f"Google sign-in was cancelled or failed: {e}") from e
        id_token = getattr(credentials, 'id_token', None)
        if not id_token:
            raise ConsentFlowError("Google sign-in was cancelled or returned no ID token")
        return id_token
