"""Firebase project configuration."""

import json
import os
from dataclasses import dataclass
from typing import Dict, Optional, Any

SERVICE_ACCOUNT_FILENAME = 'firebase-service-account.json'


@dataclass
class FirebaseConfig:
    """Credentials and identifiers for one Firebase project.

    Read once at process start and handed to ``FirebaseClient``; nothing in the
    facades looks at the environment directly.
    """

    service_account: Optional[Dict[str, Any]] = None
    api_key: Optional[str] = None
    project_id: Optional[str] = None
    app_id: Optional[str] = None
    auth_domain: Optional[str] = None
    oauth_client_secrets: Optional[str] = None
    request_timeout: float = 10.0

    @classmethod
    def from_env(cls, project_root: Optional[str] = None) -> 'FirebaseConfig':
        """
        Build the config from environment variables.

        The service account is taken from FIREBASE_SERVICE_ACCOUNT (JSON content),
        then FIREBASE_SERVICE_ACCOUNT_PATH, then firebase-service-account.json
        in the project root.
        """
        service_account = cls._load_service_account(project_root)
        project_id = os.getenv('FIREBASE_PROJECT_ID') or service_account.get('project_id')
        timeout = os.getenv('FIREBASE_REQUEST_TIMEOUT')
        return cls(
            service_account=service_account,
            api_key=os.getenv('FIREBASE_WEB_API_KEY'),
            project_id=project_id,
            app_id=os.getenv('FIREBASE_APP_ID'),
            auth_domain=os.getenv('FIREBASE_AUTH_DOMAIN') or (
                f"{project_id}.firebaseapp.com" if project_id else None
            ),
            oauth_client_secrets=os.getenv('GOOGLE_OAUTH_CLIENT_SECRETS'),
            request_timeout=float(timeout) if timeout else 10.0,
        )

    @staticmethod
    def _load_service_account(project_root: Optional[str] = None) -> Dict[str, Any]:
        # Try environment variable first (for cloud deployments)
        service_account_json = os.getenv('FIREBASE_SERVICE_ACCOUNT')
        if service_account_json:
            try:
                service_account = json.loads(service_account_json)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid FIREBASE_SERVICE_ACCOUNT environment variable: {e}")
            if not isinstance(service_account, dict):
                raise ValueError("Invalid FIREBASE_SERVICE_ACCOUNT environment variable: expected a JSON object")
            return service_account

        service_account_path = os.getenv('FIREBASE_SERVICE_ACCOUNT_PATH')
        if not service_account_path:
            # Fallback to file (for local development)
            if project_root is None:
                project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            service_account_path = os.path.join(project_root, SERVICE_ACCOUNT_FILENAME)

        if not os.path.exists(service_account_path):
            raise FileNotFoundError(
                f"Firebase service account not found. Either:\n"
                f"1. Set FIREBASE_SERVICE_ACCOUNT environment variable with JSON content,\n"
                f"2. Set FIREBASE_SERVICE_ACCOUNT_PATH to the JSON file, or\n"
                f"3. Place {SERVICE_ACCOUNT_FILENAME} at: {service_account_path}\n"
                "Download from Firebase Console → Project Settings → Service Accounts"
            )

        with open(service_account_path, 'r') as f:
            return json.load(f)

    def require_api_key(self) -> str:
        """Web API key, needed by every Identity Toolkit call."""
        if not self.api_key:
            raise ValueError(
                "Firebase Web API Key not set. "
                "Set FIREBASE_WEB_API_KEY environment variable or pass api_key."
            )
        return self.api_key
