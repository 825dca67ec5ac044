"""Firebase Authentication and Firestore facades."""

from .auth import FirebaseAuth
from .client import FirebaseClient
from .config import FirebaseConfig
from .data_layer import FirebaseDataLayer
from .identity import AuthState
from .logger import FacadeLogger
from .result import Result
from .subscription import Subscription, SubscriptionClosed
from .users import UserDirectory

__all__ = [
    'AuthState',
    'FacadeLogger',
    'FirebaseAuth',
    'FirebaseClient',
    'FirebaseConfig',
    'FirebaseDataLayer',
    'Result',
    'Subscription',
    'SubscriptionClosed',
    'UserDirectory',
]
