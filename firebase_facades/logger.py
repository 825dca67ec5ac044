"""Logging for facade operations and auth audit trails."""

import logging
import os
from typing import Optional


class FacadeLogger:
    """Records the outcome of every facade call.

    This is the default observer handed to the facades. Anything exposing the
    same ``log_*`` methods can be injected instead.
    """

    def __init__(self, name: str = 'firebase_facades', log_dir: Optional[str] = None):
        self.log_dir = log_dir
        self.logger = logging.getLogger(name)
        self.audit_logger = logging.getLogger(f"{name}.audit")
        if log_dir:
            self.setup_logging()

    def setup_logging(self):
        """Attach file handlers under ``log_dir``"""
        if not os.path.exists(self.log_dir):
            os.makedirs(self.log_dir)

        formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

        # Auth audit log
        audit_handler = logging.FileHandler(os.path.join(self.log_dir, "auth.log"))
        audit_handler.setFormatter(formatter)
        self.audit_logger.addHandler(audit_handler)
        self.audit_logger.setLevel(logging.INFO)

        # General operations log
        handler = logging.FileHandler(os.path.join(self.log_dir, "firebase.log"))
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)
        self.logger.setLevel(logging.INFO)

    def log_success(self, action, detail=""):
        """Log a completed operation"""
        suffix = f": {detail}" if detail else ""
        self.logger.info(f"{action} succeeded{suffix}")

    def log_failure(self, action, error):
        """Log a failed operation"""
        self.logger.error(f"{action} failed: {error}")

    def log_auth_event(self, event, email, success):
        """Log sign-up, sign-in and sign-out attempts"""
        status = "SUCCESS" if success else "FAILED"
        self.audit_logger.info(f"{event} {status} - Email: {self.mask_email(email)}")

    def log_snapshot(self, target, count):
        """Log a real-time update delivered to a listener"""
        self.logger.debug(f"Real-time update on {target}: {count} document(s)")

    @staticmethod
    def mask_email(email):
        """Mask the local part of an email address (e.g., j***@example.com)"""
        if not email:
            return "<none>"
        local, sep, domain = str(email).partition('@')
        if not sep:
            return local[:1] + '***'
        return f"{local[:1]}***@{domain}"
