"""Authentication for the dashboard API.

A single operator account configured through ``ADMIN_USERNAME`` and
``ADMIN_PASSWORD``; sessions are handled by Flask-Login.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import jsonify
from flask_login import LoginManager, UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from core import get_logger

logger = get_logger(__name__)


@dataclass
class AdminCredentials:
    """Operator credentials; ``password_hash`` is a werkzeug hash once initialized."""
    username: str
    password_hash: str


login_manager = LoginManager()


class AdminUser(UserMixin):
    """Represents an authenticated operator."""
    def __init__(self, username: str) -> None:
        self.id = username
        self.username = username


def _is_hashed(value: str) -> bool:
    return value.startswith(("pbkdf2:", "scrypt:"))


def init_login_manager(app, credentials: AdminCredentials) -> AdminCredentials:
    """Initialize Flask-Login with the operator credentials.

    Args:
        app: Flask application instance
        credentials: Credentials with a plain or already hashed password

    Returns:
        Credentials with a hashed password, also stored in ``app.config``
    """
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str) -> Optional[AdminUser]:
        if user_id == credentials.username:
            return AdminUser(username=user_id)
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    if not _is_hashed(credentials.password_hash):
        credentials.password_hash = generate_password_hash(credentials.password_hash)
        logger.debug("Hashed configured password for '%s'", credentials.username)

    app.config["ADMIN_CREDENTIALS"] = credentials
    return credentials


def validate_credentials(credentials: AdminCredentials, username: str, password: str) -> bool:
    """Check a login attempt against the configured credentials.

    The username comparison is case-insensitive.
    """
    if username.lower() != credentials.username.lower():
        logger.info("Rejected login for unknown user '%s'", username)
        return False

    result = check_password_hash(credentials.password_hash, password)
    if not result:
        logger.info("Rejected login for '%s': wrong password", username)
    return result
