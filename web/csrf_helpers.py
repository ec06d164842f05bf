"""CSRF handling for the JSON API.

Mutating API calls carry the token in the ``X-CSRFToken`` header; the token
is obtained from ``GET /api/csrf-token`` after login.
"""

from __future__ import annotations

from flask import current_app, jsonify, request
from flask_wtf.csrf import generate_csrf

# Login must be reachable before a session (and therefore a token) exists
CSRF_EXEMPT_ENDPOINTS = {"api.login", "csrf_token"}


def csrf_token() -> str:
    """Current CSRF token, or an empty string when CSRF is disabled."""
    if current_app.config.get('WTF_CSRF_ENABLED', True):
        return generate_csrf()
    return ""


def init_csrf_helpers(app):
    """Register the token endpoint and the check for mutating API calls."""

    @app.route("/api/csrf-token", endpoint="csrf_token")
    def issue_csrf_token():
        return jsonify({"csrf_token": csrf_token()})

    @app.before_request
    def enforce_csrf():
        if not current_app.config.get('WTF_CSRF_ENABLED', True):
            return None
        if request.endpoint in CSRF_EXEMPT_ENDPOINTS:
            return None
        if request.method in {"POST", "PUT", "PATCH", "DELETE"}:
            from web.config_middleware import csrf
            csrf.protect()
        return None
