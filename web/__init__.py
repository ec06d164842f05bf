"""Web package: Flask application for the raffle dashboard."""

from .app import create_app

__all__ = ["create_app"]
