"""Atelier API: courses, members and gallery for the studio website."""

from .api import app, create_app

__all__ = ["app", "create_app"]
