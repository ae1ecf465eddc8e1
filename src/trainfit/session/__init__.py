"""Authenticated session storage."""

from trainfit.session.store import SessionStore, StoredSession

__all__ = ["SessionStore", "StoredSession"]
