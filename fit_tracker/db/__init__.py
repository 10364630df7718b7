"""Database package: engine, session, base."""

from fit_tracker.db.session import create_engine_for, create_session_maker

__all__ = ["create_engine_for", "create_session_maker"]
