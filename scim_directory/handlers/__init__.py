"""
Authentication and request handlers for SCIM Directory.
"""

from .auth import get_store, resolve_organisation_id

__all__ = ["get_store", "resolve_organisation_id"]
