"""
SCIM Directory

Multi-tenant SCIM 2.0 provisioning service for User resources. Identity
providers authenticate with an organisation-scoped bearer token and can
list, fetch and create users stored in a relational database.
"""

__version__ = "1.0.0"
