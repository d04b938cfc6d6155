"""
SCIM Directory Models Package

Pydantic models for the SCIM 2.0 wire format, SQLAlchemy records for the
directory store, and the insert commands that connect them.
"""

from .scim_user import (
    SCIMUser,
    SCIMUserCreateRequest,
    SCIMName,
    SCIMEmail,
    SCIMPhoneNumber,
    SCIMManager,
    SCIMEnterpriseUser,
    SCIMMeta,
    SCIMListResponse,
    SCIM_USER_SCHEMA,
    SCIM_ENTERPRISE_USER_SCHEMA,
    SCIM_LIST_RESPONSE_SCHEMA,
)

__all__ = [
    "SCIMUser",
    "SCIMUserCreateRequest",
    "SCIMName",
    "SCIMEmail",
    "SCIMPhoneNumber",
    "SCIMManager",
    "SCIMEnterpriseUser",
    "SCIMMeta",
    "SCIMListResponse",
    "SCIM_USER_SCHEMA",
    "SCIM_ENTERPRISE_USER_SCHEMA",
    "SCIM_LIST_RESPONSE_SCHEMA",
]
