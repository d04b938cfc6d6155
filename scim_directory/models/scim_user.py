"""
SCIM 2.0 User Resource Models

Pydantic models for SCIM 2.0 User resources compliant with RFC 7643, including
the Enterprise User extension and the ListResponse message.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# SCIM 2.0 Schema URNs
SCIM_USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"
SCIM_ENTERPRISE_USER_SCHEMA = "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User"
SCIM_LIST_RESPONSE_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:ListResponse"


class SCIMName(BaseModel):
    """SCIM name complex attribute"""
    formatted: Optional[str] = None
    familyName: Optional[str] = None
    givenName: Optional[str] = None
    middleName: Optional[str] = None
    honorificPrefix: Optional[str] = None
    honorificSuffix: Optional[str] = None


class SCIMEmail(BaseModel):
    """SCIM email object"""
    value: str = ""
    display: Optional[str] = None
    type: Optional[str] = None
    primary: bool = False


class SCIMPhoneNumber(BaseModel):
    """SCIM phone number object"""
    value: str = ""
    display: Optional[str] = None
    type: Optional[str] = None
    primary: bool = False


class SCIMManager(BaseModel):
    """Enterprise extension manager reference"""
    model_config = ConfigDict(populate_by_name=True)

    value: str
    ref: Optional[str] = Field(None, alias="$ref")
    displayName: Optional[str] = None


class SCIMEnterpriseUser(BaseModel):
    """SCIM 2.0 Enterprise User extension"""
    employeeNumber: Optional[str] = None
    organization: Optional[str] = None
    department: Optional[str] = None
    division: Optional[str] = None
    costCenter: Optional[str] = None
    manager: Optional[SCIMManager] = None


class SCIMMeta(BaseModel):
    """SCIM resource metadata"""
    resourceType: str = "User"
    created: datetime
    lastModified: datetime
    location: str
    version: Optional[str] = None


class SCIMUser(BaseModel):
    """
    SCIM 2.0 User Resource

    The representation returned to identity providers. Serialize it with
    ``model_dump(mode="json", by_alias=True, exclude_none=True)`` so the
    enterprise extension lands under its URN and blank attributes are omitted.
    """
    model_config = ConfigDict(populate_by_name=True)

    schemas: List[str] = Field(default=[SCIM_USER_SCHEMA, SCIM_ENTERPRISE_USER_SCHEMA])
    id: str
    externalId: Optional[str] = None
    meta: SCIMMeta

    userName: str
    name: Optional[SCIMName] = None
    displayName: Optional[str] = None
    nickName: Optional[str] = None
    profileUrl: Optional[str] = None
    title: Optional[str] = None
    userType: Optional[str] = None
    preferredLanguage: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[str] = None
    active: bool = False

    emails: List[SCIMEmail] = Field(default_factory=list)
    phoneNumbers: List[SCIMPhoneNumber] = Field(default_factory=list)

    enterprise: Optional[SCIMEnterpriseUser] = Field(None, alias=SCIM_ENTERPRISE_USER_SCHEMA)

    def to_wire(self) -> dict:
        """Dump the resource as the JSON document sent over the wire."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SCIMUserCreateRequest(BaseModel):
    """
    SCIM 2.0 User creation payload

    Attributes the directory does not store (password, groups, anything
    unknown) are accepted and ignored.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "schemas": [SCIM_USER_SCHEMA, SCIM_ENTERPRISE_USER_SCHEMA],
                "userName": "asmith",
                "displayName": "Alice Smith",
                "active": True,
                "emails": [
                    {"value": "alice.smith@example.com", "type": "work", "primary": True}
                ],
                "phoneNumbers": [
                    {"value": "+1-555-123-4567", "type": "mobile", "primary": True}
                ],
                SCIM_ENTERPRISE_USER_SCHEMA: {
                    "employeeNumber": "AES007",
                    "department": "Engineering",
                    "manager": {"value": "a1b2c3d4-e5f6-7890-1234-567890abcdef"},
                },
            }
        },
    )

    schemas: List[str] = Field(default_factory=list)
    externalId: Optional[str] = None

    userName: str = ""
    name: Optional[SCIMName] = None
    displayName: Optional[str] = None
    nickName: Optional[str] = None
    profileUrl: Optional[str] = None
    title: Optional[str] = None
    userType: Optional[str] = None
    preferredLanguage: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[str] = None
    active: bool = False

    emails: List[SCIMEmail] = Field(default_factory=list)
    phoneNumbers: List[SCIMPhoneNumber] = Field(default_factory=list)

    enterprise: Optional[SCIMEnterpriseUser] = Field(None, alias=SCIM_ENTERPRISE_USER_SCHEMA)


class SCIMListResponse(BaseModel):
    """
    SCIM 2.0 List Response

    Used for GET /Users. Pagination is single-page: every user of the tenant
    is returned starting at index 1.
    """
    schemas: List[str] = Field(default=[SCIM_LIST_RESPONSE_SCHEMA])
    totalResults: int
    startIndex: int = 1
    itemsPerPage: int
    Resources: List[SCIMUser]

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
