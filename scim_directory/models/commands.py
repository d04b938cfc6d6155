"""
Insert commands produced by the resource mapper on the create path.

Field names match the record columns so the store can build rows directly
from ``dataclasses.asdict``.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CreateScimUserCommand:
    id: str
    organisation_id: str
    user_name: str
    active: bool
    meta_created: str
    meta_last_modified: str
    display_name: Optional[str] = None
    external_id: Optional[str] = None
    nick_name: Optional[str] = None
    profile_url: Optional[str] = None
    title: Optional[str] = None
    user_type: Optional[str] = None
    preferred_language: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[str] = None
    name_formatted: Optional[str] = None
    name_family_name: Optional[str] = None
    name_given_name: Optional[str] = None
    name_middle_name: Optional[str] = None
    name_honorific_prefix: Optional[str] = None
    name_honorific_suffix: Optional[str] = None
    employee_number: Optional[str] = None
    organization: Optional[str] = None
    department: Optional[str] = None
    division: Optional[str] = None
    cost_center: Optional[str] = None
    manager_id: Optional[str] = None
    meta_resource_type: str = "User"
    meta_version: Optional[str] = None


@dataclass
class CreateUserEmailCommand:
    id: str
    user_id: str
    value: str
    display: Optional[str] = None
    type: Optional[str] = None
    primary_email: bool = False


@dataclass
class CreateUserPhoneNumberCommand:
    id: str
    user_id: str
    value: str
    display: Optional[str] = None
    type: Optional[str] = None
    primary_phone_number: bool = False
