"""
Resource Mapper

Transforms between the SCIM 2.0 User wire models and the directory's record
shapes. There is exactly one function per direction:

- to_scim_user: stored user row + email/phone rows -> SCIMUser
- to_create_user_command (+ child helpers): SCIMUserCreateRequest -> insert commands
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from ..models.commands import (
    CreateScimUserCommand,
    CreateUserEmailCommand,
    CreateUserPhoneNumberCommand,
)
from ..models.records import ScimUserEmailRecord, ScimUserPhoneNumberRecord, ScimUserRecord
from ..models.scim_user import (
    SCIM_ENTERPRISE_USER_SCHEMA,
    SCIM_USER_SCHEMA,
    SCIMEmail,
    SCIMEnterpriseUser,
    SCIMListResponse,
    SCIMManager,
    SCIMMeta,
    SCIMName,
    SCIMPhoneNumber,
    SCIMUser,
    SCIMUserCreateRequest,
)
from .user_store import new_id, utc_timestamp

# Rendered for stored timestamps that cannot be parsed.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None


def user_location(base_url: str, user_id: str) -> str:
    """Build the canonical resource URL: <base>/scim/v2/Users/<id>."""
    return f"{base_url.rstrip('/')}/scim/v2/Users/{user_id}"


def parse_timestamp(value: Optional[str]) -> datetime:
    """
    Parse a stored RFC 3339 timestamp and normalise it to UTC.

    Parsing is lenient: an empty, malformed or offset-less value yields
    ZERO_TIME instead of raising.

    Example:
        >>> parse_timestamp("2024-07-29T16:30:00+02:00")
        datetime.datetime(2024, 7, 29, 14, 30, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp("yesterday") == ZERO_TIME
        True
    """
    if not value:
        return ZERO_TIME

    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            return ZERO_TIME
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return ZERO_TIME


def to_scim_user(
    user: ScimUserRecord,
    emails: Iterable[ScimUserEmailRecord],
    phone_numbers: Iterable[ScimUserPhoneNumberRecord],
    base_url: str,
) -> SCIMUser:
    """
    Build the SCIM User resource for a stored user and its children.

    The enterprise extension schema is always listed and the extension object
    is always present, even when every one of its attributes is blank. The
    same goes for ``name``. Blank strings are left out of the rendered JSON.
    The manager's display name is never resolved.

    Args:
        user: Stored user row
        emails: Stored email rows of that user
        phone_numbers: Stored phone number rows of that user
        base_url: Public base URL for meta.location and manager $ref

    Returns:
        SCIMUser: Wire representation of the user
    """
    manager = None
    if user.manager_id:
        manager = SCIMManager(
            value=user.manager_id,
            ref=user_location(base_url, user.manager_id),
        )

    return SCIMUser(
        schemas=[SCIM_USER_SCHEMA, SCIM_ENTERPRISE_USER_SCHEMA],
        id=user.id,
        externalId=_blank_to_none(user.external_id),
        meta=SCIMMeta(
            resourceType=user.meta_resource_type or "User",
            created=parse_timestamp(user.meta_created),
            lastModified=parse_timestamp(user.meta_last_modified),
            location=user_location(base_url, user.id),
            version=_blank_to_none(user.meta_version),
        ),
        userName=user.user_name,
        name=SCIMName(
            formatted=_blank_to_none(user.name_formatted),
            familyName=_blank_to_none(user.name_family_name),
            givenName=_blank_to_none(user.name_given_name),
            middleName=_blank_to_none(user.name_middle_name),
            honorificPrefix=_blank_to_none(user.name_honorific_prefix),
            honorificSuffix=_blank_to_none(user.name_honorific_suffix),
        ),
        displayName=_blank_to_none(user.display_name),
        nickName=_blank_to_none(user.nick_name),
        profileUrl=_blank_to_none(user.profile_url),
        title=_blank_to_none(user.title),
        userType=_blank_to_none(user.user_type),
        preferredLanguage=_blank_to_none(user.preferred_language),
        locale=_blank_to_none(user.locale),
        timezone=_blank_to_none(user.timezone),
        active=bool(user.active),
        emails=[
            SCIMEmail(
                value=email.value,
                display=_blank_to_none(email.display),
                type=_blank_to_none(email.type),
                primary=bool(email.primary_email),
            )
            for email in emails
        ],
        phoneNumbers=[
            SCIMPhoneNumber(
                value=phone.value,
                display=_blank_to_none(phone.display),
                type=_blank_to_none(phone.type),
                primary=bool(phone.primary_phone_number),
            )
            for phone in phone_numbers
        ],
        enterprise=SCIMEnterpriseUser(
            employeeNumber=_blank_to_none(user.employee_number),
            organization=_blank_to_none(user.organization),
            department=_blank_to_none(user.department),
            division=_blank_to_none(user.division),
            costCenter=_blank_to_none(user.cost_center),
            manager=manager,
        ),
    )


def to_list_response(users: List[SCIMUser]) -> SCIMListResponse:
    """Wrap users in a single-page ListResponse."""
    return SCIMListResponse(
        totalResults=len(users),
        startIndex=1,
        itemsPerPage=len(users),
        Resources=users,
    )


def to_create_user_command(
    organisation_id: str,
    user_id: str,
    request: SCIMUserCreateRequest,
    now: datetime,
) -> CreateScimUserCommand:
    """
    Map a creation request onto the parent insert command.

    An empty userName is passed through unchanged.

    Args:
        organisation_id: Tenant the user is created under
        user_id: Freshly minted user id
        request: Parsed creation payload
        now: Creation moment, used for created/lastModified/version

    Returns:
        CreateScimUserCommand: Parent row to insert
    """
    created = utc_timestamp(now)
    name = request.name or SCIMName()
    enterprise = request.enterprise or SCIMEnterpriseUser()

    return CreateScimUserCommand(
        id=user_id,
        organisation_id=organisation_id,
        user_name=request.userName,
        display_name=_blank_to_none(request.displayName),
        active=request.active,
        external_id=_blank_to_none(request.externalId),
        nick_name=_blank_to_none(request.nickName),
        profile_url=_blank_to_none(request.profileUrl),
        title=_blank_to_none(request.title),
        user_type=_blank_to_none(request.userType),
        preferred_language=_blank_to_none(request.preferredLanguage),
        locale=_blank_to_none(request.locale),
        timezone=_blank_to_none(request.timezone),
        name_formatted=_blank_to_none(name.formatted),
        name_family_name=_blank_to_none(name.familyName),
        name_given_name=_blank_to_none(name.givenName),
        name_middle_name=_blank_to_none(name.middleName),
        name_honorific_prefix=_blank_to_none(name.honorificPrefix),
        name_honorific_suffix=_blank_to_none(name.honorificSuffix),
        employee_number=_blank_to_none(enterprise.employeeNumber),
        organization=_blank_to_none(enterprise.organization),
        department=_blank_to_none(enterprise.department),
        division=_blank_to_none(enterprise.division),
        cost_center=_blank_to_none(enterprise.costCenter),
        manager_id=_blank_to_none(enterprise.manager.value) if enterprise.manager else None,
        meta_created=created,
        meta_last_modified=created,
        meta_version=f'W/"{created}"',
    )


def to_email_commands(
    user_id: str,
    emails: Iterable[SCIMEmail],
    id_factory: Callable[[], str] = new_id,
) -> List[CreateUserEmailCommand]:
    """Map each submitted email 1:1 onto an insert command for user_id."""
    return [
        CreateUserEmailCommand(
            id=id_factory(),
            user_id=user_id,
            value=email.value,
            display=_blank_to_none(email.display),
            type=_blank_to_none(email.type),
            primary_email=email.primary,
        )
        for email in emails
    ]


def to_phone_number_commands(
    user_id: str,
    phone_numbers: Iterable[SCIMPhoneNumber],
    id_factory: Callable[[], str] = new_id,
) -> List[CreateUserPhoneNumberCommand]:
    """Map each submitted phone number 1:1 onto an insert command for user_id."""
    return [
        CreateUserPhoneNumberCommand(
            id=id_factory(),
            user_id=user_id,
            value=phone.value,
            display=_blank_to_none(phone.display),
            type=_blank_to_none(phone.type),
            primary_phone_number=phone.primary,
        )
        for phone in phone_numbers
    ]
