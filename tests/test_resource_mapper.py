"""
Tests for the Resource Mapper

Tests both mapping directions:
- Stored user + children -> SCIM User (schemas, extension, meta, timestamps)
- SCIM creation payload -> insert commands
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from scim_directory.models.records import ScimUserEmailRecord, ScimUserPhoneNumberRecord, ScimUserRecord
from scim_directory.models.scim_user import (
    SCIM_ENTERPRISE_USER_SCHEMA,
    SCIM_LIST_RESPONSE_SCHEMA,
    SCIM_USER_SCHEMA,
    SCIMUserCreateRequest,
)
from scim_directory.services.resource_mapper import (
    ZERO_TIME,
    parse_timestamp,
    to_create_user_command,
    to_email_commands,
    to_list_response,
    to_phone_number_commands,
    to_scim_user,
)
from scim_directory.services.user_store import utc_timestamp

BASE_URL = "https://scim.test"


@pytest.fixture
def user_record():
    """A stored user with only the required columns populated"""
    return ScimUserRecord(
        id="user-1",
        organisation_id="org-1",
        user_name="asmith",
        display_name="Alice Smith",
        active=True,
        meta_resource_type="User",
        meta_created="2024-07-29T14:30:00Z",
        meta_last_modified="2024-07-29T16:30:00+02:00",
        meta_version='W/"2024-07-29T14:30:00Z"',
    )


@pytest.fixture
def email_records():
    return [
        ScimUserEmailRecord(id="e1", user_id="user-1", value="alice@example.com",
                            type="work", primary_email=True),
        ScimUserEmailRecord(id="e2", user_id="user-1", value="alice@home.example",
                            display="Home", type="home", primary_email=False),
    ]


@pytest.fixture
def phone_records():
    return [
        ScimUserPhoneNumberRecord(id="p1", user_id="user-1", value="+1-555-123-4567",
                                  type="mobile", primary_phone_number=True),
    ]


class TestStorageToWire:
    """Stored records rendered as SCIM User resources"""

    def test_schemas_always_include_core_and_enterprise(self, user_record):
        wire = to_scim_user(user_record, [], [], BASE_URL).to_wire()
        assert wire["schemas"] == [SCIM_USER_SCHEMA, SCIM_ENTERPRISE_USER_SCHEMA]

    def test_blank_enterprise_extension_is_still_emitted(self, user_record):
        wire = to_scim_user(user_record, [], [], BASE_URL).to_wire()
        assert wire[SCIM_ENTERPRISE_USER_SCHEMA] == {}
        assert wire["name"] == {}

    def test_populated_enterprise_extension(self, user_record):
        user_record.employee_number = "AES007"
        user_record.department = "Engineering"
        user_record.cost_center = "CC1002"
        user_record.manager_id = "mgr-1"

        extension = to_scim_user(user_record, [], [], BASE_URL).to_wire()[SCIM_ENTERPRISE_USER_SCHEMA]

        assert extension["employeeNumber"] == "AES007"
        assert extension["department"] == "Engineering"
        assert extension["costCenter"] == "CC1002"
        assert extension["manager"] == {
            "value": "mgr-1",
            "$ref": f"{BASE_URL}/scim/v2/Users/mgr-1",
        }

    def test_meta(self, user_record):
        wire = to_scim_user(user_record, [], [], BASE_URL).to_wire()
        assert wire["meta"]["resourceType"] == "User"
        assert wire["meta"]["location"] == f"{BASE_URL}/scim/v2/Users/user-1"
        assert wire["meta"]["version"] == 'W/"2024-07-29T14:30:00Z"'
        assert wire["meta"]["created"] == "2024-07-29T14:30:00Z"

    def test_timestamps_are_rendered_in_utc(self, user_record):
        user = to_scim_user(user_record, [], [], BASE_URL)
        assert user.meta.lastModified == datetime(2024, 7, 29, 14, 30, tzinfo=timezone.utc)

    def test_malformed_timestamp_becomes_zero_time(self, user_record):
        user_record.meta_created = "not a timestamp"
        user_record.meta_last_modified = "2024-07-29 14:30:00"

        user = to_scim_user(user_record, [], [], BASE_URL)

        assert user.meta.created == ZERO_TIME
        assert user.meta.lastModified == ZERO_TIME

    def test_core_attributes(self, user_record):
        user_record.nick_name = "Ally"
        user_record.external_id = "ext-42"
        user_record.name_given_name = "Alice"
        user_record.name_family_name = "Smith"

        wire = to_scim_user(user_record, [], [], BASE_URL).to_wire()

        assert wire["id"] == "user-1"
        assert wire["userName"] == "asmith"
        assert wire["displayName"] == "Alice Smith"
        assert wire["active"] is True
        assert wire["nickName"] == "Ally"
        assert wire["externalId"] == "ext-42"
        assert wire["name"] == {"givenName": "Alice", "familyName": "Smith"}
        assert "title" not in wire
        assert "password" not in wire

    def test_children(self, user_record, email_records, phone_records):
        wire = to_scim_user(user_record, email_records, phone_records, BASE_URL).to_wire()

        assert wire["emails"] == [
            {"value": "alice@example.com", "type": "work", "primary": True},
            {"value": "alice@home.example", "display": "Home", "type": "home", "primary": False},
        ]
        assert wire["phoneNumbers"] == [
            {"value": "+1-555-123-4567", "type": "mobile", "primary": True},
        ]

    def test_no_children_renders_empty_lists(self, user_record):
        wire = to_scim_user(user_record, [], [], BASE_URL).to_wire()
        assert wire["emails"] == []
        assert wire["phoneNumbers"] == []

    def test_list_response_envelope(self, user_record):
        users = [to_scim_user(user_record, [], [], BASE_URL)]
        wire = to_list_response(users).to_wire()

        assert wire["schemas"] == [SCIM_LIST_RESPONSE_SCHEMA]
        assert wire["totalResults"] == 1
        assert wire["startIndex"] == 1
        assert wire["itemsPerPage"] == 1
        assert wire["Resources"][0]["id"] == "user-1"

    def test_empty_list_response(self):
        wire = to_list_response([]).to_wire()
        assert wire["totalResults"] == 0
        assert wire["itemsPerPage"] == 0
        assert wire["Resources"] == []


class TestParseTimestamp:

    @pytest.mark.parametrize("value,expected", [
        ("2024-07-29T14:30:00Z", datetime(2024, 7, 29, 14, 30, tzinfo=timezone.utc)),
        ("2024-07-29T14:30:00+00:00", datetime(2024, 7, 29, 14, 30, tzinfo=timezone.utc)),
        ("2024-07-29T09:30:00-05:00", datetime(2024, 7, 29, 14, 30, tzinfo=timezone.utc)),
        ("2024-07-29T14:30:00.5Z", datetime(2024, 7, 29, 14, 30, 0, 500000, tzinfo=timezone.utc)),
    ])
    def test_valid(self, value, expected):
        assert parse_timestamp(value) == expected

    @pytest.mark.parametrize("value", [None, "", "garbage", "2024-13-45T00:00:00Z", "2024-07-29T14:30:00"])
    def test_lenient_fallback(self, value):
        assert parse_timestamp(value) == ZERO_TIME


class TestWireToStorage:
    """Creation payloads mapped onto insert commands"""

    NOW = datetime(2024, 7, 29, 14, 30, tzinfo=timezone.utc)

    def test_core_fields(self):
        request = SCIMUserCreateRequest.model_validate({
            "userName": "alice",
            "displayName": "Alice",
            "active": True,
        })

        command = to_create_user_command("org-1", "user-1", request, self.NOW)

        assert command.id == "user-1"
        assert command.organisation_id == "org-1"
        assert command.user_name == "alice"
        assert command.display_name == "Alice"
        assert command.active is True
        assert command.meta_created == "2024-07-29T14:30:00Z"
        assert command.meta_last_modified == "2024-07-29T14:30:00Z"

    def test_creation_moment_is_stored_in_utc(self):
        offset_now = datetime(2024, 7, 29, 16, 30, tzinfo=timezone(timedelta(hours=2)))

        command = to_create_user_command("org-1", "user-1", SCIMUserCreateRequest(), offset_now)

        assert command.meta_created == utc_timestamp(self.NOW) == "2024-07-29T14:30:00Z"
        assert command.meta_version == 'W/"2024-07-29T14:30:00Z"'

    def test_default_child_ids_are_unique(self):
        request = SCIMUserCreateRequest.model_validate({"emails": [{"value": "a@x.com"}, {"value": "b@x.com"}]})

        ids = [email.id for email in to_email_commands("user-1", request.emails)]

        assert len(set(ids)) == 2
        assert all(ids)

    def test_profile_name_and_enterprise_fields(self):
        request = SCIMUserCreateRequest.model_validate({
            "userName": "asmith",
            "externalId": "ext-1",
            "title": "Engineer",
            "locale": "en-US",
            "name": {"givenName": "Alice", "familyName": "Smith"},
            SCIM_ENTERPRISE_USER_SCHEMA: {
                "department": "Engineering",
                "manager": {"value": "mgr-1", "displayName": "Bob"},
            },
        })

        command = to_create_user_command("org-1", "user-1", request, self.NOW)

        assert command.external_id == "ext-1"
        assert command.title == "Engineer"
        assert command.locale == "en-US"
        assert command.name_given_name == "Alice"
        assert command.name_family_name == "Smith"
        assert command.department == "Engineering"
        assert command.manager_id == "mgr-1"

    def test_unknown_fields_are_ignored(self):
        request = SCIMUserCreateRequest.model_validate({
            "userName": "alice",
            "password": "hunter2",
            "groups": [{"value": "g1", "display": "Engineering"}],
            "favouriteColour": "teal",
        })

        command = to_create_user_command("org-1", "user-1", request, self.NOW)

        assert command.user_name == "alice"
        assert not hasattr(command, "password")

    def test_empty_username_is_accepted(self):
        request = SCIMUserCreateRequest.model_validate({})
        command = to_create_user_command("org-1", "user-1", request, self.NOW)
        assert command.user_name == ""
        assert command.active is False

    def test_children_map_one_to_one(self):
        request = SCIMUserCreateRequest.model_validate({
            "userName": "alice",
            "emails": [
                {"value": "a@x.com", "primary": True},
                {"value": "a@y.com", "type": "home", "display": "Home"},
            ],
            "phoneNumbers": [{"value": "+1-555-0100", "type": "work"}],
        })
        ids = (f"child-{n}" for n in count(1))

        emails = to_email_commands("user-1", request.emails, lambda: next(ids))
        phones = to_phone_number_commands("user-1", request.phoneNumbers, lambda: next(ids))

        assert [(e.id, e.user_id, e.value, e.primary_email) for e in emails] == [
            ("child-1", "user-1", "a@x.com", True),
            ("child-2", "user-1", "a@y.com", False),
        ]
        assert emails[1].type == "home"
        assert emails[1].display == "Home"
        assert [(p.id, p.value, p.type, p.primary_phone_number) for p in phones] == [
            ("child-3", "+1-555-0100", "work", False),
        ]
