"""
Tests for the tenant authentication gate

Covers:
- Missing, malformed and unknown bearer tokens on every SCIM endpoint
- Store faults while resolving a token
- Resolution of a valid token to its organisation
"""

from unittest.mock import Mock, patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from scim_directory.errors import AuthenticationError, InternalError
from scim_directory.handlers.auth import resolve_organisation_id
from scim_directory.services.user_store import RecordNotFound, StoreError

from .conftest import bearer

SCIM_ENDPOINTS = [
    ("GET", "/scim/v2/Users"),
    ("GET", "/scim/v2/users"),
    ("POST", "/scim/v2/Users"),
    ("GET", "/scim/v2/Users/some-user-id"),
]


class TestAuthGateOverHTTP:
    """The gate as seen through the HTTP surface"""

    @pytest.mark.parametrize("method,path", SCIM_ENDPOINTS)
    def test_missing_authorization_header(self, client, method, path):
        response = client.request(method, path, json={"userName": "alice"})
        assert response.status_code == 401
        assert response.content == b""

    @pytest.mark.parametrize("method,path", SCIM_ENDPOINTS)
    def test_unknown_token(self, client, method, path):
        response = client.request(method, path, headers=bearer("bad-token"), json={"userName": "alice"})
        assert response.status_code == 401

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer", "tok-A"])
    def test_malformed_authorization_header(self, client, header):
        response = client.get("/scim/v2/Users", headers={"Authorization": header})
        assert response.status_code == 401

    def test_scheme_is_case_insensitive(self, client):
        response = client.get("/scim/v2/Users", headers={"Authorization": "bearer tok-A"})
        assert response.status_code == 200

    def test_rejected_request_uses_scim_content_type(self, client):
        response = client.get("/scim/v2/Users")
        assert response.headers["content-type"].startswith("application/scim+json")

    def test_auth_is_checked_before_the_body(self, client):
        """An unauthenticated malformed POST is a 401, not a 400"""
        response = client.post(
            "/scim/v2/Users",
            content=b"{not json",
            headers={"Authorization": "Bearer bad-token"},
        )
        assert response.status_code == 401

    def test_store_fault_is_internal_error(self, client, store):
        with patch.object(store, "get_organisation_token_by_token", side_effect=StoreError("db down")):
            response = client.get("/scim/v2/Users", headers=bearer("tok-A"))
        assert response.status_code == 500

    def test_health_does_not_require_token(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["services"] == {"store": True}


class TestResolveOrganisationId:
    """The dependency function called directly"""

    @pytest.fixture
    def credentials(self):
        return HTTPAuthorizationCredentials(scheme="Bearer", credentials="tok-A")

    def test_valid_token_resolves_to_its_organisation(self, store, tenants, credentials):
        assert resolve_organisation_id(credentials, store) == tenants["T1"]

        other = HTTPAuthorizationCredentials(scheme="Bearer", credentials="tok-B")
        assert resolve_organisation_id(other, store) == tenants["T2"]

    def test_missing_credentials(self):
        store = Mock()
        with pytest.raises(AuthenticationError):
            resolve_organisation_id(None, store)
        store.get_organisation_token_by_token.assert_not_called()

    def test_unknown_token(self, credentials):
        store = Mock()
        store.get_organisation_token_by_token.side_effect = RecordNotFound("nope")
        with pytest.raises(AuthenticationError):
            resolve_organisation_id(credentials, store)

    def test_store_fault(self, credentials):
        store = Mock()
        store.get_organisation_token_by_token.side_effect = StoreError("connection reset")
        with pytest.raises(InternalError) as exc_info:
            resolve_organisation_id(credentials, store)
        assert exc_info.value.status_code == 500
