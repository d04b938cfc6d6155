"""
Tests for operator tooling: the seed command and the mock IdP client
"""

from unittest.mock import Mock

import pytest
import requests

from scim_directory.models.scim_user import SCIM_ENTERPRISE_USER_SCHEMA
from scim_directory.tools.mock_idp_client import (
    MockIdPSCIMClient,
    create_sample_user_data,
    run_scenarios,
)
from scim_directory.tools.seed import main as seed_main, seed


class TestSeed:

    def test_seed_binds_token_to_new_organisation(self, store):
        organisation_id = seed(store, "Acme", "tok-acme")

        token = store.get_organisation_token_by_token("tok-acme")
        assert token.organisation_id == organisation_id
        assert store.list_scim_users(organisation_id) == []

    def test_main_writes_to_given_database(self, tmp_path, capsys):
        database_url = f"sqlite:///{tmp_path / 'seed.db'}"

        exit_code = seed_main(["--name", "Acme", "--token", "tok-acme", "--database-url", database_url])

        assert exit_code == 0
        assert "Seeding completed" in capsys.readouterr().out


def _response(status_code, payload=None):
    response = Mock(status_code=status_code)
    response.json.return_value = payload or {}
    return response


class TestMockIdPClient:

    @pytest.fixture
    def client(self):
        idp = MockIdPSCIMClient("http://localhost:8080/", "tok-A")
        idp.session = Mock()
        return idp

    def test_session_headers(self):
        idp = MockIdPSCIMClient("http://localhost:8080", "tok-A")
        assert idp.session.headers["Authorization"] == "Bearer tok-A"
        assert idp.session.headers["Content-Type"] == "application/scim+json"

    def test_sample_user_data(self):
        data = create_sample_user_data("asmith", "Alice Smith", "alice@example.com",
                                       phone="+1-555-0100", department="Engineering")

        assert data["userName"] == "asmith"
        assert data["emails"] == [{"value": "alice@example.com", "type": "work", "primary": True}]
        assert data["phoneNumbers"][0]["value"] == "+1-555-0100"
        assert data[SCIM_ENTERPRISE_USER_SCHEMA] == {"department": "Engineering"}

    def test_create_user(self, client):
        client.session.post.return_value = _response(201, {"id": "user-1", "emails": []})

        result = client.create_user({"userName": "asmith"})

        assert result["id"] == "user-1"
        url = client.session.post.call_args.args[0]
        assert url == "http://localhost:8080/scim/v2/Users"

    def test_create_user_rejected(self, client):
        client.session.post.return_value = _response(401)
        assert client.create_user({"userName": "asmith"}) is None

    def test_request_exception(self, client):
        client.session.get.side_effect = requests.ConnectionError("refused")
        assert client.list_users() is None
        assert client.get_user("user-1") is None

    def test_run_scenarios(self, client):
        client.session.post.return_value = _response(201, {"id": "user-1"})
        client.session.get.side_effect = [
            _response(200, {"id": "user-1", "userName": "alice.johnson"}),
            _response(200, {"Resources": [{"id": "user-1", "userName": "alice.johnson"}]}),
        ]

        assert run_scenarios(client) is True

    def test_run_scenarios_stops_when_create_fails(self, client):
        client.session.post.return_value = _response(500)

        assert run_scenarios(client) is False
        client.session.get.assert_not_called()
