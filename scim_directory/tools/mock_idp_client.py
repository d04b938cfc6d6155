#!/usr/bin/env python3
"""
Mock Identity Provider SCIM Client

This script simulates an identity provider sending SCIM requests to the SCIM
Directory for local testing. It exercises health, user creation, lookup and
listing without requiring a real identity provider tenant.

Usage:
    scim-directory-mock-idp

Configuration:
    Set SCIM_DIRECTORY_URL and BEARER_TOKEN environment variables or rely on
    the defaults below. The token must have been bound with scim-directory-seed.

Examples:
    export SCIM_DIRECTORY_URL="http://localhost:8080"
    export BEARER_TOKEN="tok-A"
    scim-directory-mock-idp
"""

import os
import sys
import uuid
from typing import Any, Dict, List, Optional

import requests

from ..models.scim_user import SCIM_ENTERPRISE_USER_SCHEMA, SCIM_USER_SCHEMA

SCIM_CONTENT_TYPE = "application/scim+json"


class MockIdPSCIMClient:
    """Mock SCIM client that simulates identity provider provisioning calls."""

    def __init__(self, base_url: str, bearer_token: str, timeout: float = 10.0):
        """Initialize the mock SCIM client.

        Args:
            base_url: SCIM Directory base URL (e.g., http://localhost:8080)
            bearer_token: Organisation bearer token
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {bearer_token}',
            'Content-Type': SCIM_CONTENT_TYPE,
            'Accept': SCIM_CONTENT_TYPE
        })

    def create_user(self, user_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a new user via SCIM POST request.

        Args:
            user_data: SCIM user payload dict

        Returns:
            Created SCIM user dict or None if the request failed
        """
        url = f"{self.base_url}/scim/v2/Users"
        print(f"\nCreating user: {user_data.get('userName', 'Unknown')}")

        try:
            response = self.session.post(url, json=user_data, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"Request failed: {e}")
            return None

        print(f"POST {url} -> {response.status_code}")
        if response.status_code != 201:
            print(f"Failed to create user: {response.status_code}")
            return None

        result = response.json()
        print(f"User created, SCIM ID: {result.get('id', 'N/A')}")
        print(f"Emails: {len(result.get('emails', []))}, phone numbers: {len(result.get('phoneNumbers', []))}")
        return result

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one user via SCIM GET request.

        Returns:
            SCIM user dict or None if not found / failed
        """
        url = f"{self.base_url}/scim/v2/Users/{user_id}"

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"Request failed: {e}")
            return None

        print(f"GET {url} -> {response.status_code}")
        if response.status_code != 200:
            return None
        return response.json()

    def list_users(self) -> Optional[List[Dict[str, Any]]]:
        """List all users of the token's organisation.

        Returns:
            List of user dicts or None if failed
        """
        url = f"{self.base_url}/scim/v2/Users"

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"Request failed: {e}")
            return None

        print(f"GET {url} -> {response.status_code}")
        if response.status_code != 200:
            print(f"Failed to list users: {response.status_code}")
            return None

        users = response.json().get('Resources', [])
        print(f"Retrieved {len(users)} users")
        for i, user in enumerate(users, 1):
            print(f"  {i}. {user.get('displayName', 'Unknown')} ({user.get('userName', 'N/A')}) id={user.get('id')}")
        return users

    def check_health(self) -> bool:
        """Check the service health endpoint (no authentication).

        Returns:
            True if healthy, False otherwise
        """
        url = f"{self.base_url}/health"

        try:
            response = requests.get(url, timeout=5)
        except requests.RequestException as e:
            print(f"Health check failed: {e}")
            return False

        print(f"GET {url} -> {response.status_code}")
        return response.status_code == 200


def create_sample_user_data(user_name: str, display_name: str, email: str,
                            phone: Optional[str] = None, department: Optional[str] = None) -> Dict[str, Any]:
    """Create a sample SCIM user payload.

    Args:
        user_name: SCIM userName (e.g., "asmith")
        display_name: Display name (e.g., "Alice Smith")
        email: Primary work email
        phone: Optional primary mobile number
        department: Optional enterprise department

    Returns:
        SCIM user payload dict
    """
    user_data: Dict[str, Any] = {
        "schemas": [SCIM_USER_SCHEMA, SCIM_ENTERPRISE_USER_SCHEMA],
        "externalId": str(uuid.uuid4()),
        "userName": user_name,
        "displayName": display_name,
        "active": True,
        "emails": [
            {
                "value": email,
                "type": "work",
                "primary": True
            }
        ]
    }

    if phone:
        user_data["phoneNumbers"] = [{"value": phone, "type": "mobile", "primary": True}]

    if department:
        user_data[SCIM_ENTERPRISE_USER_SCHEMA] = {"department": department}

    return user_data


def run_scenarios(client: MockIdPSCIMClient) -> bool:
    """Create a user, read it back and list the organisation.

    Returns:
        True if every step succeeded
    """
    user_data = create_sample_user_data(
        user_name="alice.johnson",
        display_name="Alice Johnson",
        email="alice.johnson@example.com",
        phone="+1-555-123-4567",
        department="Platform Engineering"
    )

    created = client.create_user(user_data)
    if not created:
        print("User creation failed, skipping remaining steps")
        return False

    fetched = client.get_user(created["id"])
    if not fetched or fetched.get("userName") != user_data["userName"]:
        print("Created user could not be read back")
        return False

    users = client.list_users()
    return users is not None and any(u.get("id") == created["id"] for u in users)


def main() -> int:
    """Run the mock identity provider scenarios."""
    base_url = os.environ.get('SCIM_DIRECTORY_URL', 'http://localhost:8080')
    bearer_token = os.environ.get('BEARER_TOKEN', 'tok-A')

    print("Mock Identity Provider SCIM Client")
    print("=" * 50)
    print(f"SCIM Directory URL: {base_url}")
    print()

    client = MockIdPSCIMClient(base_url, bearer_token)

    if not client.check_health():
        print("\nHealth check failed - is the SCIM Directory running?")
        print("   Try: scim-directory")
        return 1

    ok = run_scenarios(client)
    print("\n" + "=" * 50)
    print("Scenarios complete" if ok else "Scenarios failed")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
