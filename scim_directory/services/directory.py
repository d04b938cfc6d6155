"""
User Directory Service

Orchestrates tenant-scoped reads and creates of SCIM users against the
DirectoryStore.

Failure policy is asymmetric: anything that goes wrong with the parent user
row aborts the operation, while failures on email/phone children are logged,
recorded on the returned UserBundle and otherwise ignored.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..errors import NotFound, StoreFailure
from ..models.records import ScimUserEmailRecord, ScimUserPhoneNumberRecord, ScimUserRecord
from ..models.scim_user import SCIMUserCreateRequest
from .resource_mapper import to_create_user_command, to_email_commands, to_phone_number_commands
from .user_store import DirectoryStore, RecordNotFound, StoreError, new_id

logger = logging.getLogger(__name__)


@dataclass
class ChildFailure:
    """A suppressed failure on an email or phone number child."""
    resource: str  # "emails" or "phoneNumbers"
    operation: str  # "read" or "create"
    error: Exception
    value: Optional[str] = None


@dataclass
class UserBundle:
    """
    A user with its children, plus whatever child failures were suppressed
    while assembling it.
    """
    user: ScimUserRecord
    emails: List[ScimUserEmailRecord] = field(default_factory=list)
    phone_numbers: List[ScimUserPhoneNumberRecord] = field(default_factory=list)
    suppressed_errors: List[ChildFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.suppressed_errors


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserDirectoryService:
    """
    Tenant-scoped user directory.

    Every operation takes the caller's organisation id explicitly; nothing is
    read from ambient request state.

    Example usage:
        directory = UserDirectoryService(store)
        bundle = directory.create_user(organisation_id, request)
        same = directory.get_user(organisation_id, bundle.user.id)
    """

    def __init__(
        self,
        store: DirectoryStore,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            store: Persistence collaborator
            id_factory: Mints ids for users and their children
            clock: Source of the creation timestamp
        """
        self.store = store
        self.id_factory = id_factory
        self.clock = clock

    def get_user(self, organisation_id: str, user_id: str) -> UserBundle:
        """
        Fetch one user of the organisation with its children.

        Raises:
            NotFound: The user does not exist for this organisation
            StoreFailure: The user row could not be read
        """
        logger.debug(f"Getting user {user_id} for organisation {organisation_id}")
        user = self._get_parent(organisation_id, user_id)
        return self._with_children(user)

    def list_users(self, organisation_id: str) -> List[UserBundle]:
        """
        List every user of the organisation with their children.

        An organisation without users yields an empty list.

        Raises:
            StoreFailure: The user rows could not be read
        """
        logger.debug(f"Listing users for organisation {organisation_id}")
        try:
            users = self.store.list_scim_users(organisation_id)
        except StoreError as e:
            logger.error(f"Failed to list users for organisation {organisation_id}: {e}")
            raise StoreFailure("failed to list users") from e

        return [self._with_children(user) for user in users]

    def create_user(self, organisation_id: str, request: SCIMUserCreateRequest) -> UserBundle:
        """
        Create a user under the organisation.

        Workflow:
        1. Mint an id and insert the user row (fatal on failure)
        2. Insert each email and phone number, skipping the ones that fail
        3. Re-read the user and its children for the response

        Args:
            organisation_id: Tenant the user is created under
            request: Parsed creation payload

        Returns:
            UserBundle: The stored user; suppressed_errors lists children that
            were not written or could not be read back

        Raises:
            StoreFailure: The user row could not be written or read back
        """
        command = to_create_user_command(organisation_id, self.id_factory(), request, self.clock())

        try:
            created_id = self.store.create_scim_user(command)
        except StoreError as e:
            logger.error(f"Failed to create user {request.userName!r}: {e}")
            raise StoreFailure("failed to create user") from e

        if not created_id:
            logger.error(f"Creating user {request.userName!r} returned no id")
            raise StoreFailure("failed to create user, no id returned")

        suppressed: List[ChildFailure] = []

        for email in to_email_commands(created_id, request.emails, self.id_factory):
            try:
                self.store.create_user_email(email)
            except StoreError as e:
                logger.error(f"Failed to create email {email.value!r} for user {created_id}: {e}")
                suppressed.append(ChildFailure("emails", "create", e, email.value))

        for phone in to_phone_number_commands(created_id, request.phoneNumbers, self.id_factory):
            try:
                self.store.create_user_phone_number(phone)
            except StoreError as e:
                logger.error(f"Failed to create phone number {phone.value!r} for user {created_id}: {e}")
                suppressed.append(ChildFailure("phoneNumbers", "create", e, phone.value))

        try:
            user = self.store.get_scim_user_by_id(organisation_id, created_id)
        except (RecordNotFound, StoreError) as e:
            logger.error(f"Failed to read back created user {created_id}: {e}")
            raise StoreFailure("failed to read back created user") from e

        bundle = self._with_children(user)
        bundle.suppressed_errors[:0] = suppressed

        logger.info(f"Created user {created_id} ({request.userName!r}) for organisation {organisation_id}")
        return bundle

    def _get_parent(self, organisation_id: str, user_id: str) -> ScimUserRecord:
        try:
            return self.store.get_scim_user_by_id(organisation_id, user_id)
        except RecordNotFound as e:
            logger.info(f"User {user_id} not found for organisation {organisation_id}")
            raise NotFound(f"user {user_id} not found") from e
        except StoreError as e:
            logger.error(f"Failed to get user {user_id}: {e}")
            raise StoreFailure("failed to get user") from e

    def _with_children(self, user: ScimUserRecord) -> UserBundle:
        bundle = UserBundle(user=user)

        try:
            bundle.emails = self.store.get_user_emails(user.id)
        except StoreError as e:
            logger.error(f"Failed to get emails for user {user.id}: {e}")
            bundle.suppressed_errors.append(ChildFailure("emails", "read", e))

        try:
            bundle.phone_numbers = self.store.get_user_phone_numbers(user.id)
        except StoreError as e:
            logger.error(f"Failed to get phone numbers for user {user.id}: {e}")
            bundle.suppressed_errors.append(ChildFailure("phoneNumbers", "read", e))

        return bundle
