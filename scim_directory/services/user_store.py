"""
Directory Store Service

Relational persistence for organisations, bearer tokens and SCIM users with
their email and phone number children, built on SQLAlchemy.

Every operation runs in its own session and transaction. Missing rows raise
RecordNotFound; any database fault surfaces as StoreError. Callers decide
which of those are fatal.
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.commands import (
    CreateScimUserCommand,
    CreateUserEmailCommand,
    CreateUserPhoneNumberCommand,
)
from ..models.records import (
    Base,
    Organisation,
    OrganisationToken,
    ScimUserEmailRecord,
    ScimUserPhoneNumberRecord,
    ScimUserRecord,
)

logger = logging.getLogger(__name__)


class RecordNotFound(Exception):
    """The requested row does not exist."""


class StoreError(Exception):
    """The database could not complete the operation."""


def build_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections are shared with FastAPI's worker threads, and an
    in-memory SQLite database is pinned to a single connection so every
    session sees the same data.

    Args:
        database_url: SQLAlchemy database URL (e.g. "sqlite:///./scim.db")

    Returns:
        Engine: Configured engine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(database_url, pool_pre_ping=True)


def new_id() -> str:
    """Mint an opaque row id."""
    return str(uuid.uuid4())


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Render a moment (default: now) as an RFC 3339 UTC string."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class DirectoryStore:
    """
    Persistent storage for tenant organisations and their SCIM users.

    Example usage:
        store = DirectoryStore.from_url("sqlite:///./scim_directory.db")
        store.create_schema()

        org = store.create_organisation("Test Organisation")
        store.create_organisation_token(org.id, "tok-A")

        token = store.get_organisation_token_by_token("tok-A")
        users = store.list_scim_users(token.organisation_id)
    """

    def __init__(self, engine: Engine):
        """
        Initialize DirectoryStore with an engine.

        Args:
            engine: SQLAlchemy engine the store opens sessions on
        """
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str) -> "DirectoryStore":
        return cls(build_engine(database_url))

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create any missing tables."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            with self._session() as session:
                session.execute(text("SELECT 1"))
            return True
        except StoreError as e:
            logger.warning(f"Store ping failed: {e}")
            return False

    # Organisations and tokens

    def create_organisation(self, name: str) -> Organisation:
        """
        Add an organisation (tenant).

        Args:
            name: Human readable organisation name

        Returns:
            Organisation: The stored row
        """
        now = utc_timestamp()
        organisation = Organisation(
            id=new_id(),
            name=name,
            created_on_utc=now,
            modified_on_utc=now,
        )
        with self._session() as session:
            session.add(organisation)
        return organisation

    def create_organisation_token(self, organisation_id: str, token: str) -> OrganisationToken:
        """
        Bind an operator-supplied bearer token to an organisation.

        Args:
            organisation_id: Owning organisation
            token: Opaque bearer credential

        Returns:
            OrganisationToken: The stored row
        """
        row = OrganisationToken(
            id=new_id(),
            organisation_id=organisation_id,
            token=token,
            created_on_utc=utc_timestamp(),
        )
        with self._session() as session:
            session.add(row)
        return row

    def get_organisation_token_by_token(self, token: str) -> OrganisationToken:
        """
        Resolve a bearer token.

        Raises:
            RecordNotFound: No organisation holds this token
            StoreError: The lookup itself failed
        """
        with self._session() as session:
            row = session.scalars(
                select(OrganisationToken).where(OrganisationToken.token == token)
            ).one_or_none()
            if row is None:
                raise RecordNotFound("organisation token not found")
            return row

    # Users

    def get_scim_user_by_id(self, organisation_id: str, user_id: str) -> ScimUserRecord:
        """
        Fetch one user, scoped by organisation AND id.

        A user that exists under another organisation is reported exactly like
        a missing one.

        Raises:
            RecordNotFound: No such user for this organisation
            StoreError: The lookup itself failed
        """
        with self._session() as session:
            row = session.scalars(
                select(ScimUserRecord).where(
                    ScimUserRecord.organisation_id == organisation_id,
                    ScimUserRecord.id == user_id,
                )
            ).one_or_none()
            if row is None:
                raise RecordNotFound(f"user {user_id} not found")
            return row

    def list_scim_users(self, organisation_id: str) -> List[ScimUserRecord]:
        """Return every user of the organisation, oldest first."""
        with self._session() as session:
            return list(
                session.scalars(
                    select(ScimUserRecord)
                    .where(ScimUserRecord.organisation_id == organisation_id)
                    .order_by(ScimUserRecord.meta_created, ScimUserRecord.id)
                )
            )

    def create_scim_user(self, command: CreateScimUserCommand) -> str:
        """
        Insert a user row.

        Returns:
            str: The id of the inserted row
        """
        row = ScimUserRecord(**asdict(command))
        with self._session() as session:
            session.add(row)
            session.flush()
            return row.id

    # Children

    def get_user_emails(self, user_id: str) -> List[ScimUserEmailRecord]:
        with self._session() as session:
            return list(
                session.scalars(
                    select(ScimUserEmailRecord).where(ScimUserEmailRecord.user_id == user_id)
                )
            )

    def get_user_phone_numbers(self, user_id: str) -> List[ScimUserPhoneNumberRecord]:
        with self._session() as session:
            return list(
                session.scalars(
                    select(ScimUserPhoneNumberRecord).where(
                        ScimUserPhoneNumberRecord.user_id == user_id
                    )
                )
            )

    def create_user_email(self, command: CreateUserEmailCommand) -> None:
        with self._session() as session:
            session.add(ScimUserEmailRecord(**asdict(command)))

    def create_user_phone_number(self, command: CreateUserPhoneNumberCommand) -> None:
        with self._session() as session:
            session.add(ScimUserPhoneNumberRecord(**asdict(command)))
