"""
Directory Store Records

SQLAlchemy ORM tables backing the directory. Organisations own tokens and
users; users own email and phone number rows. The name sub-object and the
enterprise extension are flattened onto the user row.

Timestamps are kept as RFC 3339 strings exactly as written, and are parsed
back when a resource is rendered.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Organisation(Base):
    __tablename__ = "organisations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_on_utc: Mapped[str] = mapped_column(String(40), nullable=False)
    modified_on_utc: Mapped[str] = mapped_column(String(40), nullable=False)

    def __repr__(self) -> str:
        return f"<Organisation {self.id} {self.name!r}>"


class OrganisationToken(Base):
    __tablename__ = "organisation_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    organisation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_on_utc: Mapped[str] = mapped_column(String(40), nullable=False)

    def __repr__(self) -> str:
        # never render the credential
        return f"<OrganisationToken {self.id} org={self.organisation_id}>"


class ScimUserRecord(Base):
    __tablename__ = "scim_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    organisation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    external_id: Mapped[Optional[str]] = mapped_column(String(255))

    nick_name: Mapped[Optional[str]] = mapped_column(String(255))
    profile_url: Mapped[Optional[str]] = mapped_column(String(1024))
    title: Mapped[Optional[str]] = mapped_column(String(255))
    user_type: Mapped[Optional[str]] = mapped_column(String(255))
    preferred_language: Mapped[Optional[str]] = mapped_column(String(64))
    locale: Mapped[Optional[str]] = mapped_column(String(64))
    timezone: Mapped[Optional[str]] = mapped_column(String(64))

    name_formatted: Mapped[Optional[str]] = mapped_column(String(255))
    name_family_name: Mapped[Optional[str]] = mapped_column(String(255))
    name_given_name: Mapped[Optional[str]] = mapped_column(String(255))
    name_middle_name: Mapped[Optional[str]] = mapped_column(String(255))
    name_honorific_prefix: Mapped[Optional[str]] = mapped_column(String(64))
    name_honorific_suffix: Mapped[Optional[str]] = mapped_column(String(64))

    employee_number: Mapped[Optional[str]] = mapped_column(String(255))
    organization: Mapped[Optional[str]] = mapped_column(String(255))
    department: Mapped[Optional[str]] = mapped_column(String(255))
    division: Mapped[Optional[str]] = mapped_column(String(255))
    cost_center: Mapped[Optional[str]] = mapped_column(String(255))
    manager_id: Mapped[Optional[str]] = mapped_column(String(36))

    meta_resource_type: Mapped[str] = mapped_column(String(32), nullable=False, default="User")
    meta_created: Mapped[str] = mapped_column(String(40), nullable=False)
    meta_last_modified: Mapped[str] = mapped_column(String(40), nullable=False)
    meta_version: Mapped[Optional[str]] = mapped_column(String(128))

    def __repr__(self) -> str:
        return f"<ScimUserRecord {self.id} org={self.organisation_id} {self.user_name!r}>"


class ScimUserEmailRecord(Base):
    __tablename__ = "scim_user_emails"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scim_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(320), nullable=False)
    display: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(64))
    primary_email: Mapped[Optional[bool]] = mapped_column(Boolean)


class ScimUserPhoneNumberRecord(Base):
    __tablename__ = "scim_user_phone_numbers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scim_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(64), nullable=False)
    display: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(64))
    primary_phone_number: Mapped[Optional[bool]] = mapped_column(Boolean)
