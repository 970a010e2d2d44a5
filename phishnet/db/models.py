"""SQLAlchemy ORM models for tenants, recipients, and campaigns."""

from datetime import datetime

from sqlalchemy import (
    JSON, Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phishnet.db.base import Base
from phishnet.db.enums import DEFAULT_CAMPAIGN_STATUS


# =============================================================================
# Tenant & Users
# =============================================================================

class Organization(Base):
    """
    A tenant in the multi-tenant system.

    All domain entities belong to an organization
    and must be scoped by organization_id in all queries.
    """
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


class User(Base):
    """
    Platform user (an operator running simulations, not a Target).

    Passwords are stored as bcrypt hashes only.
    """
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_org", "organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    organization_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Bumped to revoke every outstanding session token
    token_version: Mapped[int] = mapped_column(
        Integer, default=1, server_default=text("1"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


# =============================================================================
# Recipients
# =============================================================================

class Group(Base):
    """Named collection of phishing targets."""
    __tablename__ = "groups"
    __table_args__ = (
        Index("idx_groups_org", "organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    targets: Mapped[list["Target"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
    )


class Target(Base):
    """A simulated-phishing recipient."""
    __tablename__ = "targets"
    __table_args__ = (
        Index("idx_targets_group", "group_id"),
        Index("idx_targets_org", "organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    group: Mapped["Group"] = relationship(back_populates="targets")
    results: Mapped[list["CampaignResult"]] = relationship(
        back_populates="target",
        cascade="all, delete-orphan",
    )


# =============================================================================
# Sending Infrastructure & Content
# =============================================================================

class SmtpProfile(Base):
    """Outbound mail server settings used by a campaign."""
    __tablename__ = "smtp_profiles"
    __table_args__ = (
        Index("idx_smtp_profiles_org", "organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    host: Mapped[str] = mapped_column(String(255), nullable=False)
    port: Mapped[int] = mapped_column(Integer, nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    from_name: Mapped[str] = mapped_column(String(255), nullable=False)
    from_email: Mapped[str] = mapped_column(String(320), nullable=False)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


class EmailTemplate(Base):
    """Phishing email body and sender identity."""
    __tablename__ = "email_templates"
    __table_args__ = (
        Index("idx_email_templates_org", "organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(998), nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    text_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    sender_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sender_email: Mapped[str] = mapped_column(String(320), nullable=False)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


class LandingPage(Base):
    """Page served to targets who click through."""
    __tablename__ = "landing_pages"
    __table_args__ = (
        Index("idx_landing_pages_org", "organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    redirect_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    page_type: Mapped[str] = mapped_column(String(20), nullable=False)  # login | form | educational
    thumbnail: Mapped[str | None] = mapped_column(Text, nullable=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


# =============================================================================
# Campaigns
# =============================================================================

class Campaign(Base):
    """
    Phishing simulation campaign.

    Points at exactly one group, SMTP profile, template and landing page.
    Those references are delete-restricted while the campaign exists.
    """
    __tablename__ = "campaigns"
    __table_args__ = (
        Index("idx_campaigns_org_status", "organization_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_CAMPAIGN_STATUS.value,
        server_default=text(f"'{DEFAULT_CAMPAIGN_STATUS.value}'"),
        nullable=False,
    )  # Draft | Scheduled | Active | Completed
    target_group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id", ondelete="RESTRICT"), nullable=False
    )
    smtp_profile_id: Mapped[int] = mapped_column(
        ForeignKey("smtp_profiles.id", ondelete="RESTRICT"), nullable=False
    )
    email_template_id: Mapped[int] = mapped_column(
        ForeignKey("email_templates.id", ondelete="RESTRICT"), nullable=False
    )
    landing_page_id: Mapped[int] = mapped_column(
        ForeignKey("landing_pages.id", ondelete="RESTRICT"), nullable=False
    )
    scheduled_at: Mapped[datetime | None] = mapped_column(nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(nullable=True)
    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    results: Mapped[list["CampaignResult"]] = relationship(
        back_populates="campaign",
        cascade="all, delete-orphan",
    )


class CampaignResult(Base):
    """Per-target outcome of a campaign."""
    __tablename__ = "campaign_results"
    __table_args__ = (
        UniqueConstraint("campaign_id", "target_id", name="uq_campaign_result_target"),
        Index("idx_campaign_results_campaign", "campaign_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    campaign_id: Mapped[int] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False
    )
    target_id: Mapped[int] = mapped_column(
        ForeignKey("targets.id", ondelete="CASCADE"), nullable=False
    )
    sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(nullable=True)
    opened: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    opened_at: Mapped[datetime | None] = mapped_column(nullable=True)
    clicked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    clicked_at: Mapped[datetime | None] = mapped_column(nullable=True)
    submitted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    submitted_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    campaign: Mapped["Campaign"] = relationship(back_populates="results")
    target: Mapped["Target"] = relationship(back_populates="results")
