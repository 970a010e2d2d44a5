"""
Relational entity store on SQLAlchemy.

Every method opens a short-lived session, commits once and hands back
pydantic records, so callers never hold ORM objects past a call.
"""

import logging
from enum import Enum

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from phishnet.core.errors import ConflictError
from phishnet.db.base import Base
from phishnet.db.enums import CampaignReference, CampaignStatus, DEFAULT_CAMPAIGN_STATUS
from phishnet.db.models import (
    Campaign,
    CampaignResult,
    EmailTemplate,
    Group,
    LandingPage,
    Organization,
    SmtpProfile,
    Target,
    User,
)
from phishnet.db.session import make_engine, make_session_factory
from phishnet.schemas.auth import OrganizationCreate, OrganizationRead, UserCreate, UserRecord
from phishnet.schemas.campaign import (
    CampaignCreate,
    CampaignRead,
    CampaignResultCreate,
    CampaignResultRead,
)
from phishnet.schemas.email_template import EmailTemplateCreate, EmailTemplateRead
from phishnet.schemas.group import GroupCreate, GroupRead, GroupWithTargetCount, TargetCreate, TargetRead
from phishnet.schemas.landing_page import LandingPageCreate, LandingPageRead
from phishnet.schemas.smtp_profile import SmtpProfileCreate, SmtpProfileRecord
from phishnet.storage.base import REFERENCE_FIELDS, Storage, next_timestamp

logger = logging.getLogger(__name__)

# Children before parents
ORGANIZATION_DELETE_ORDER = (
    CampaignResult,
    Campaign,
    Target,
    Group,
    SmtpProfile,
    EmailTemplate,
    LandingPage,
    User,
)


def _column_values(values: dict) -> dict:
    """Enum members are stored by value."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in values.items()
    }


class DatabaseStorage(Storage):
    """Storage backed by any SQLAlchemy URL (SQLite and PostgreSQL tested)."""

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        database_url: str | None = None,
        create_tables: bool = False,
    ) -> None:
        if engine is None:
            if not database_url:
                raise ValueError("DatabaseStorage needs an engine or a database_url")
            engine = make_engine(database_url)
        self.engine = engine
        self._session_factory = make_session_factory(engine)
        if create_tables:
            Base.metadata.create_all(engine)

    # -------------------------------------------------------------------------
    # Generic row helpers
    # -------------------------------------------------------------------------

    def _get(self, model, schema, row_id: int):
        with self._session_factory() as db:
            row = db.get(model, row_id)
            return schema.model_validate(row) if row is not None else None

    def _create(self, model, schema, values: dict):
        now = next_timestamp()
        with self._session_factory() as db:
            row = model(**_column_values(values), created_at=now, updated_at=now)
            db.add(row)
            db.commit()
            db.refresh(row)
            return schema.model_validate(row)

    def _update(self, model, schema, row_id: int, changes: dict):
        with self._session_factory() as db:
            row = db.get(model, row_id)
            if row is None:
                return None
            for key, value in _column_values(changes).items():
                setattr(row, key, value)
            row.updated_at = next_timestamp(row.updated_at)
            db.commit()
            db.refresh(row)
            return schema.model_validate(row)

    def _delete(self, model, row_id: int) -> bool:
        with self._session_factory() as db:
            row = db.get(model, row_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

    def _list(self, model, schema, *criteria) -> list:
        with self._session_factory() as db:
            rows = db.scalars(select(model).where(*criteria).order_by(model.id)).all()
            return [schema.model_validate(row) for row in rows]

    def _exists(self, model, row_id: int) -> bool:
        with self._session_factory() as db:
            return db.get(model, row_id) is not None

    # -------------------------------------------------------------------------
    # Organizations
    # -------------------------------------------------------------------------

    def get_organization(self, organization_id: int) -> OrganizationRead | None:
        return self._get(Organization, OrganizationRead, organization_id)

    def get_organization_by_name(self, name: str) -> OrganizationRead | None:
        with self._session_factory() as db:
            org = db.scalars(select(Organization).where(Organization.name == name)).first()
            return OrganizationRead.model_validate(org) if org is not None else None

    def create_organization(self, data: OrganizationCreate) -> OrganizationRead:
        if self.get_organization_by_name(data.name) is not None:
            raise ConflictError("Organization already exists")
        try:
            return self._create(Organization, OrganizationRead, data.model_dump())
        except IntegrityError as exc:
            raise ConflictError("Organization already exists") from exc

    def delete_organization(self, organization_id: int) -> bool:
        with self._session_factory() as db:
            org = db.get(Organization, organization_id)
            if org is None:
                return False
            for model in ORGANIZATION_DELETE_ORDER:
                db.execute(delete(model).where(model.organization_id == organization_id))
            db.delete(org)
            db.commit()
        logger.info("Deleted organization %s", organization_id)
        return True

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def get_user(self, user_id: int) -> UserRecord | None:
        return self._get(User, UserRecord, user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        with self._session_factory() as db:
            user = db.scalars(
                select(User).where(func.lower(User.email) == email.strip().lower())
            ).first()
            return UserRecord.model_validate(user) if user is not None else None

    def create_user(self, organization_id: int, data: UserCreate) -> UserRecord:
        if self.get_user_by_email(data.email) is not None:
            raise ConflictError("Email already registered")
        values = data.model_dump()
        values["email"] = values["email"].lower()
        values["organization_id"] = organization_id
        try:
            return self._create(User, UserRecord, values)
        except IntegrityError as exc:
            raise ConflictError("Email already registered") from exc

    def update_user(self, user_id: int, changes: dict) -> UserRecord | None:
        return self._update(User, UserRecord, user_id, changes)

    def delete_user(self, user_id: int) -> bool:
        with self._session_factory() as db:
            user = db.get(User, user_id)
            if user is None:
                return False
            for model in (EmailTemplate, LandingPage, Campaign):
                db.execute(
                    update(model).where(model.created_by_id == user_id).values(created_by_id=None)
                )
            db.delete(user)
            db.commit()
            return True

    def list_users(self, organization_id: int) -> list[UserRecord]:
        return self._list(User, UserRecord, User.organization_id == organization_id)

    def count_users(self, organization_id: int) -> int:
        with self._session_factory() as db:
            return db.scalar(
                select(func.count(User.id)).where(User.organization_id == organization_id)
            ) or 0

    # -------------------------------------------------------------------------
    # Groups & Targets
    # -------------------------------------------------------------------------

    def get_group(self, group_id: int) -> GroupRead | None:
        return self._get(Group, GroupRead, group_id)

    def create_group(self, organization_id: int, data: GroupCreate) -> GroupRead:
        return self._create(Group, GroupRead, {**data.model_dump(), "organization_id": organization_id})

    def update_group(self, group_id: int, changes: dict) -> GroupRead | None:
        return self._update(Group, GroupRead, group_id, changes)

    def delete_group(self, group_id: int) -> bool:
        if not self._exists(Group, group_id):
            return False
        self._ensure_unreferenced(CampaignReference.TARGET_GROUP, group_id)
        # ORM cascade removes targets and their results
        return self._delete(Group, group_id)

    def list_groups(self, organization_id: int) -> list[GroupWithTargetCount]:
        with self._session_factory() as db:
            rows = db.execute(
                select(Group, func.count(Target.id))
                .outerjoin(Target, Target.group_id == Group.id)
                .where(Group.organization_id == organization_id)
                .group_by(Group.id)
                .order_by(Group.id)
            ).all()
            return [
                GroupWithTargetCount(
                    **GroupRead.model_validate(group).model_dump(), target_count=count
                )
                for group, count in rows
            ]

    def get_target(self, target_id: int) -> TargetRead | None:
        return self._get(Target, TargetRead, target_id)

    def create_target(self, organization_id: int, group_id: int, data: TargetCreate) -> TargetRead:
        values = {**data.model_dump(), "group_id": group_id, "organization_id": organization_id}
        return self._create(Target, TargetRead, values)

    def update_target(self, target_id: int, changes: dict) -> TargetRead | None:
        return self._update(Target, TargetRead, target_id, changes)

    def delete_target(self, target_id: int) -> bool:
        return self._delete(Target, target_id)

    def list_targets(self, group_id: int) -> list[TargetRead]:
        return self._list(Target, TargetRead, Target.group_id == group_id)

    # -------------------------------------------------------------------------
    # SMTP Profiles
    # -------------------------------------------------------------------------

    def get_smtp_profile(self, profile_id: int) -> SmtpProfileRecord | None:
        return self._get(SmtpProfile, SmtpProfileRecord, profile_id)

    def create_smtp_profile(self, organization_id: int, data: SmtpProfileCreate) -> SmtpProfileRecord:
        return self._create(
            SmtpProfile, SmtpProfileRecord, {**data.model_dump(), "organization_id": organization_id}
        )

    def update_smtp_profile(self, profile_id: int, changes: dict) -> SmtpProfileRecord | None:
        return self._update(SmtpProfile, SmtpProfileRecord, profile_id, changes)

    def delete_smtp_profile(self, profile_id: int) -> bool:
        if not self._exists(SmtpProfile, profile_id):
            return False
        self._ensure_unreferenced(CampaignReference.SMTP_PROFILE, profile_id)
        return self._delete(SmtpProfile, profile_id)

    def list_smtp_profiles(self, organization_id: int) -> list[SmtpProfileRecord]:
        return self._list(
            SmtpProfile, SmtpProfileRecord, SmtpProfile.organization_id == organization_id
        )

    # -------------------------------------------------------------------------
    # Email Templates
    # -------------------------------------------------------------------------

    def get_email_template(self, template_id: int) -> EmailTemplateRead | None:
        return self._get(EmailTemplate, EmailTemplateRead, template_id)

    def create_email_template(
        self, organization_id: int, user_id: int | None, data: EmailTemplateCreate
    ) -> EmailTemplateRead:
        values = {**data.model_dump(), "organization_id": organization_id, "created_by_id": user_id}
        return self._create(EmailTemplate, EmailTemplateRead, values)

    def update_email_template(self, template_id: int, changes: dict) -> EmailTemplateRead | None:
        return self._update(EmailTemplate, EmailTemplateRead, template_id, changes)

    def delete_email_template(self, template_id: int) -> bool:
        if not self._exists(EmailTemplate, template_id):
            return False
        self._ensure_unreferenced(CampaignReference.EMAIL_TEMPLATE, template_id)
        return self._delete(EmailTemplate, template_id)

    def list_email_templates(self, organization_id: int) -> list[EmailTemplateRead]:
        return self._list(
            EmailTemplate, EmailTemplateRead, EmailTemplate.organization_id == organization_id
        )

    # -------------------------------------------------------------------------
    # Landing Pages
    # -------------------------------------------------------------------------

    def get_landing_page(self, page_id: int) -> LandingPageRead | None:
        return self._get(LandingPage, LandingPageRead, page_id)

    def create_landing_page(
        self, organization_id: int, user_id: int | None, data: LandingPageCreate
    ) -> LandingPageRead:
        values = {**data.model_dump(), "organization_id": organization_id, "created_by_id": user_id}
        return self._create(LandingPage, LandingPageRead, values)

    def update_landing_page(self, page_id: int, changes: dict) -> LandingPageRead | None:
        return self._update(LandingPage, LandingPageRead, page_id, changes)

    def delete_landing_page(self, page_id: int) -> bool:
        if not self._exists(LandingPage, page_id):
            return False
        self._ensure_unreferenced(CampaignReference.LANDING_PAGE, page_id)
        return self._delete(LandingPage, page_id)

    def list_landing_pages(self, organization_id: int) -> list[LandingPageRead]:
        return self._list(
            LandingPage, LandingPageRead, LandingPage.organization_id == organization_id
        )

    # -------------------------------------------------------------------------
    # Campaigns & Results
    # -------------------------------------------------------------------------

    def get_campaign(self, campaign_id: int) -> CampaignRead | None:
        return self._get(Campaign, CampaignRead, campaign_id)

    def create_campaign(
        self, organization_id: int, user_id: int | None, data: CampaignCreate
    ) -> CampaignRead:
        values = {
            **data.model_dump(),
            "status": DEFAULT_CAMPAIGN_STATUS,
            "organization_id": organization_id,
            "created_by_id": user_id,
        }
        return self._create(Campaign, CampaignRead, values)

    def update_campaign(self, campaign_id: int, changes: dict) -> CampaignRead | None:
        return self._update(Campaign, CampaignRead, campaign_id, changes)

    def delete_campaign(self, campaign_id: int) -> bool:
        # ORM cascade removes results
        return self._delete(Campaign, campaign_id)

    def list_campaigns(self, organization_id: int) -> list[CampaignRead]:
        return self._list(Campaign, CampaignRead, Campaign.organization_id == organization_id)

    def count_active_campaigns(self, organization_id: int) -> int:
        with self._session_factory() as db:
            return db.scalar(
                select(func.count(Campaign.id)).where(
                    Campaign.organization_id == organization_id,
                    Campaign.status == CampaignStatus.ACTIVE.value,
                )
            ) or 0

    def campaigns_referencing(self, kind: CampaignReference, ref_id: int) -> list[CampaignRead]:
        column = getattr(Campaign, REFERENCE_FIELDS[kind])
        return self._list(Campaign, CampaignRead, column == ref_id)

    def get_campaign_result(self, result_id: int) -> CampaignResultRead | None:
        return self._get(CampaignResult, CampaignResultRead, result_id)

    def create_campaign_result(
        self, organization_id: int, data: CampaignResultCreate
    ) -> CampaignResultRead:
        self._check_result_refs(organization_id, data)
        existing = self._list(
            CampaignResult,
            CampaignResultRead,
            CampaignResult.campaign_id == data.campaign_id,
            CampaignResult.target_id == data.target_id,
        )
        if existing:
            raise ConflictError("Result already recorded for this target")
        try:
            return self._create(
                CampaignResult,
                CampaignResultRead,
                {**data.model_dump(), "organization_id": organization_id},
            )
        except IntegrityError as exc:
            raise ConflictError("Result already recorded for this target") from exc

    def update_campaign_result(self, result_id: int, changes: dict) -> CampaignResultRead | None:
        return self._update(CampaignResult, CampaignResultRead, result_id, changes)

    def list_campaign_results(self, campaign_id: int) -> list[CampaignResultRead]:
        return self._list(
            CampaignResult, CampaignResultRead, CampaignResult.campaign_id == campaign_id
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self.engine.dispose()
