"""
In-memory entity store.

Rows live in per-entity dicts keyed by an auto-incrementing integer id and
disappear with the process. Meant for tests and local demos: single-process,
single-threaded use only (no locking).
"""

import logging

from phishnet.core.errors import ConflictError
from phishnet.db.enums import CampaignReference, CampaignStatus, DEFAULT_CAMPAIGN_STATUS
from phishnet.schemas.auth import OrganizationCreate, OrganizationRead, UserCreate, UserRecord
from phishnet.schemas.campaign import (
    CampaignCreate,
    CampaignRead,
    CampaignResultCreate,
    CampaignResultRead,
)
from phishnet.schemas.common import TimestampedRecord
from phishnet.schemas.email_template import EmailTemplateCreate, EmailTemplateRead
from phishnet.schemas.group import GroupCreate, GroupRead, GroupWithTargetCount, TargetCreate, TargetRead
from phishnet.schemas.landing_page import LandingPageCreate, LandingPageRead
from phishnet.schemas.smtp_profile import SmtpProfileCreate, SmtpProfileRecord
from phishnet.storage.base import REFERENCE_FIELDS, Storage, next_timestamp

logger = logging.getLogger(__name__)

TABLES = (
    "organizations",
    "users",
    "groups",
    "targets",
    "smtp_profiles",
    "email_templates",
    "landing_pages",
    "campaigns",
    "campaign_results",
)


class MemStorage(Storage):
    """Dict-backed Storage with the same observable behavior as DatabaseStorage."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[int, TimestampedRecord]] = {name: {} for name in TABLES}
        self._next_ids: dict[str, int] = {name: 1 for name in TABLES}

    # -------------------------------------------------------------------------
    # Generic row helpers
    # -------------------------------------------------------------------------

    def _insert(self, table: str, schema: type[TimestampedRecord], values: dict):
        row_id = self._next_ids[table]
        self._next_ids[table] = row_id + 1
        now = next_timestamp()
        record = schema.model_validate(
            {**values, "id": row_id, "created_at": now, "updated_at": now}
        )
        self._tables[table][row_id] = record
        return record

    def _update(self, table: str, row_id: int, changes: dict):
        current = self._tables[table].get(row_id)
        if current is None:
            return None
        record = type(current).model_validate({
            **current.model_dump(),
            **changes,
            "updated_at": next_timestamp(current.updated_at),
        })
        self._tables[table][row_id] = record
        return record

    def _scoped(self, table: str, organization_id: int) -> list:
        return [
            row for row in self._tables[table].values()
            if row.organization_id == organization_id
        ]

    def _purge(self, table: str, predicate) -> None:
        rows = self._tables[table]
        for row_id in [rid for rid, row in rows.items() if predicate(row)]:
            del rows[row_id]

    # -------------------------------------------------------------------------
    # Organizations
    # -------------------------------------------------------------------------

    def get_organization(self, organization_id: int) -> OrganizationRead | None:
        return self._tables["organizations"].get(organization_id)

    def get_organization_by_name(self, name: str) -> OrganizationRead | None:
        for org in self._tables["organizations"].values():
            if org.name == name:
                return org
        return None

    def create_organization(self, data: OrganizationCreate) -> OrganizationRead:
        if self.get_organization_by_name(data.name) is not None:
            raise ConflictError("Organization already exists")
        return self._insert("organizations", OrganizationRead, data.model_dump())

    def delete_organization(self, organization_id: int) -> bool:
        if organization_id not in self._tables["organizations"]:
            return False
        # Children before parents, same order as the database backend
        for table in reversed(TABLES[1:]):
            self._purge(table, lambda row: row.organization_id == organization_id)
        del self._tables["organizations"][organization_id]
        logger.info("Deleted organization %s", organization_id)
        return True

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def get_user(self, user_id: int) -> UserRecord | None:
        return self._tables["users"].get(user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        wanted = email.strip().lower()
        for user in self._tables["users"].values():
            if user.email.lower() == wanted:
                return user
        return None

    def create_user(self, organization_id: int, data: UserCreate) -> UserRecord:
        if self.get_user_by_email(data.email) is not None:
            raise ConflictError("Email already registered")
        values = data.model_dump()
        values["email"] = values["email"].lower()
        values["organization_id"] = organization_id
        return self._insert("users", UserRecord, values)

    def update_user(self, user_id: int, changes: dict) -> UserRecord | None:
        return self._update("users", user_id, changes)

    def delete_user(self, user_id: int) -> bool:
        if user_id not in self._tables["users"]:
            return False
        for table in ("email_templates", "landing_pages", "campaigns"):
            rows = self._tables[table]
            for row_id, row in rows.items():
                if row.created_by_id == user_id:
                    rows[row_id] = row.model_copy(update={"created_by_id": None})
        del self._tables["users"][user_id]
        return True

    def list_users(self, organization_id: int) -> list[UserRecord]:
        return self._scoped("users", organization_id)

    def count_users(self, organization_id: int) -> int:
        return len(self._scoped("users", organization_id))

    # -------------------------------------------------------------------------
    # Groups & Targets
    # -------------------------------------------------------------------------

    def get_group(self, group_id: int) -> GroupRead | None:
        return self._tables["groups"].get(group_id)

    def create_group(self, organization_id: int, data: GroupCreate) -> GroupRead:
        return self._insert(
            "groups", GroupRead, {**data.model_dump(), "organization_id": organization_id}
        )

    def update_group(self, group_id: int, changes: dict) -> GroupRead | None:
        return self._update("groups", group_id, changes)

    def delete_group(self, group_id: int) -> bool:
        if group_id not in self._tables["groups"]:
            return False
        self._ensure_unreferenced(CampaignReference.TARGET_GROUP, group_id)
        target_ids = {t.id for t in self.list_targets(group_id)}
        self._purge("campaign_results", lambda r: r.target_id in target_ids)
        self._purge("targets", lambda t: t.id in target_ids)
        del self._tables["groups"][group_id]
        return True

    def list_groups(self, organization_id: int) -> list[GroupWithTargetCount]:
        counts: dict[int, int] = {}
        for target in self._tables["targets"].values():
            counts[target.group_id] = counts.get(target.group_id, 0) + 1
        return [
            GroupWithTargetCount(**group.model_dump(), target_count=counts.get(group.id, 0))
            for group in self._scoped("groups", organization_id)
        ]

    def get_target(self, target_id: int) -> TargetRead | None:
        return self._tables["targets"].get(target_id)

    def create_target(self, organization_id: int, group_id: int, data: TargetCreate) -> TargetRead:
        values = {**data.model_dump(), "group_id": group_id, "organization_id": organization_id}
        return self._insert("targets", TargetRead, values)

    def update_target(self, target_id: int, changes: dict) -> TargetRead | None:
        return self._update("targets", target_id, changes)

    def delete_target(self, target_id: int) -> bool:
        if target_id not in self._tables["targets"]:
            return False
        self._purge("campaign_results", lambda r: r.target_id == target_id)
        del self._tables["targets"][target_id]
        return True

    def list_targets(self, group_id: int) -> list[TargetRead]:
        return [t for t in self._tables["targets"].values() if t.group_id == group_id]

    # -------------------------------------------------------------------------
    # SMTP Profiles
    # -------------------------------------------------------------------------

    def get_smtp_profile(self, profile_id: int) -> SmtpProfileRecord | None:
        return self._tables["smtp_profiles"].get(profile_id)

    def create_smtp_profile(self, organization_id: int, data: SmtpProfileCreate) -> SmtpProfileRecord:
        return self._insert(
            "smtp_profiles",
            SmtpProfileRecord,
            {**data.model_dump(), "organization_id": organization_id},
        )

    def update_smtp_profile(self, profile_id: int, changes: dict) -> SmtpProfileRecord | None:
        return self._update("smtp_profiles", profile_id, changes)

    def delete_smtp_profile(self, profile_id: int) -> bool:
        if profile_id not in self._tables["smtp_profiles"]:
            return False
        self._ensure_unreferenced(CampaignReference.SMTP_PROFILE, profile_id)
        del self._tables["smtp_profiles"][profile_id]
        return True

    def list_smtp_profiles(self, organization_id: int) -> list[SmtpProfileRecord]:
        return self._scoped("smtp_profiles", organization_id)

    # -------------------------------------------------------------------------
    # Email Templates
    # -------------------------------------------------------------------------

    def get_email_template(self, template_id: int) -> EmailTemplateRead | None:
        return self._tables["email_templates"].get(template_id)

    def create_email_template(
        self, organization_id: int, user_id: int | None, data: EmailTemplateCreate
    ) -> EmailTemplateRead:
        values = {**data.model_dump(), "organization_id": organization_id, "created_by_id": user_id}
        return self._insert("email_templates", EmailTemplateRead, values)

    def update_email_template(self, template_id: int, changes: dict) -> EmailTemplateRead | None:
        return self._update("email_templates", template_id, changes)

    def delete_email_template(self, template_id: int) -> bool:
        if template_id not in self._tables["email_templates"]:
            return False
        self._ensure_unreferenced(CampaignReference.EMAIL_TEMPLATE, template_id)
        del self._tables["email_templates"][template_id]
        return True

    def list_email_templates(self, organization_id: int) -> list[EmailTemplateRead]:
        return self._scoped("email_templates", organization_id)

    # -------------------------------------------------------------------------
    # Landing Pages
    # -------------------------------------------------------------------------

    def get_landing_page(self, page_id: int) -> LandingPageRead | None:
        return self._tables["landing_pages"].get(page_id)

    def create_landing_page(
        self, organization_id: int, user_id: int | None, data: LandingPageCreate
    ) -> LandingPageRead:
        values = {**data.model_dump(), "organization_id": organization_id, "created_by_id": user_id}
        return self._insert("landing_pages", LandingPageRead, values)

    def update_landing_page(self, page_id: int, changes: dict) -> LandingPageRead | None:
        return self._update("landing_pages", page_id, changes)

    def delete_landing_page(self, page_id: int) -> bool:
        if page_id not in self._tables["landing_pages"]:
            return False
        self._ensure_unreferenced(CampaignReference.LANDING_PAGE, page_id)
        del self._tables["landing_pages"][page_id]
        return True

    def list_landing_pages(self, organization_id: int) -> list[LandingPageRead]:
        return self._scoped("landing_pages", organization_id)

    # -------------------------------------------------------------------------
    # Campaigns & Results
    # -------------------------------------------------------------------------

    def get_campaign(self, campaign_id: int) -> CampaignRead | None:
        return self._tables["campaigns"].get(campaign_id)

    def create_campaign(
        self, organization_id: int, user_id: int | None, data: CampaignCreate
    ) -> CampaignRead:
        values = {
            **data.model_dump(),
            "status": DEFAULT_CAMPAIGN_STATUS,
            "organization_id": organization_id,
            "created_by_id": user_id,
        }
        return self._insert("campaigns", CampaignRead, values)

    def update_campaign(self, campaign_id: int, changes: dict) -> CampaignRead | None:
        return self._update("campaigns", campaign_id, changes)

    def delete_campaign(self, campaign_id: int) -> bool:
        if campaign_id not in self._tables["campaigns"]:
            return False
        self._purge("campaign_results", lambda r: r.campaign_id == campaign_id)
        del self._tables["campaigns"][campaign_id]
        return True

    def list_campaigns(self, organization_id: int) -> list[CampaignRead]:
        return self._scoped("campaigns", organization_id)

    def count_active_campaigns(self, organization_id: int) -> int:
        return sum(
            1 for c in self._scoped("campaigns", organization_id)
            if c.status == CampaignStatus.ACTIVE
        )

    def campaigns_referencing(self, kind: CampaignReference, ref_id: int) -> list[CampaignRead]:
        field = REFERENCE_FIELDS[kind]
        return [c for c in self._tables["campaigns"].values() if getattr(c, field) == ref_id]

    def get_campaign_result(self, result_id: int) -> CampaignResultRead | None:
        return self._tables["campaign_results"].get(result_id)

    def create_campaign_result(
        self, organization_id: int, data: CampaignResultCreate
    ) -> CampaignResultRead:
        self._check_result_refs(organization_id, data)
        for existing in self._tables["campaign_results"].values():
            if existing.campaign_id == data.campaign_id and existing.target_id == data.target_id:
                raise ConflictError("Result already recorded for this target")
        return self._insert(
            "campaign_results",
            CampaignResultRead,
            {**data.model_dump(), "organization_id": organization_id},
        )

    def update_campaign_result(self, result_id: int, changes: dict) -> CampaignResultRead | None:
        return self._update("campaign_results", result_id, changes)

    def list_campaign_results(self, campaign_id: int) -> list[CampaignResultRead]:
        return [r for r in self._tables["campaign_results"].values() if r.campaign_id == campaign_id]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        for rows in self._tables.values():
            rows.clear()
