"""
Tests for the entity store.

Every test runs against both MemStorage and DatabaseStorage (see the
``store`` fixture); the two must be indistinguishable.
"""

from datetime import datetime, timezone

import pytest

from conftest import make_campaign_refs, make_org, make_user
from phishnet.core.config import Settings
from phishnet.core.errors import AccessDeniedError, ConflictError, NotFoundError, ResourceInUseError
from phishnet.db.enums import CampaignStatus, LandingPageType
from phishnet.schemas.campaign import CampaignCreate, CampaignResultCreate
from phishnet.schemas.group import GroupCreate, TargetCreate
from phishnet.storage import DatabaseStorage, MemStorage, create_storage
from phishnet.storage import base as storage_base


def _campaign(store, org_id, refs, user_id=None, name="Campaign"):
    return store.create_campaign(
        org_id,
        user_id,
        CampaignCreate(
            name=name,
            target_group_id=refs.group_id,
            smtp_profile_id=refs.smtp_profile_id,
            email_template_id=refs.email_template_id,
            landing_page_id=refs.landing_page_id,
        ),
    )


def _target(store, org_id, group_id, email):
    return store.create_target(
        org_id, group_id, TargetCreate(first_name="T", last_name="X", email=email)
    )


# =============================================================================
# Create / Read
# =============================================================================

def test_ids_are_assigned_per_entity_in_insertion_order(store, test_org):
    first = store.create_group(test_org.id, GroupCreate(name="A"))
    second = store.create_group(test_org.id, GroupCreate(name="B"))

    assert (first.id, second.id) == (1, 2)
    assert [g.name for g in store.list_groups(test_org.id)] == ["A", "B"]


def test_create_stamps_utc_timestamps(store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="A"))
    fetched = store.get_group(group.id)

    assert fetched.created_at == fetched.updated_at
    assert fetched.created_at.tzinfo == timezone.utc
    assert fetched == group


def test_get_missing_returns_none(store):
    assert store.get_group(999) is None
    assert store.get_campaign(999) is None
    assert store.get_user(999) is None


def test_landing_page_type_and_campaign_status_are_enums(store, test_org, test_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs, test_user.id)

    assert store.get_landing_page(refs.landing_page_id).page_type == LandingPageType.LOGIN
    assert store.get_campaign(campaign.id).status == CampaignStatus.DRAFT
    assert campaign.created_by_id == test_user.id


def test_smtp_record_keeps_password(store, test_org):
    refs = make_campaign_refs(store, test_org.id)

    assert store.get_smtp_profile(refs.smtp_profile_id).password == "s3cret"


# =============================================================================
# Users & Organizations
# =============================================================================

def test_user_email_lookup_is_case_insensitive(store, test_org):
    user = make_user(store, test_org, "Mixed.Case@Example.com")

    assert user.email == "mixed.case@example.com"
    assert store.get_user_by_email("MIXED.case@example.COM").id == user.id
    assert store.get_user_by_email("nobody@example.com") is None


def test_duplicate_email_conflicts(store, test_org, test_user):
    with pytest.raises(ConflictError):
        make_user(store, test_org, test_user.email.upper())


def test_duplicate_organization_name_conflicts(store, test_org):
    with pytest.raises(ConflictError):
        make_org(store, test_org.name)


def test_new_user_token_version_starts_at_one(store, test_user):
    assert test_user.token_version == 1
    assert store.update_user(test_user.id, {"token_version": 2}).token_version == 2


def test_count_users_is_per_org(store, test_org, test_user, other_org, other_user):
    make_user(store, test_org, "second@test.com")

    assert store.count_users(test_org.id) == 2
    assert store.count_users(other_org.id) == 1


# =============================================================================
# Tenant Isolation
# =============================================================================

def test_lists_never_cross_organizations(store, test_org, test_user, other_org, other_user):
    make_campaign_refs(store, test_org.id, test_user.id)
    other_refs = make_campaign_refs(store, other_org.id, other_user.id)
    _campaign(store, other_org.id, other_refs, other_user.id)

    assert store.list_campaigns(test_org.id) == []
    assert all(g.organization_id == test_org.id for g in store.list_groups(test_org.id))
    assert all(p.organization_id == test_org.id for p in store.list_smtp_profiles(test_org.id))
    assert all(t.organization_id == test_org.id for t in store.list_email_templates(test_org.id))
    assert all(p.organization_id == test_org.id for p in store.list_landing_pages(test_org.id))
    assert [u.id for u in store.list_users(test_org.id)] == [test_user.id]


# =============================================================================
# Updates
# =============================================================================

def test_update_merges_fields(store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="A", description="first"))
    updated = store.update_group(group.id, {"name": "B"})

    assert updated.name == "B"
    assert updated.description == "first"
    assert updated.created_at == group.created_at


def test_update_missing_returns_none(store):
    assert store.update_group(999, {"name": "B"}) is None


def test_updated_at_strictly_advances_within_one_clock_tick(store, test_org, monkeypatch):
    frozen = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(storage_base, "utcnow", lambda: frozen)

    group = store.create_group(test_org.id, GroupCreate(name="A"))
    first = store.update_group(group.id, {"name": "B"})
    second = store.update_group(group.id, {"name": "C"})

    assert group.updated_at == frozen
    assert group.updated_at < first.updated_at < second.updated_at
    assert store.get_group(group.id).updated_at == second.updated_at


# =============================================================================
# Deletes & Cascades
# =============================================================================

def test_delete_missing_returns_false(store):
    assert store.delete_group(999) is False
    assert store.delete_target(999) is False
    assert store.delete_smtp_profile(999) is False
    assert store.delete_email_template(999) is False
    assert store.delete_landing_page(999) is False
    assert store.delete_campaign(999) is False
    assert store.delete_user(999) is False
    assert store.delete_organization(999) is False


def test_list_groups_counts_targets(store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="A"))
    empty = store.create_group(test_org.id, GroupCreate(name="Empty"))
    for i in range(3):
        _target(store, test_org.id, group.id, f"t{i}@example.com")

    counts = {g.id: g.target_count for g in store.list_groups(test_org.id)}
    assert counts == {group.id: 3, empty.id: 0}


def test_delete_group_removes_targets(store, test_org):
    group = store.create_group(test_org.id, GroupCreate(name="A"))
    target = _target(store, test_org.id, group.id, "a@example.com")

    assert store.delete_group(group.id) is True
    assert store.get_group(group.id) is None
    assert store.get_target(target.id) is None
    assert store.list_targets(group.id) == []


def test_delete_campaign_removes_results(store, test_org, test_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs)
    target = store.list_targets(refs.group_id)[0]
    result = store.create_campaign_result(
        test_org.id, CampaignResultCreate(campaign_id=campaign.id, target_id=target.id, sent=True)
    )

    assert store.delete_campaign(campaign.id) is True
    assert store.get_campaign_result(result.id) is None
    assert store.get_target(target.id) is not None


def test_delete_target_removes_its_results(store, test_org, test_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs)
    target = store.list_targets(refs.group_id)[0]
    store.create_campaign_result(
        test_org.id, CampaignResultCreate(campaign_id=campaign.id, target_id=target.id)
    )

    assert store.delete_target(target.id) is True
    assert store.list_campaign_results(campaign.id) == []


def test_duplicate_result_for_target_conflicts(store, test_org, test_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs)
    target = store.list_targets(refs.group_id)[0]
    data = CampaignResultCreate(campaign_id=campaign.id, target_id=target.id)
    store.create_campaign_result(test_org.id, data)

    with pytest.raises(ConflictError):
        store.create_campaign_result(test_org.id, data)


@pytest.mark.parametrize(
    "missing, message",
    [("campaign_id", "Campaign not found"), ("target_id", "Target not found")],
)
def test_result_for_missing_campaign_or_target_is_not_found(store, test_org, test_user, missing, message):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs)
    target = store.list_targets(refs.group_id)[0]
    ids = {"campaign_id": campaign.id, "target_id": target.id, missing: 9999}

    with pytest.raises(NotFoundError, match=message):
        store.create_campaign_result(test_org.id, CampaignResultCreate(**ids))
    assert store.list_campaign_results(campaign.id) == []


@pytest.mark.parametrize("foreign", ["campaign", "target", "organization"])
def test_result_across_tenants_is_denied(store, test_org, test_user, other_org, other_user, foreign):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    other_refs = make_campaign_refs(store, other_org.id, other_user.id)
    campaign = _campaign(store, test_org.id, refs)
    target = store.list_targets(refs.group_id)[0]
    other_campaign = _campaign(store, other_org.id, other_refs)
    other_target = store.list_targets(other_refs.group_id)[0]

    org_id, campaign_id, target_id = {
        "campaign": (test_org.id, other_campaign.id, target.id),
        "target": (test_org.id, campaign.id, other_target.id),
        "organization": (other_org.id, campaign.id, target.id),
    }[foreign]

    with pytest.raises(AccessDeniedError):
        store.create_campaign_result(
            org_id, CampaignResultCreate(campaign_id=campaign_id, target_id=target_id)
        )
    assert store.list_campaign_results(campaign.id) == []
    assert store.list_campaign_results(other_campaign.id) == []


@pytest.mark.parametrize(
    "deleter, ref_attr",
    [
        ("delete_group", "group_id"),
        ("delete_smtp_profile", "smtp_profile_id"),
        ("delete_email_template", "email_template_id"),
        ("delete_landing_page", "landing_page_id"),
    ],
)
def test_referenced_resources_cannot_be_deleted(store, test_org, test_user, deleter, ref_attr):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    _campaign(store, test_org.id, refs)
    ref_id = getattr(refs, ref_attr)

    with pytest.raises(ResourceInUseError):
        getattr(store, deleter)(ref_id)

    # Nothing changed
    assert len(store.list_groups(test_org.id)) == 1
    assert len(store.list_targets(refs.group_id)) == 1
    assert len(store.list_smtp_profiles(test_org.id)) == 1
    assert len(store.list_email_templates(test_org.id)) == 1
    assert len(store.list_landing_pages(test_org.id)) == 1


def test_unreferenced_resources_can_be_deleted_after_campaign(store, test_org, test_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs)
    store.delete_campaign(campaign.id)

    assert store.delete_group(refs.group_id) is True
    assert store.delete_smtp_profile(refs.smtp_profile_id) is True
    assert store.delete_email_template(refs.email_template_id) is True
    assert store.delete_landing_page(refs.landing_page_id) is True


def test_delete_user_keeps_their_content(store, test_org, test_user):
    author = make_user(store, test_org, "author@test.com")
    refs = make_campaign_refs(store, test_org.id, author.id)
    campaign = _campaign(store, test_org.id, refs, author.id)

    assert store.delete_user(author.id) is True
    assert store.get_user(author.id) is None
    assert store.get_email_template(refs.email_template_id).created_by_id is None
    assert store.get_landing_page(refs.landing_page_id).created_by_id is None
    assert store.get_campaign(campaign.id).created_by_id is None


def test_delete_organization_removes_everything_scoped(store, test_org, test_user, other_org, other_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    campaign = _campaign(store, test_org.id, refs, test_user.id)
    target = store.list_targets(refs.group_id)[0]
    result = store.create_campaign_result(
        test_org.id, CampaignResultCreate(campaign_id=campaign.id, target_id=target.id)
    )
    other_refs = make_campaign_refs(store, other_org.id, other_user.id)

    assert store.delete_organization(test_org.id) is True

    assert store.get_organization(test_org.id) is None
    assert store.get_user(test_user.id) is None
    assert store.get_group(refs.group_id) is None
    assert store.get_target(target.id) is None
    assert store.get_smtp_profile(refs.smtp_profile_id) is None
    assert store.get_email_template(refs.email_template_id) is None
    assert store.get_landing_page(refs.landing_page_id) is None
    assert store.get_campaign(campaign.id) is None
    assert store.get_campaign_result(result.id) is None
    # Other tenant untouched
    assert store.get_group(other_refs.group_id) is not None
    assert store.get_user(other_user.id) is not None


# =============================================================================
# Counts
# =============================================================================

def test_count_active_campaigns(store, test_org, test_user):
    refs = make_campaign_refs(store, test_org.id, test_user.id)
    draft = _campaign(store, test_org.id, refs, name="Draft")
    active = _campaign(store, test_org.id, refs, name="Live")
    store.update_campaign(active.id, {"status": CampaignStatus.ACTIVE})

    assert store.count_active_campaigns(test_org.id) == 1
    assert store.get_campaign(draft.id).status == CampaignStatus.DRAFT


# =============================================================================
# Backend Selection
# =============================================================================

def test_create_storage_selects_backend():
    memory = create_storage(Settings(STORAGE_BACKEND="memory"))
    database = create_storage(Settings(STORAGE_BACKEND="Database", DATABASE_URL="sqlite://"))
    try:
        assert isinstance(memory, MemStorage)
        assert isinstance(database, DatabaseStorage)
        assert database.list_users(1) == []
    finally:
        memory.close()
        database.close()


def test_create_storage_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_storage(Settings(STORAGE_BACKEND="redis"))
