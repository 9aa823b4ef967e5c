"""Tests for the authorization engine: decide() over member/owner/dm."""

import pytest

from questboard.core.authorization import Authorizer, Capability
from tests.conftest import OWNER, PLAYER, DM, STRANGER


@pytest.fixture
def authorizer(db):
    return Authorizer(db)


@pytest.mark.parametrize("principal,member,owner,dm", [
    (OWNER, True, True, True),
    (PLAYER, True, False, False),
    (DM, True, False, True),
    (STRANGER, False, False, False),
])
def test_decide_truth_table(authorizer, campaign, principal, member, owner, dm):
    assert authorizer.decide(principal, campaign.id, Capability.MEMBER) is member
    assert authorizer.decide(principal, campaign.id, Capability.OWNER) is owner
    assert authorizer.decide(principal, campaign.id, Capability.DM) is dm


def test_owner_without_membership_row_is_still_member(authorizer, campaign, members, db):
    members.leave(campaign.id, OWNER)
    assert not [m for m in db.rows("campaign_members") if m["user_id"] == OWNER]

    assert authorizer.decide(OWNER, campaign.id, Capability.MEMBER)
    assert authorizer.decide(OWNER, campaign.id, Capability.OWNER)
    # The DM flag lived on the row that was removed
    assert not authorizer.decide(OWNER, campaign.id, Capability.DM)


def test_unknown_campaign_denies_everything(authorizer, campaign):
    for capability in Capability:
        assert not authorizer.decide(OWNER, "no-such-campaign", capability)


@pytest.mark.parametrize("principal", [None, ""])
def test_missing_principal_denies_everything(authorizer, campaign, principal):
    for capability in Capability:
        assert not authorizer.decide(principal, campaign.id, capability)


def test_membership_in_other_campaign_does_not_leak(authorizer, campaign, campaigns):
    from questboard.modules.campaigns.schemas import CampaignCreate
    other = campaigns.create_campaign(CampaignCreate(name="Other"), STRANGER)
    assert not authorizer.decide(PLAYER, other.id, Capability.MEMBER)
    assert not authorizer.decide(OWNER, other.id, Capability.MEMBER)
    assert authorizer.decide(STRANGER, other.id, Capability.OWNER)


def test_decision_reflects_revocation_immediately(authorizer, campaign, members):
    assert authorizer.is_member(PLAYER, campaign.id)
    members.leave(campaign.id, PLAYER)
    assert not authorizer.is_member(PLAYER, campaign.id)


def test_decide_never_mutates(authorizer, campaign, db):
    before = {name: db.rows(name) for name in ("campaigns", "campaign_members")}
    db.calls.clear()
    authorizer.decide(PLAYER, campaign.id, Capability.DM)
    assert all(op == "select" for _, op in db.calls)
    assert {name: db.rows(name) for name in before} == before


def test_resolve_snapshot(authorizer, campaign):
    access = authorizer.resolve(DM, campaign.id)
    assert access.campaign_exists
    assert access.has_membership
    assert access.is_dm
    assert not access.is_owner
    assert access.is_member
