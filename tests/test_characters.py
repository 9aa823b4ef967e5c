"""Tests for character ownership rules."""

import pytest
from pydantic import ValidationError

from questboard.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from questboard.modules.characters.schemas import CharacterCreate, CharacterUpdate
from tests.conftest import OWNER, PLAYER, DM, STRANGER


def new_character(name="Mira", char_class="Rogue", **fields):
    return CharacterCreate(name=name, **{"class": char_class}, **fields)


@pytest.fixture
def mira(characters, campaign):
    return characters.create_character(campaign.id, new_character(), PLAYER)


def test_create_uses_defaults(mira, campaign):
    assert mira.user_id == PLAYER
    assert mira.campaign_id == campaign.id
    assert mira.character_class == "Rogue"
    assert mira.level == 1
    assert mira.hp == 10
    assert mira.max_hp == 10
    assert mira.xp_to_next == 300
    assert mira.stats["wisdom"] == 10
    assert mira.position.x == 0


def test_create_emits_event(mira, events):
    assert events[-1].resource_type == "characters"
    assert events[-1].payload["id"] == mira.id


def test_stranger_cannot_create(characters, campaign, db):
    with pytest.raises(NotFoundError):
        characters.create_character(campaign.id, new_character(), STRANGER)
    assert db.rows("characters") == []


def test_owner_without_row_can_create_and_read(characters, members, campaign, mira):
    members.leave(campaign.id, OWNER)
    own = characters.create_character(campaign.id, new_character("Boss", "Wizard"), OWNER)
    assert own.user_id == OWNER
    ids = {c.id for c in characters.list_characters(campaign.id, OWNER)}
    assert ids == {mira.id, own.id}


def test_members_read_all_characters(characters, campaign, mira):
    assert characters.get_character(campaign.id, mira.id, DM).name == "Mira"
    assert [c.id for c in characters.list_characters(campaign.id, PLAYER)] == [mira.id]


def test_stranger_cannot_read(characters, campaign, mira):
    with pytest.raises(NotFoundError):
        characters.list_characters(campaign.id, STRANGER)
    with pytest.raises(NotFoundError):
        characters.get_character(campaign.id, mira.id, STRANGER)


def test_stranger_probe_of_missing_character_looks_the_same(characters, campaign, mira):
    with pytest.raises(NotFoundError) as existing:
        characters.update_character(campaign.id, mira.id, CharacterUpdate(hp=1), STRANGER)
    with pytest.raises(NotFoundError) as missing:
        characters.update_character(campaign.id, "ghost", CharacterUpdate(hp=1), STRANGER)
    assert existing.value.detail == missing.value.detail == "Campaign not found"


def test_character_from_other_campaign_not_found(characters, campaigns, campaign, mira):
    from questboard.modules.campaigns.schemas import CampaignCreate
    other = campaigns.create_campaign(CampaignCreate(name="Elsewhere"), PLAYER)
    with pytest.raises(NotFoundError):
        characters.get_character(other.id, mira.id, PLAYER)


def test_player_updates_own_character(characters, campaign, mira, events):
    updated = characters.update_character(
        campaign.id, mira.id,
        CharacterUpdate(hp=4, xp=120, status_effects=["poisoned"], position={"x": 3, "y": -1}),
        PLAYER
    )
    assert updated.hp == 4
    assert updated.xp == 120
    assert updated.status_effects == ["poisoned"]
    assert updated.position.x == 3
    assert events[-1].payload["hp"] == 4


def test_owner_cannot_update_players_character(characters, campaign, mira, db):
    with pytest.raises(ForbiddenError):
        characters.update_character(campaign.id, mira.id, CharacterUpdate(hp=1), OWNER)
    assert db.rows("characters")[0]["hp"] == 10


def test_dm_cannot_delete_players_character(characters, campaign, mira, db):
    with pytest.raises(ForbiddenError):
        characters.delete_character(campaign.id, mira.id, DM)
    assert len(db.rows("characters")) == 1


def test_former_member_cannot_update_own_character(characters, members, campaign, mira):
    members.leave(campaign.id, PLAYER)
    with pytest.raises(NotFoundError):
        characters.update_character(campaign.id, mira.id, CharacterUpdate(hp=1), PLAYER)


def test_negative_hp_rejected_by_schema():
    with pytest.raises(ValidationError):
        CharacterUpdate(hp=-3)


def test_hp_above_max_rejected(characters, campaign, mira, db):
    with pytest.raises(InvalidInputError):
        characters.update_character(campaign.id, mira.id, CharacterUpdate(hp=25), PLAYER)
    assert db.rows("characters")[0]["hp"] == 10


def test_raising_max_hp_allows_higher_hp(characters, campaign, mira):
    updated = characters.update_character(campaign.id, mira.id, CharacterUpdate(hp=25, max_hp=30), PLAYER)
    assert (updated.hp, updated.max_hp) == (25, 30)


def test_delete_own_character(characters, campaign, mira, db, events):
    assert characters.delete_character(campaign.id, mira.id, PLAYER)
    assert db.rows("characters") == []
    assert events[-1].action == "delete"
    with pytest.raises(NotFoundError):
        characters.get_character(campaign.id, mira.id, PLAYER)
