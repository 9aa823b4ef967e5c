import pytest
from fastapi.testclient import TestClient

from questboard.core.events import ChangeFeed
from questboard.modules.auth.service import clear_auth_cache
from questboard.modules.campaigns.schemas import CampaignCreate
from questboard.modules.campaigns.service import CampaignService
from questboard.modules.members.service import MembershipService
from questboard.modules.characters.service import CharacterService
from questboard.modules.combat.service import CombatService
from tests.fake_supabase import FakeSupabase

OWNER = "user-owner"
PLAYER = "user-player"
DM = "user-dm"
STRANGER = "user-stranger"


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {user_id}"}


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def events():
    return []


@pytest.fixture
def feed(events):
    change_feed = ChangeFeed()
    change_feed.subscribe(events.append)
    return change_feed


@pytest.fixture
def campaigns(db, feed):
    return CampaignService(db, feed=feed)


@pytest.fixture
def members(db, feed):
    return MembershipService(db, feed=feed)


@pytest.fixture
def characters(db, feed):
    return CharacterService(db, feed=feed)


@pytest.fixture
def combat(db, feed):
    return CombatService(db, feed=feed)


@pytest.fixture
def campaign(campaigns, members, db):
    """Campaign owned by OWNER with PLAYER joined and DM holding a DM membership."""
    created = campaigns.create_campaign(CampaignCreate(name="Curse of the Tavern"), OWNER)
    members.join(created.invite_code, PLAYER)
    db.table("campaign_members").insert({
        "campaign_id": created.id,
        "user_id": DM,
        "is_dm": True,
    }).execute()
    return created


@pytest.fixture
def client(db, feed):
    from questboard.main import app
    from questboard.core.events import get_change_feed
    from questboard.database.supabase_client import get_supabase, get_auth_client

    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_auth_client] = lambda: db
    app.dependency_overrides[get_change_feed] = lambda: feed
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()
