"""
test_restrictions.py – Restriction store, action gate and /restrictions routes.

Covers:
- Lazy expiry and one-time deactivation
- Gate blocking sets and deterministic precedence
- Manual imposition and lifting
- The require_unrestricted dependency used by action handlers
- Access control
"""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from datetime import datetime, timedelta, timezone
from toilet_moderation.main import app
from toilet_moderation.authentication import schemas as auth_schemas
from toilet_moderation.authentication.security import get_current_user
from toilet_moderation.dependencies import get_store
from toilet_moderation.errors import RestrictionNotFound
from toilet_moderation.restrictions import gate, policy, utils
from toilet_moderation.restrictions.router import require_unrestricted
from toilet_moderation.restrictions.schemas import RestrictedAction, RestrictionCreator, RestrictionType
from toilet_moderation.storage.store import RESTRICTIONS, MemoryStore
from toilet_moderation.violations import utils as violation_utils
from toilet_moderation.violations.schemas import ViolationSeverity, ViolationType

client = TestClient(app)
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ────────────────────────────────
# Fixtures and helpers
# ────────────────────────────────
@pytest.fixture
def store():
    store = MemoryStore()
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


@pytest.fixture
def auth_user():
    """Override get_current_user to simulate a signed-in user with a role."""

    def _set_user(role="member", user_id="u1"):
        fake_user = auth_schemas.CurrentUser(user_id=user_id, role=role)
        app.dependency_overrides[get_current_user] = lambda: fake_user
        return fake_user

    yield _set_user
    app.dependency_overrides.pop(get_current_user, None)


def restrict(store, type, days=None, start=NOW, user_id="u1", reason=None):
    return utils.create_restriction(
        store, user_id, type, reason or f"{type.value} reason",
        duration=timedelta(days=days) if days else None, now=start,
    )


# ────────────────────────────────
# Tests: Store expiry
# ────────────────────────────────
def test_active_restrictions_deactivates_ended_ones(store):
    ended = restrict(store, RestrictionType.POST_RESTRICTION, days=1, start=NOW - timedelta(days=2))
    live = restrict(store, RestrictionType.WARNING)

    active = utils.active_restrictions(store, "u1", NOW)

    assert [r.id for r in active] == [live.id]
    assert store.get(RESTRICTIONS, ended.id)["is_active"] is False


def test_restriction_ending_exactly_now_is_still_active(store):
    r = restrict(store, RestrictionType.POST_RESTRICTION, days=1, start=NOW - timedelta(days=1))
    assert [x.id for x in utils.active_restrictions(store, "u1", NOW)] == [r.id]


def test_deactivate_only_once(store):
    r = restrict(store, RestrictionType.WARNING)
    assert utils.deactivate_restriction(store, r.id) is True
    assert utils.deactivate_restriction(store, r.id) is False
    with pytest.raises(RestrictionNotFound):
        utils.deactivate_restriction(store, "missing")


def test_lift_restriction_records_moderator(store):
    r = restrict(store, RestrictionType.TEMPORARY_BAN, days=7)
    lifted = utils.lift_restriction(store, r.id, moderator_id="mod1", now=NOW)
    assert lifted.is_active is False
    assert lifted.lifted_by == "mod1"
    assert lifted.lifted_at == NOW
    assert gate.is_restricted(store, "u1", RestrictedAction.POST, NOW).restricted is False


# ────────────────────────────────
# Tests: Gate
# ────────────────────────────────
def test_gate_user_without_points(store):
    assert gate.is_restricted(store, "u1", RestrictedAction.POST, NOW) == gate.GateResult(restricted=False)


@pytest.mark.parametrize("type,blocked", [
    (RestrictionType.POST_RESTRICTION, {"post"}),
    (RestrictionType.COMMENT_RESTRICTION, {"comment"}),
    (RestrictionType.REVIEW_RESTRICTION, {"review"}),
    (RestrictionType.VOTE_RESTRICTION, {"vote"}),
    (RestrictionType.TEMPORARY_BAN, {"post", "comment", "review", "vote"}),
    (RestrictionType.PERMANENT_BAN, {"post", "comment", "review", "vote"}),
    (RestrictionType.WARNING, set()),
])
def test_gate_blocking_sets(store, type, blocked):
    restrict(store, type, days=2)
    result = {a.value for a in RestrictedAction if gate.is_restricted(store, "u1", a, NOW).restricted}
    assert result == blocked


def test_gate_after_eight_points(store):
    for severity in (ViolationSeverity.HIGH, ViolationSeverity.LOW, ViolationSeverity.LOW):
        violation_utils.add_violation(store, "u1", ViolationType.SPAM_POSTING, severity, "spam", now=NOW)
    restriction = policy.reconcile(store, "u1", NOW)

    result = gate.is_restricted(store, "u1", RestrictedAction.POST, NOW)
    assert result.restricted is True
    assert result.reason == restriction.reason
    assert result.end_date == NOW + timedelta(days=3)
    assert result.restriction_type == RestrictionType.POST_RESTRICTION


def test_gate_prefers_bans_over_action_restrictions(store):
    restrict(store, RestrictionType.POST_RESTRICTION, days=3, start=NOW)
    restrict(store, RestrictionType.TEMPORARY_BAN, days=7, start=NOW - timedelta(hours=1))
    restrict(store, RestrictionType.PERMANENT_BAN, start=NOW - timedelta(hours=2), reason="banned for good")

    result = gate.is_restricted(store, "u1", RestrictedAction.POST, NOW)
    assert result.restriction_type == RestrictionType.PERMANENT_BAN
    assert result.reason == "banned for good"
    assert result.end_date is None


def test_gate_picks_latest_ending_among_equals(store):
    restrict(store, RestrictionType.POST_RESTRICTION, days=1, reason="short")
    restrict(store, RestrictionType.POST_RESTRICTION, days=3, start=NOW - timedelta(hours=1), reason="long")
    assert gate.is_restricted(store, "u1", RestrictedAction.POST, NOW).reason == "long"


# ────────────────────────────────
# Tests: Routes
# ────────────────────────────────
def test_my_status(store, auth_user):
    """GET /restrictions/me → active restrictions and points."""
    auth_user("member", user_id="u1")
    utils.create_restriction(store, "u1", RestrictionType.WARNING, "Be nice")
    violation_utils.add_violation(store, "u1", ViolationType.FAKE_INFORMATION, ViolationSeverity.MEDIUM, "Wrong hours")

    response = client.get("/restrictions/me")
    assert response.status_code == 200
    body = response.json()
    assert body["violation_points"] == 3
    assert body["restrictions"][0]["type"] == "warning"


def test_check_action(store, auth_user):
    """GET /restrictions/check → gate result for the caller."""
    auth_user("member", user_id="u1")
    utils.create_restriction(store, "u1", RestrictionType.VOTE_RESTRICTION, "Vote ring", duration=timedelta(days=2))

    assert client.get("/restrictions/check", params={"action": "post"}).json()["restricted"] is False
    body = client.get("/restrictions/check", params={"action": "vote"}).json()
    assert body["restricted"] is True
    assert body["reason"] == "Vote ring"
    assert body["end_date"] is not None


def test_check_action_rejects_unknown_action(store, auth_user):
    auth_user("member")
    assert client.get("/restrictions/check", params={"action": "dance"}).status_code == 422


def test_impose_restriction_admin(store, auth_user):
    """POST /restrictions → staff can restrict by hand."""
    auth_user("administrator", user_id="admin1")
    response = client.post("/restrictions/", json={
        "user_id": "u5", "type": "comment_restriction", "reason": "Flooding comments", "duration_days": 2,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["created_by"] == RestrictionCreator.ADMIN.value
    assert body["details"]["issued_by"] == "admin1"
    assert gate.is_restricted(store, "u5", RestrictedAction.COMMENT).restricted is True


def test_impose_restriction_forbidden(store, auth_user):
    auth_user("member")
    response = client.post("/restrictions/", json={"user_id": "u5", "type": "warning", "reason": "x"})
    assert response.status_code == 403


def test_lift_restriction_route(store, auth_user):
    """PATCH /restrictions/{id}/lift → staff can lift, 404 when unknown."""
    r = utils.create_restriction(store, "u1", RestrictionType.PERMANENT_BAN, "Banned")
    auth_user("moderator", user_id="mod1")

    response = client.patch(f"/restrictions/{r.id}/lift")
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["lifted_by"] == "mod1"

    assert client.patch("/restrictions/nope/lift").status_code == 404


def test_user_history_staff_only(store, auth_user):
    utils.create_restriction(store, "u7", RestrictionType.WARNING, "Heads up")
    auth_user("member")
    assert client.get("/restrictions/u7").status_code == 403
    auth_user("moderator")
    assert len(client.get("/restrictions/u7").json()) == 1


# ────────────────────────────────
# Tests: Action handler dependency
# ────────────────────────────────
@pytest.fixture
def action_client(store):
    handler_app = FastAPI()
    handler_app.state.store = store

    @handler_app.post("/toilets")
    def post_toilet(user=Depends(require_unrestricted(RestrictedAction.POST))):
        return {"posted_by": user.user_id}

    return TestClient(handler_app)


def test_require_unrestricted_allows(store, action_client):
    response = action_client.post("/toilets", headers={"X-User-Id": "u1"})
    assert response.status_code == 200
    assert response.json() == {"posted_by": "u1"}


def test_require_unrestricted_blocks_with_reason(store, action_client):
    r = utils.create_restriction(store, "u1", RestrictionType.POST_RESTRICTION, "Posting paused",
                                 duration=timedelta(days=1))
    response = action_client.post("/toilets", headers={"X-User-Id": "u1"})
    assert response.status_code == 403
    assert response.json()["detail"] == {"reason": "Posting paused", "end_date": r.end_date.isoformat()}


# in the repo root: pytest -v toilet_moderation/tests/test_restrictions.py
