"""Tests for the activity admission policy."""
import pytest

from meetspot.domain.access.policies import AccessControlEngine, AccessReason
from meetspot.domain.activity.models import Activity, Visibility

HOST = "host"
GUEST = "guest"


class StaticFriendships:
    """Friendship checker backed by a fixed set of pairs."""

    def __init__(self, pairs=()):
        self.pairs = {frozenset(p) for p in pairs}
        self.calls = 0

    async def are_friends(self, user_a: str, user_b: str) -> bool:
        self.calls += 1
        return frozenset((user_a, user_b)) in self.pairs


def make_activity(visibility="public", password=None) -> Activity:
    activity = Activity.create(host_user_id=HOST, title="Sunset run", latitude=52.5, longitude=13.4)
    # Raw assignment so unknown visibility values can be exercised
    return activity.model_copy(update={"visibility": visibility, "password": password})


@pytest.fixture
def engine():
    return AccessControlEngine(StaticFriendships())


@pytest.mark.parametrize("visibility", ["public", "friends", "private", "secret"])
@pytest.mark.parametrize("password", [None, "code"])
async def test_host_always_admitted(visibility, password):
    engine = AccessControlEngine(StaticFriendships())
    decision = await engine.can_join(make_activity(visibility, password), HOST)
    assert decision.allowed


async def test_public_without_password_admits_everyone(engine):
    for user in ("a", "b", "c"):
        decision = await engine.can_join(make_activity(), user, password="anything")
        assert decision.allowed
        assert decision.reason is None


async def test_public_with_password_requires_exact_match(engine):
    activity = make_activity(password="Sesame")

    assert (await engine.can_join(activity, GUEST, "Sesame")).allowed

    for wrong in (None, "", "sesame", "Sesame "):
        decision = await engine.can_join(activity, GUEST, wrong)
        assert not decision.allowed
        assert decision.reason == AccessReason.REQUIRES_PASSWORD
        assert decision.requires_password


async def test_friends_only_denies_non_friend(engine):
    decision = await engine.can_join(make_activity("friends"), GUEST)
    assert not decision.allowed
    assert decision.reason == AccessReason.REQUIRES_FRIENDSHIP


async def test_friends_only_checks_friendship_before_password():
    engine = AccessControlEngine(StaticFriendships())
    decision = await engine.can_join(make_activity("friends", "code"), GUEST, "code")
    assert decision.reason == AccessReason.REQUIRES_FRIENDSHIP


async def test_friends_only_admits_friend_in_either_direction():
    engine = AccessControlEngine(StaticFriendships([(GUEST, HOST)]))
    assert (await engine.can_join(make_activity("friends"), GUEST)).allowed

    activity = make_activity("friends", "code")
    assert (await engine.can_join(activity, GUEST, "code")).allowed
    denied = await engine.can_join(activity, GUEST, "nope")
    assert denied.reason == AccessReason.REQUIRES_PASSWORD


@pytest.mark.parametrize("supplied", [None, "", "code", "anything"])
async def test_private_without_password_is_closed_to_non_hosts(engine, supplied):
    decision = await engine.can_join(make_activity("private"), GUEST, supplied)
    assert not decision.allowed
    assert decision.reason == AccessReason.REQUIRES_PASSWORD


async def test_private_with_password(engine):
    activity = make_activity("private", "code")
    assert (await engine.can_join(activity, GUEST, "code")).allowed
    assert not (await engine.can_join(activity, GUEST, "CODE")).allowed


async def test_private_ignores_friendship():
    engine = AccessControlEngine(StaticFriendships([(GUEST, HOST)]))
    decision = await engine.can_join(make_activity("private"), GUEST)
    assert not decision.allowed


async def test_unknown_visibility_fails_closed(engine):
    decision = await engine.can_join(make_activity("invite_only"), GUEST, "code")
    assert not decision.allowed
    assert decision.reason == AccessReason.GENERIC


async def test_decision_is_repeatable():
    checker = StaticFriendships()
    engine = AccessControlEngine(checker)
    activity = make_activity("friends")

    first = await engine.can_join(activity, GUEST)
    second = await engine.can_join(activity, GUEST)

    assert first == second
    assert activity.joined_user_ids == []
    assert checker.calls == 2


async def test_empty_password_on_create_means_no_password(engine):
    activity = Activity.create(
        host_user_id=HOST, title="Chess", latitude=0, longitude=0,
        visibility=Visibility.PUBLIC, password="",
    )
    assert activity.password is None
    assert (await engine.can_join(activity, GUEST)).allowed
