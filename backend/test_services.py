import pytest

from errors import Conflict, InvalidCredential, InvalidInput, NotFound
from services.admin_service import AdminService
from services.checkin_service import CheckinService

DAY = "2024-03-01"


# --- login / auto-registration ---------------------------------------------

def test_first_login_registers(store, cache):
    result = CheckinService.login(store, "alice", "digest-a", cache)
    assert result == {"username": "alice", "created": True}
    assert store.find_user("alice").password_digest == "digest-a"


def test_second_login_verifies(store):
    CheckinService.login(store, "alice", "digest-a")
    assert CheckinService.login(store, "alice", "digest-a") == {"username": "alice", "created": False}


def test_wrong_digest_is_rejected_every_time(store):
    CheckinService.login(store, "alice", "digest-a")
    for _ in range(20):
        with pytest.raises(InvalidCredential):
            CheckinService.login(store, "alice", "wrong")
    # no lockout after repeated failures
    assert CheckinService.login(store, "alice", "digest-a")["created"] is False


@pytest.mark.parametrize("username,digest", [("", "d"), ("   ", "d"), ("alice", ""), (None, None)])
def test_login_requires_both_fields(store, username, digest):
    with pytest.raises(InvalidInput):
        CheckinService.login(store, username, digest)
    assert store.list_users() == []


def test_login_trims_username(store):
    CheckinService.login(store, "  alice ", "digest-a")
    assert store.list_users() == ["alice"]


# --- check-ins ---------------------------------------------------------------

def test_add_and_remove(store, cache):
    CheckinService.login(store, "alice", "d")
    assert CheckinService.add(store, "alice", "paper", DAY, cache) == {"date": DAY, "activities": ["paper"]}
    assert CheckinService.add(store, "alice", "quant", DAY, cache)["activities"] == ["paper", "quant"]
    assert CheckinService.remove(store, "alice", "paper", DAY, cache)["activities"] == ["quant"]


def test_add_duplicate_conflicts(store):
    CheckinService.login(store, "alice", "d")
    CheckinService.add(store, "alice", "paper", DAY)
    with pytest.raises(Conflict):
        CheckinService.add(store, "alice", "paper", DAY)


@pytest.mark.parametrize("activity,day", [(None, DAY), ("", DAY), ("yoga", DAY), ("paper", "03/01/2024")])
def test_add_rejects_bad_input(store, activity, day):
    CheckinService.login(store, "alice", "d")
    with pytest.raises(InvalidInput):
        CheckinService.add(store, "alice", activity, day)


def test_add_defaults_to_today(store):
    CheckinService.login(store, "alice", "d")
    result = CheckinService.add(store, "alice", "fitness")
    assert result["date"] == CheckinService.today()


def test_remove_of_nothing_succeeds(store):
    CheckinService.login(store, "alice", "d")
    assert CheckinService.remove(store, "alice", "paper", DAY) == {"date": DAY, "activities": []}


def test_toggle_flips_state(store):
    CheckinService.login(store, "alice", "d")
    on = CheckinService.toggle(store, "alice", "algorithm", DAY)
    assert on["checked"] is True and on["activities"] == ["algorithm"]
    off = CheckinService.toggle(store, "alice", "algorithm", DAY)
    assert off["checked"] is False and off["activities"] == []
    assert store.get_user_checkins("alice") == {}


def test_mutations_invalidate_cache(store, cache):
    CheckinService.login(store, "alice", "d", cache)
    assert cache.get()["alice"]["checkins"] == {}

    CheckinService.add(store, "alice", "paper", DAY, cache)
    assert cache.get()["alice"]["checkins"] == {DAY: ["paper"]}

    CheckinService.remove(store, "alice", "paper", DAY, cache)
    assert cache.get()["alice"]["checkins"] == {}


def test_today_status(store):
    CheckinService.login(store, "alice", "d")
    assert CheckinService.today_status(store, "alice")["checked_in"] is False

    CheckinService.add(store, "alice", "quant")
    status = CheckinService.today_status(store, "alice")
    assert status["checked_in"] is True
    assert status["activities"] == ["quant"]
    assert status["display"][0]["name"] == "Quant Interview"


def test_feed_lists_everyone_sorted(store):
    for name in ["zoe", "alice", "mike"]:
        CheckinService.login(store, name, "d")
    CheckinService.add(store, "zoe", "paper", DAY)
    CheckinService.add(store, "alice", "fitness", DAY)
    CheckinService.add(store, "alice", "paper", DAY)

    feed = CheckinService.feed(store, viewer="zoe", day=DAY)
    assert feed["date"] == DAY
    assert [e["username"] for e in feed["entries"]] == ["alice", "zoe"]
    assert feed["entries"][0]["activities"] == ["fitness", "paper"]
    assert [e["is_you"] for e in feed["entries"]] == [False, True]


def test_calendar_month(store):
    CheckinService.login(store, "alice", "d")
    CheckinService.add(store, "alice", "paper", "2024-03-01")
    CheckinService.add(store, "alice", "quant", "2024-03-31")
    CheckinService.add(store, "alice", "quant", "2024-04-01")

    month = CheckinService.calendar_month(store, "alice", 2024, 3)
    assert month["days"] == {"2024-03-01": ["paper"], "2024-03-31": ["quant"]}
    assert month["days_in_month"] == 31
    assert month["month_name"] == "March"
    # 1 March 2024 was a Friday
    assert month["first_weekday"] == 5


def test_calendar_rejects_bad_month(store):
    with pytest.raises(InvalidInput):
        CheckinService.calendar_month(store, "alice", 2024, 13)


# --- admin -------------------------------------------------------------------

@pytest.fixture
def populated(store):
    CheckinService.login(store, "alice", "d1")
    CheckinService.login(store, "bob", "d2")
    CheckinService.login(store, "carol", "d3")
    CheckinService.add(store, "alice", "paper", "2024-03-01")
    CheckinService.add(store, "alice", "fitness", "2024-03-01")
    CheckinService.add(store, "alice", "quant", "2024-03-05")
    CheckinService.add(store, "bob", "algorithm", "2024-03-05")
    return store


def test_stats(populated):
    stats = AdminService.stats(populated, today="2024-03-05")
    assert stats == {
        "total_users": 3,
        "total_checkins": 3,
        "total_activities": 4,
        "active_today": 2,
        "date": "2024-03-05",
    }


def test_list_users(populated):
    users = AdminService.list_users(populated)
    assert users == [
        {"username": "alice", "checkin_count": 2, "last_checkin": "2024-03-05"},
        {"username": "bob", "checkin_count": 1, "last_checkin": "2024-03-05"},
        {"username": "carol", "checkin_count": 0, "last_checkin": None},
    ]


def test_user_detail_newest_first(populated):
    detail = AdminService.user_detail(populated, "alice")
    assert [h["date"] for h in detail["history"]] == ["2024-03-05", "2024-03-01"]
    assert [d["code"] for d in detail["history"][1]["display"]] == ["paper", "fitness"]
    with pytest.raises(NotFound):
        AdminService.user_detail(populated, "ghost")


def test_delete_user(populated, cache):
    cache.get()
    AdminService.delete_user(populated, "alice", cache)
    assert "alice" not in cache.get()
    for day in ("2024-03-01", "2024-03-05"):
        names = [e["username"] for e in CheckinService.feed(populated, day=day)["entries"]]
        assert "alice" not in names


def test_import_normalizes_and_reports(store, cache):
    summary = AdminService.import_data(store, {
        "alice": {"password": "d", "checkins": {DAY: "fitness", "2024-03-02": ["paper", "paper", "quant"]}},
    }, cache)
    assert summary == {"users": 1, "checkins": 3}
    assert store.get_user_checkins("alice") == {DAY: ["fitness"], "2024-03-02": ["paper", "quant"]}


def test_invalid_import_leaves_data_untouched(populated):
    before = AdminService.export(populated)
    with pytest.raises(InvalidInput):
        AdminService.import_data(populated, {"alice": {"checkins": {}}})
    assert AdminService.export(populated) == before


def test_clear_all(populated, cache):
    AdminService.clear_all(populated, cache)
    assert AdminService.export(populated) == {}
    assert AdminService.stats(populated)["total_users"] == 0
