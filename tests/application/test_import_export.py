import json

import pytest

from leetsrs.application.calendar import utc_now
from leetsrs.application.config import AppConfig
from leetsrs.application.factory import build_services
from leetsrs.application.import_export import compare_versions
from leetsrs.consts import VERSION
from leetsrs.domain.cards.models import Difficulty, Grade
from leetsrs.domain.errors import ImportDataError
from leetsrs.infrastructure.adapters.storage import InMemoryStore


def make_services(clock=utc_now, tz=None):
    config = AppConfig(backend="memory", timezone=tz)
    return build_services(config, store=InMemoryStore(), clock=clock)


@pytest.fixture
def populated():
    services = make_services(tz="America/New_York")
    two_sum = services.cards.add_card("two-sum", "Two Sum", "1", Difficulty.Easy)
    services.cards.rate_card("two-sum", "Two Sum", Grade.Good, "1", Difficulty.Easy)
    services.cards.rate_card("lru-cache", "LRU Cache", Grade.Again, "146", Difficulty.Medium)
    services.cards.set_pause_status("lru-cache", True)
    services.notes.save_note(two_sum.id, "hash map of complements")
    services.settings.set_max_new_cards_per_day(7)
    services.settings.set_day_start_hour(4)
    services.settings.set_theme("light")
    return services


# --- export ---


def test_export_document_shape(populated):
    document = json.loads(populated.transfer.export_data())

    assert document["version"] == VERSION
    assert document["exportDate"]
    data = document["data"]
    assert set(data["cards"]) == {"two-sum", "lru-cache"}
    assert isinstance(data["cards"]["two-sum"]["fsrs"]["due"], int)
    assert isinstance(data["cards"]["two-sum"]["createdAt"], int)
    assert data["settings"] == {"maxNewCardsPerDay": 7, "dayStartHour": 4, "theme": "light"}


def test_export_notes_are_keyed_by_card_id(populated):
    card_id = populated.cards.get_card("two-sum").id
    data = json.loads(populated.transfer.export_data())["data"]
    assert data["notes"] == {card_id: {"text": "hash map of complements"}}


def test_export_of_empty_store():
    data = json.loads(make_services().transfer.export_data())["data"]
    assert data == {"cards": {}, "stats": {}, "notes": {}, "settings": {}}


# --- import ---


def test_round_trip_into_fresh_store(populated):
    exported = populated.transfer.export_data()
    fresh = make_services(tz="America/New_York")

    fresh.transfer.import_data(exported)

    assert fresh.cards.get_all_cards() == populated.cards.get_all_cards()
    assert fresh.stats.get_all_stats() == populated.stats.get_all_stats()
    card_id = fresh.cards.get_card("two-sum").id
    assert fresh.notes.get_note(card_id).text == "hash map of complements"
    assert fresh.settings.get_max_new_cards_per_day() == 7
    assert fresh.settings.get_day_start_hour() == 4
    assert fresh.settings.get_theme() == "light"
    assert fresh.cards.get_card("lru-cache").paused is True


def test_import_replaces_existing_data(populated):
    exported = populated.transfer.export_data()
    target = make_services()
    target.cards.add_card("stale", "Stale", "9", Difficulty.Hard)
    target.settings.set_animations_enabled(False)

    target.transfer.import_data(exported)

    assert target.cards.get_card("stale") is None
    assert target.settings.get_animations_enabled() is True


def test_import_without_settings_section(populated):
    document = json.loads(populated.transfer.export_data())
    del document["data"]["settings"]
    target = make_services()

    target.transfer.import_data(json.dumps(document))

    assert target.settings.get_max_new_cards_per_day() == 3
    assert len(target.cards.get_all_cards()) == 2


def test_import_accepts_older_version(populated):
    document = json.loads(populated.transfer.export_data())
    document["version"] = "1.0"
    target = make_services()

    target.transfer.import_data(json.dumps(document))

    assert len(target.cards.get_all_cards()) == 2


@pytest.mark.parametrize(
    "payload, message",
    [
        ("{not json", "Invalid JSON format"),
        (json.dumps({"version": VERSION, "exportDate": "x"}), "Invalid export data structure"),
        (
            json.dumps({"version": "", "exportDate": "x", "data": {}}),
            "Invalid export data structure",
        ),
        (
            json.dumps(
                {
                    "version": "99.0.0",
                    "exportDate": "x",
                    "data": {"cards": {}, "stats": {}, "notes": {}},
                }
            ),
            "Unsupported export version",
        ),
        (
            json.dumps(
                {
                    "version": VERSION,
                    "exportDate": "x",
                    "data": {"cards": {"x": {"slug": "x"}}, "stats": {}, "notes": {}},
                }
            ),
            "Invalid cards or stats data",
        ),
    ],
)
def test_invalid_import_leaves_data_untouched(populated, payload, message):
    before = populated.transfer.export_data()

    with pytest.raises(ImportDataError, match=message):
        populated.transfer.import_data(payload)

    after = populated.transfer.export_data()
    assert json.loads(after)["data"] == json.loads(before)["data"]


@pytest.mark.parametrize(
    "exported_settings",
    [
        {"dayStartHour": 99},
        {"dayStartHour": -1},
        {"maxNewCardsPerDay": -5},
        {"maxNewCardsPerDay": 101},
        {"maxNewCardsPerDay": True},
        {"dayStartHour": 4.5},
        {"animationsEnabled": "yes"},
        {"theme": "blue"},
    ],
)
def test_import_rejects_out_of_range_settings(populated, exported_settings):
    document = json.loads(populated.transfer.export_data())
    document["data"]["settings"] = exported_settings

    with pytest.raises(ImportDataError, match="Invalid export data structure"):
        populated.transfer.import_data(json.dumps(document))

    assert populated.settings.get_day_start_hour() == 4
    assert populated.settings.get_max_new_cards_per_day() == 7


def test_import_rejects_card_stored_under_another_slug(populated):
    document = json.loads(populated.transfer.export_data())
    cards = document["data"]["cards"]
    cards["mismatch"] = cards.pop("two-sum")
    target = make_services()

    with pytest.raises(ImportDataError, match="different slug"):
        target.transfer.import_data(json.dumps(document))

    assert target.cards.get_all_cards() == []


# --- reset ---


def test_reset_all_data(populated):
    card_id = populated.cards.get_card("two-sum").id

    populated.transfer.reset_all_data()

    assert populated.cards.get_all_cards() == []
    assert populated.stats.get_all_stats() == []
    assert populated.notes.get_note(card_id) is None
    assert populated.settings.get_max_new_cards_per_day() == 3
    assert populated.settings.get_theme() == "dark"


def test_reset_removes_every_key():
    store = InMemoryStore()
    services = build_services(AppConfig(backend="memory"), store=store)
    card = services.cards.add_card("two-sum", "Two Sum", "1", Difficulty.Easy)
    services.cards.rate_card("two-sum", "Two Sum", Grade.Good, "1", Difficulty.Easy)
    services.notes.save_note(card.id, "note")
    services.settings.set_theme("light")

    services.transfer.reset_all_data()

    assert store.keys() == []


# --- versions ---


@pytest.mark.parametrize(
    "left, right, expected",
    [
        ("1.4.0", "1.4.0", 0),
        ("1.4", "1.4.0", 0),
        ("1.10.0", "1.9.0", 1),
        ("1.3.9", "1.4.0", -1),
        ("2", "1.99.99", 1),
    ],
)
def test_compare_versions(left, right, expected):
    assert compare_versions(left, right) == expected


def test_compare_versions_rejects_garbage():
    with pytest.raises(ImportDataError):
        compare_versions("one.two", "1.0")
