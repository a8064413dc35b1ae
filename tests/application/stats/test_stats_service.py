from datetime import datetime, timedelta

import pytest

from leetsrs.application.stats.service import StatsService
from leetsrs.domain.cards.models import CardState, Difficulty, Grade


def assert_consistent(day):
    assert day.total_reviews == day.new_cards + day.reviewed_cards
    assert day.total_reviews == sum(day.grade_breakdown.values())


# --- update_stats ---


def test_no_record_before_first_review(stats):
    assert stats.get_today_stats() is None
    assert stats.get_all_stats() == []


def test_update_stats_creates_and_increments(stats):
    stats.update_stats(Grade.Good, is_new_card=True)
    stats.update_stats(Grade.Again, is_new_card=False)
    stats.update_stats(Grade.Good, is_new_card=False)

    today = stats.get_today_stats()
    assert today.date == "2024-03-15"
    assert today.total_reviews == 3
    assert today.new_cards == 1
    assert today.reviewed_cards == 2
    assert today.grade_breakdown == {
        Grade.Again: 1,
        Grade.Hard: 0,
        Grade.Good: 2,
        Grade.Easy: 0,
    }
    assert today.streak == 1
    assert_consistent(today)


def test_streak_grows_on_consecutive_days(stats, clock):
    streaks = []
    for _ in range(3):
        stats.update_stats(Grade.Good)
        streaks.append(stats.get_today_stats().streak)
        clock.advance(days=1)

    assert streaks == [1, 2, 3]


def test_streak_resets_after_skipped_day(stats, clock):
    stats.update_stats(Grade.Good)
    clock.advance(days=1)
    stats.update_stats(Grade.Good)
    clock.advance(days=2)
    stats.update_stats(Grade.Good)

    assert [d.streak for d in stats.get_all_stats()] == [1, 2, 1]


def test_streak_continues_across_dst_change(stats, clock, tz):
    clock.set(datetime(2024, 3, 10, 0, 30, tzinfo=tz))
    stats.update_stats(Grade.Good)
    clock.set(datetime(2024, 3, 11, 0, 30, tzinfo=tz))
    stats.update_stats(Grade.Good)

    assert stats.get_stats_for_date("2024-03-11").streak == 2


def test_day_start_hour_assigns_late_reviews_to_previous_day(stats, settings, clock, tz):
    settings.set_day_start_hour(4)
    clock.set(datetime(2024, 3, 16, 2, 0, tzinfo=tz))

    stats.update_stats(Grade.Good, is_new_card=True)

    assert stats.get_stats_for_date("2024-03-15").total_reviews == 1
    assert stats.get_stats_for_date("2024-03-16") is None


# --- lookups ---


def test_get_all_stats_is_newest_first(stats, clock):
    for _ in range(3):
        stats.update_stats(Grade.Hard)
        clock.advance(days=2)

    assert [d.date for d in stats.get_all_stats()] == ["2024-03-19", "2024-03-17", "2024-03-15"]


def test_get_stats_for_unknown_date_is_none(stats):
    stats.update_stats(Grade.Good)
    assert stats.get_stats_for_date("1999-01-01") is None


def test_current_streak(stats, clock):
    assert stats.get_current_streak() == 0
    stats.update_stats(Grade.Good)
    clock.advance(days=1)
    stats.update_stats(Grade.Good)
    assert stats.get_current_streak() == 2

    clock.advance(days=1)  # not reviewed yet today
    assert stats.get_current_streak() == 2

    clock.advance(days=1)
    assert stats.get_current_streak() == 0


# --- card state histogram ---


def test_card_state_stats_has_every_state(stats):
    assert stats.get_card_state_stats() == {
        CardState.New: 0,
        CardState.Learning: 0,
        CardState.Review: 0,
        CardState.Relearning: 0,
    }


def test_card_state_stats_counts_paused_cards(cards, stats):
    cards.add_card("a", "A", "1", Difficulty.Easy)
    cards.add_card("b", "B", "2", Difficulty.Easy)
    cards.rate_card("c", "C", Grade.Good, "3", Difficulty.Easy)
    cards.set_pause_status("a", True)

    histogram = stats.get_card_state_stats()
    assert histogram[CardState.New] == 2
    assert histogram[CardState.Review] == 1


# --- last N days ---


def test_last_n_days_zero_fills_oldest_first(stats, clock):
    stats.update_stats(Grade.Good)
    stats.update_stats(Grade.Easy)
    clock.advance(days=2)
    stats.update_stats(Grade.Again)

    days = stats.get_last_n_days_stats(4)

    assert [d.date for d in days] == ["2024-03-14", "2024-03-15", "2024-03-16", "2024-03-17"]
    assert [d.total_reviews for d in days] == [0, 2, 0, 1]
    assert days[0].streak == 0
    assert days[2].streak == 0
    assert days[2].grade_breakdown == {g: 0 for g in Grade}
    # stand-ins are not persisted
    assert stats.get_stats_for_date("2024-03-16") is None


def test_last_n_days_respects_day_start_hour(stats, settings, clock, tz):
    settings.set_day_start_hour(4)
    clock.set(datetime(2024, 3, 16, 2, 0, tzinfo=tz))

    assert [d.date for d in stats.get_last_n_days_stats(2)] == ["2024-03-14", "2024-03-15"]


# --- next N days ---


def test_next_n_days_counts_first_matching_day(cards, stats, clock):
    cards.add_card("overdue", "Overdue", "1", Difficulty.Easy)  # due now
    clock.advance(days=5)
    cards.rate_card("in-one-day", "X", Grade.Hard, "2", Difficulty.Easy)  # +1 day
    cards.rate_card("in-three-days", "Y", Grade.Good, "3", Difficulty.Easy)  # +3 days
    cards.rate_card("next-week", "Z", Grade.Easy, "4", Difficulty.Easy)  # +7 days

    forecast = stats.get_next_n_days_stats(4)

    assert [f.date for f in forecast] == ["2024-03-20", "2024-03-21", "2024-03-22", "2024-03-23"]
    assert [f.count for f in forecast] == [1, 1, 0, 1]


def test_next_n_days_excludes_paused_cards(cards, stats):
    cards.add_card("two-sum", "Two Sum", "1", Difficulty.Easy)
    cards.set_pause_status("two-sum", True)

    assert cards.get_review_queue() == []
    assert all(f.count == 0 for f in stats.get_next_n_days_stats(7))


@pytest.mark.parametrize("days", [0, 1, 14])
def test_next_n_days_length(stats, days):
    assert len(stats.get_next_n_days_stats(days)) == days


def test_next_n_days_keys_are_calendar_days(stats, clock, tz):
    clock.set(datetime(2024, 3, 9, 23, 30, tzinfo=tz))
    keys = [f.date for f in stats.get_next_n_days_stats(3)]
    assert keys == ["2024-03-09", "2024-03-10", "2024-03-11"]


def test_stats_survive_reload(store, settings, clock, tz, stats):
    stats.update_stats(Grade.Good, is_new_card=True)
    reloaded = StatsService(store, settings, clock=clock, tz=tz)

    assert reloaded.get_today_stats() == stats.get_today_stats()
    assert_consistent(reloaded.get_today_stats())


def test_history_window_of_zero_days(stats):
    assert stats.get_last_n_days_stats(0) == []


def test_forecast_window_starts_today_even_late_at_night(cards, stats, clock, tz):
    clock.set(datetime(2024, 3, 15, 23, 0, tzinfo=tz))
    cards.add_card("late", "Late", "1", Difficulty.Easy)
    clock.set(clock.now + timedelta(minutes=30))

    assert stats.get_next_n_days_stats(1)[0].count == 1
