"""Tests for slot generation and the availability oracle."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from conftest import FakeCalendarProvider
from frontdesk.availability import (
    FALLBACK_SLOTS,
    SlotAvailabilityOracle,
    business_window,
    candidate_slots,
    display_time,
    fallback_slots,
    slot_to_dict,
    subtract_busy,
)
from frontdesk.calendar_providers.base import (
    CalendarBackendError,
    CalendarNotAuthenticatedError,
    TimeSlot,
)

TZ = ZoneInfo("America/New_York")
DAY = date(2024, 6, 10)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 6, 10, hour, minute, tzinfo=TZ)


# ── Candidate slot generation ───────────────────────────────────────


class TestCandidateSlots:
    def test_hourly_slots_fill_business_day(self):
        opens, closes = business_window(DAY, TZ)
        slots = candidate_slots(opens, closes, 60)

        assert len(slots) == 10
        assert slots[0].start == _at(8)
        assert slots[-1].end == _at(18)

    def test_partial_trailing_slot_dropped(self):
        opens, closes = business_window(DAY, TZ)
        slots = candidate_slots(opens, closes, 90)

        # 8:00 .. 17:00 fit; 17:00-18:30 would overrun closing
        assert len(slots) == 6
        assert slots[-1].end == _at(17)

    @pytest.mark.parametrize("minutes", [15, 30, 45, 60, 90, 120, 600])
    def test_slots_contiguous_and_inside_window(self, minutes):
        opens, closes = business_window(DAY, TZ)
        slots = candidate_slots(opens, closes, minutes)

        assert slots, "expected at least one slot"
        assert slots[0].start == opens
        for slot in slots:
            assert opens <= slot.start < slot.end <= closes
            assert slot.end - slot.start == timedelta(minutes=minutes)
        for earlier, later in zip(slots, slots[1:]):
            assert earlier.end == later.start

    def test_slot_longer_than_day_yields_nothing(self):
        opens, closes = business_window(DAY, TZ)
        assert candidate_slots(opens, closes, 601) == []

    def test_non_positive_duration_rejected(self):
        opens, closes = business_window(DAY, TZ)
        with pytest.raises(ValueError):
            candidate_slots(opens, closes, 0)


class TestSubtractBusy:
    def test_touching_busy_interval_does_not_block_neighbours(self):
        opens, closes = business_window(DAY, TZ)
        slots = candidate_slots(opens, closes, 60)

        free = subtract_busy(slots, [TimeSlot(_at(9), _at(10))])

        starts = [s.start.hour for s in free]
        assert 9 not in starts
        assert 8 in starts and 10 in starts

    def test_straddling_interval_blocks_both_slots(self):
        opens, closes = business_window(DAY, TZ)
        slots = candidate_slots(opens, closes, 60)

        free = subtract_busy(slots, [TimeSlot(_at(9, 30), _at(10, 30))])

        starts = [s.start.hour for s in free]
        assert 9 not in starts and 10 not in starts
        assert len(free) == 8

    def test_no_returned_slot_overlaps_busy(self):
        opens, closes = business_window(DAY, TZ)
        busy = [
            TimeSlot(_at(8, 15), _at(8, 45)),
            TimeSlot(_at(12), _at(14)),
            TimeSlot(_at(17, 59), _at(19)),
        ]
        for minutes in (30, 45, 60):
            free = subtract_busy(candidate_slots(opens, closes, minutes), busy)
            for slot in free:
                for b in busy:
                    assert not (slot.start < b.end and slot.end > b.start)


# ── Display helpers ────────────────────────────────────────────────


class TestDisplay:
    def test_display_time_has_no_leading_zero(self):
        assert display_time(_at(9)) == "9:00 AM"
        assert display_time(_at(13, 30)) == "1:30 PM"

    def test_slot_to_dict(self):
        d = slot_to_dict(TimeSlot(_at(8), _at(9)))
        assert d["display"] == "8:00 AM"
        assert d["start"].startswith("2024-06-10T08:00:00")

    def test_fallback_slots_are_display_only(self):
        slots = fallback_slots()
        assert [s["display"] for s in slots] == list(FALLBACK_SLOTS)
        assert all(set(s) == {"display"} for s in slots)


# ── Oracle against a calendar backend ──────────────────────────────


class TestSlotAvailabilityOracle:
    async def test_free_calendar_returns_all_slots(self, provider):
        oracle = SlotAvailabilityOracle(provider, time_zone="America/New_York")

        slots = await oracle.available_slots(DAY)

        assert len(slots) == 10
        assert provider.busy_queries == [(_at(8), _at(18))]

    async def test_busy_intervals_removed_in_order(self):
        provider = FakeCalendarProvider(busy=[
            TimeSlot(_at(14), _at(15)),
            TimeSlot(_at(10), _at(12)),
        ])
        oracle = SlotAvailabilityOracle(provider, time_zone="America/New_York")

        slots = await oracle.available_slots(DAY, 60)

        hours = [s.start.hour for s in slots]
        assert hours == [8, 9, 12, 13, 15, 16, 17]
        assert hours == sorted(hours)

    async def test_custom_business_hours(self, provider):
        oracle = SlotAvailabilityOracle(
            provider, business_start_hour=9, business_end_hour=12
        )
        slots = await oracle.available_slots(DAY, 30)
        assert len(slots) == 6

    async def test_unauthenticated_raises(self, unauthenticated_provider):
        oracle = SlotAvailabilityOracle(unauthenticated_provider)
        with pytest.raises(CalendarNotAuthenticatedError):
            await oracle.available_slots(DAY)

    async def test_backend_error_propagates(self):
        provider = FakeCalendarProvider(fail=CalendarBackendError("boom"))
        oracle = SlotAvailabilityOracle(provider)
        with pytest.raises(CalendarBackendError):
            await oracle.available_slots(DAY)

    async def test_slow_backend_times_out(self):
        provider = FakeCalendarProvider(delay=0.5)
        oracle = SlotAvailabilityOracle(provider, timeout_seconds=0.01)
        with pytest.raises(CalendarBackendError):
            await oracle.available_slots(DAY)
