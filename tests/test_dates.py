"""Tests for asana_digest.dates."""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta, timezone

import pytest

from asana_digest.dates import (
    JST,
    InvalidDateError,
    UtcRange,
    jst_date_from_now,
    jst_day_to_utc_range,
    parse_ymd,
    resolve_target_date,
    today_jst,
)

# 2025-01-31 16:30 UTC == 2025-02-01 01:30 JST
_AFTER_JST_MIDNIGHT = datetime(2025, 1, 31, 16, 30, tzinfo=UTC)
# 2025-01-31 10:00 UTC == 2025-01-31 19:00 JST
_MIDDAY = datetime(2025, 1, 31, 10, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# JST clock
# ---------------------------------------------------------------------------


class TestTodayJst:
    def test_same_day(self):
        assert today_jst(_MIDDAY) == "2025-01-31"

    def test_crosses_midnight_before_utc(self):
        assert today_jst(_AFTER_JST_MIDNIGHT) == "2025-02-01"

    def test_naive_now_is_utc(self):
        assert today_jst(datetime(2025, 1, 31, 16, 30)) == "2025-02-01"

    def test_other_aware_timezone(self):
        # 2025-01-31 08:00 at UTC-8 == 16:00 UTC == 2025-02-01 01:00 JST
        pst = datetime(2025, 1, 31, 8, 0, tzinfo=timezone(timedelta(hours=-8)))
        assert today_jst(pst) == "2025-02-01"

    def test_offset_days_rolls_month(self):
        assert jst_date_from_now(1, _MIDDAY) == "2025-02-01"

    def test_offset_days_rolls_year(self):
        now = datetime(2024, 12, 31, 3, 0, tzinfo=UTC)
        assert jst_date_from_now(1, now) == "2025-01-01"

    @pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
    def test_independent_of_host_tz(self, monkeypatch):
        monkeypatch.setenv("TZ", "America/Los_Angeles")
        time.tzset()
        try:
            assert today_jst(_AFTER_JST_MIDNIGHT) == "2025-02-01"
            assert jst_day_to_utc_range("2025-02-01").after == datetime(
                2025, 1, 31, 15, 0, tzinfo=UTC
            )
        finally:
            monkeypatch.undo()
            time.tzset()


# ---------------------------------------------------------------------------
# Resolution order
# ---------------------------------------------------------------------------


class TestResolveTargetDate:
    def test_cli_today(self):
        assert resolve_target_date("today", now=_AFTER_JST_MIDNIGHT) == "2025-02-01"

    def test_cli_tomorrow(self):
        assert resolve_target_date("tomorrow", now=_MIDDAY) == "2025-02-01"

    def test_cli_literal_verbatim(self):
        assert resolve_target_date("2025-08-15", "2030-01-01") == "2025-08-15"

    def test_cli_literal_not_validated(self):
        assert resolve_target_date("next friday") == "next friday"

    def test_cli_beats_env(self):
        assert resolve_target_date("tomorrow", "2030-01-01", now=_MIDDAY) == (
            "2025-02-01"
        )

    def test_env_used_without_cli(self):
        assert resolve_target_date(None, "2030-01-01", now=_MIDDAY) == "2030-01-01"

    def test_empty_values_fall_back_to_today(self):
        assert resolve_target_date("", "", now=_MIDDAY) == "2025-01-31"

    def test_default_today(self):
        assert resolve_target_date(now=_AFTER_JST_MIDNIGHT) == "2025-02-01"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseYmd:
    def test_valid(self):
        d = parse_ymd("2025-01-31")
        assert (d.year, d.month, d.day) == (2025, 1, 31)

    @pytest.mark.parametrize(
        "value", ["2025/01/31", "20250131", "tomorrow", "", "2025-1-31"]
    )
    def test_malformed(self, value):
        with pytest.raises(InvalidDateError, match="expected YYYY-MM-DD"):
            parse_ymd(value)

    @pytest.mark.parametrize(
        "value", ["２０２５-０８-１５", " 2025-08-15", "2025-08-15\n", "2025-08-15 "]
    )
    def test_non_canonical_rejected(self, value):
        with pytest.raises(InvalidDateError, match="expected YYYY-MM-DD"):
            parse_ymd(value)

    def test_impossible_date(self):
        with pytest.raises(InvalidDateError):
            parse_ymd("2025-02-30")

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_ymd("nope")


# ---------------------------------------------------------------------------
# UTC range
# ---------------------------------------------------------------------------


class TestJstDayToUtcRange:
    def test_bounds(self):
        rng = jst_day_to_utc_range("2025-08-15")
        assert rng.after == datetime(2025, 8, 14, 15, 0, tzinfo=UTC)
        assert rng.before == datetime(2025, 8, 15, 15, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "value", ["2025-01-01", "2024-02-29", "2025-03-31", "2025-12-31"]
    )
    def test_exactly_24_hours(self, value):
        rng = jst_day_to_utc_range(value)
        assert rng.before - rng.after == timedelta(hours=24)

    @pytest.mark.parametrize("value", ["2025-01-31", "2024-02-29", "2025-12-31"])
    def test_start_is_jst_midnight(self, value):
        local = jst_day_to_utc_range(value).after.astimezone(JST)
        assert local.date().isoformat() == value
        assert (local.hour, local.minute, local.second) == (0, 0, 0)

    def test_month_rollover_is_contiguous(self):
        jan = jst_day_to_utc_range("2025-01-31")
        feb = jst_day_to_utc_range("2025-02-01")
        assert jan.before == feb.after

    def test_year_rollover(self):
        rng = jst_day_to_utc_range("2025-12-31")
        assert rng.before == datetime(2025, 12, 31, 15, 0, tzinfo=UTC)

    def test_as_params_format(self):
        after, before = jst_day_to_utc_range("2025-02-01").as_params()
        assert after == "2025-01-31T15:00:00.000Z"
        assert before == "2025-02-01T15:00:00.000Z"

    def test_malformed_rejected(self):
        with pytest.raises(InvalidDateError):
            jst_day_to_utc_range("next friday")

    def test_returns_utc_range(self):
        assert isinstance(jst_day_to_utc_range("2025-01-01"), UtcRange)
