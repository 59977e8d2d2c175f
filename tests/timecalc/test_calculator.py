from __future__ import annotations

import pytest

from src.zeitkonto.zeitkonto.timecalc.calculator import (
    ParsedTime,
    compute_net_hours,
    legal_pause_hours,
    parse_time,
    pause_to_hours,
    span_hours,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("08:00", ParsedTime(8, 0)),
        ("8:05", ParsedTime(8, 5)),
        (" 23:59 ", ParsedTime(23, 59)),
        ("00:00", ParsedTime(0, 0)),
    ],
)
def test_parse_time_accepts_hh_mm(value, expected):
    assert parse_time(value) == expected


@pytest.mark.parametrize("value", [None, "", "24:00", "12:60", "1200", "12:5", "ab:cd", "12:00:00", "-1:30"])
def test_parse_time_rejects_malformed_input(value):
    assert parse_time(value) is None


@pytest.mark.parametrize(
    "token,expected",
    [
        ("Keine", 0.0),
        ("keine", 0.0),
        (None, 0.0),
        ("", 0.0),
        ("30min", 0.5),
        ("45min.", 0.75),
        ("60 min", 1.0),
        ("15 Minuten", 0.25),
        ("90", 1.5),
        ("lunch", 0.0),
        ("1h", 0.0),
    ],
)
def test_pause_to_hours(token, expected):
    assert pause_to_hours(token) == pytest.approx(expected)


def test_pause_to_hours_clamps_to_three_hours():
    assert pause_to_hours("500min") == pytest.approx(3.0)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (0.0, 0.0),
        (5.5, 0.0),
        (6.0, 0.0),
        (6.01, 0.5),
        (6.5, 0.5),
        (9.0, 0.5),
        (9.5, 0.75),
        (12.0, 0.75),
    ],
)
def test_legal_pause_boundaries(raw, expected):
    assert legal_pause_hours(raw) == expected


def test_span_wraps_past_midnight():
    assert span_hours("22:00", "02:00") == pytest.approx(4.0)
    assert span_hours("08:00", None) == 0.0


def test_five_hour_span_needs_no_pause():
    result = compute_net_hours("08:00", "13:00", None, None, "Keine")
    assert result.effective_pause_hours == 0
    assert result.net_hours == pytest.approx(5.0)


def test_six_and_a_half_hour_span_needs_half_hour():
    result = compute_net_hours("08:00", "14:30", None, None, "Keine")
    assert result.effective_pause_hours == pytest.approx(0.5)
    assert result.net_hours == pytest.approx(6.0)


def test_nine_and_a_half_hour_span_needs_three_quarters():
    result = compute_net_hours("07:00", "16:30", None, None, "Keine")
    assert result.effective_pause_hours == pytest.approx(0.75)
    assert result.net_hours == pytest.approx(8.75)


def test_split_shift_applies_legal_pause_on_total():
    result = compute_net_hours("08:00", "12:00", "12:30", "17:00", "Keine")
    assert result.raw_hours == pytest.approx(8.5)
    assert result.effective_pause_hours == pytest.approx(0.5)
    assert result.net_hours == pytest.approx(8.0)


def test_declared_pause_above_legal_minimum_wins():
    result = compute_net_hours("08:00", "12:00", "12:30", "17:00", "60min")
    assert result.effective_pause_hours == pytest.approx(1.0)
    assert result.net_hours == pytest.approx(7.5)


def test_overnight_split_shift():
    result = compute_net_hours("22:00", "23:59", "00:15", "02:00", "15min")
    assert result.raw_hours == pytest.approx(3.73, abs=0.01)
    assert result.effective_pause_hours == pytest.approx(0.25)
    assert result.net_hours == pytest.approx(3.48, abs=0.01)


def test_malformed_punches_yield_zero():
    result = compute_net_hours("8 Uhr", "17:00", "", None, "Keine")
    assert result.raw_hours == 0
    assert result.net_hours == 0


def test_net_hours_never_negative():
    result = compute_net_hours("08:00", "09:00", None, None, "180min")
    assert result.net_hours == 0
