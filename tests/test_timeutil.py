import calendar
import time

import pytest

from idcframe.timeutil import Timer, add_time, format_time, local_time, str_to_time


@pytest.fixture
def utc(monkeypatch):
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


STAMP = "20211205083045"


def test_str_to_time_matches_utc(utc):
    expected = calendar.timegm((2021, 12, 5, 8, 30, 45, 0, 0, 0))
    assert str_to_time(STAMP) == expected


def test_str_to_time_ignores_separators(utc):
    assert str_to_time("2021-12-05 08:30:45") == str_to_time(STAMP)
    assert str_to_time("2021/12/05 08:30:45") == str_to_time(STAMP)


@pytest.mark.parametrize("bad", ["2021-12-05", "", "abc", "202112050830451"])
def test_str_to_time_rejects_bad_input(bad):
    with pytest.raises(ValueError):
        str_to_time(bad)


@pytest.mark.parametrize(
    "fmt, expected",
    [
        ("", "2021-12-05 08:30:45"),
        ("yyyy-mm-dd hh24:mi:ss", "2021-12-05 08:30:45"),
        ("yyyy-mm-dd hh24:mi", "2021-12-05 08:30"),
        ("yyyy-mm-dd hh24", "2021-12-05 08"),
        ("yyyy-mm-dd", "2021-12-05"),
        ("yyyy-mm", "2021-12"),
        ("yyyymmddhh24miss", "20211205083045"),
        ("yyyymmddhh24mi", "202112050830"),
        ("yyyymmddhh24", "2021120508"),
        ("yyyymmdd", "20211205"),
        ("hh24miss", "083045"),
        ("hh24mi", "0830"),
        ("hh24", "08"),
        ("mi", "30"),
    ],
)
def test_format_time_formats(utc, fmt, expected):
    assert format_time(str_to_time(STAMP), fmt) == expected


def test_format_time_unknown_format():
    with pytest.raises(ValueError):
        format_time(0, "dd/mm/yyyy")


def test_add_time_zero_offset_reformats(utc):
    assert add_time(STAMP, 0) == "2021-12-05 08:30:45"


def test_add_time_shift_round_trip(utc):
    shifted = add_time(STAMP, 3600, "yyyymmddhh24miss")
    assert str_to_time(shifted) - str_to_time(STAMP) == 3600


def test_add_time_negative_shift(utc):
    shifted = add_time(STAMP, -86400, "yyyymmddhh24miss")
    assert str_to_time(STAMP) - str_to_time(shifted) == 86400


def test_add_time_bad_input():
    with pytest.raises(ValueError):
        add_time("not a time", 10)


def test_local_time_is_now(utc):
    before = int(time.time())
    now = str_to_time(local_time("yyyymmddhh24miss"))
    after = int(time.time())
    assert before <= now <= after


def test_local_time_offset(utc):
    base = str_to_time(local_time())
    ahead = str_to_time(local_time("", 120))
    assert 119 <= ahead - base <= 121


def test_timer_elapsed_restarts():
    timer = Timer()
    time.sleep(0.02)
    first = timer.elapsed()
    second = timer.elapsed()
    assert first >= 0.015
    assert 0 <= second < first