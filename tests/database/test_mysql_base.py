from datetime import datetime, time, timedelta, timezone

import pytest

from attendance_engine.database.mysql_base import (
    dump_json,
    from_db_datetime,
    load_json,
    normalize_mysql_time,
    to_db_datetime,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (time(8, 30), time(8, 30)),
        (timedelta(hours=8, minutes=30), time(8, 30)),
        ("08:30:00", time(8, 30)),
        ("18:00", time(18, 0)),
        (None, None),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_datetimes_are_stored_as_naive_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    stored = to_db_datetime(datetime(2025, 1, 6, 9, 0, tzinfo=ist))

    assert stored == datetime(2025, 1, 6, 3, 30)
    assert from_db_datetime(stored) == datetime(2025, 1, 6, 3, 30, tzinfo=timezone.utc)


def test_json_columns_accept_bytes_and_blank():
    assert load_json(b'{"a": 1}') == {"a": 1}
    assert load_json("  ", default=[]) == []
    assert load_json(dump_json(["x"])) == ["x"]
