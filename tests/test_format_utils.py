from datetime import timedelta

import pytest

from archival_transcoder.utils.format_utils import format_timedelta, formatted_size


@pytest.mark.parametrize(
    "value, expected",
    [
        (timedelta(hours=2, minutes=1, seconds=1), "02:01:01"),
        (7261, "02:01:01"),
        (59.9, "00:00:59"),
        ("soon", "00:00:00"),
    ],
)
def test_format_timedelta(value, expected):
    assert format_timedelta(value) == expected


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.50 KB"),
        (2 * 1024 * 1024, "2 MB"),
        (-3 * 1024 * 1024, "-3 MB"),
    ],
)
def test_formatted_size(size, expected):
    assert formatted_size(size) == expected
