import pytest

from downpour.utils import elapsed_ms, now, parse_header, parse_headers


def test_parse_header_strips_whitespace():
    assert parse_header("  Authorization :  Bearer abc ") == ("Authorization", "Bearer abc")


def test_parse_header_keeps_colons_in_value():
    assert parse_header("Referer: http://x:8080/") == ("Referer", "http://x:8080/")


@pytest.mark.parametrize("raw", ["no-colon", ": value", ""])
def test_parse_header_rejects_malformed(raw):
    with pytest.raises(ValueError):
        parse_header(raw)


def test_parse_headers_last_write_wins():
    assert parse_headers(["A: 1", "B: 2", "A: 3"]) == {"A": "3", "B": "2"}
    assert parse_headers(None) == {}


def test_elapsed_ms_is_non_negative():
    assert elapsed_ms(now()) >= 0
