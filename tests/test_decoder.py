import json

import pytest

from pushstream_exporter.decoder import (
    NUMERIC_SCHEMA,
    STRING_SCHEMA,
    ChannelRecord,
    decode_status,
)
from pushstream_exporter.exceptions import CastError, DecodeError


def test_decode_numeric_schema(numeric_body):
    status = decode_status(numeric_body)

    assert status.schema == NUMERIC_SCHEMA
    assert status.total_channels == 2
    assert status.channels == (
        ChannelRecord(name="a", published_messages=10, stored_messages=3, subscribers=5),
        ChannelRecord(name="b", published_messages=1, stored_messages=0, subscribers=2),
    )


def test_decode_string_schema_matches_numeric(numeric_body, string_body):
    numeric = decode_status(numeric_body)
    legacy = decode_status(string_body)

    assert legacy.schema == STRING_SCHEMA
    assert legacy.total_channels == numeric.total_channels
    assert legacy.channels == numeric.channels


def test_decode_accepts_text():
    status = decode_status('{"channels": 0, "infos": []}')
    assert status.total_channels == 0
    assert status.channels == ()


def test_decode_ignores_extra_fields():
    body = json.dumps({
        "hostname": "nginx-1",
        "time": "2026-10-18T10:00:00",
        "channels": 1,
        "wildcard_channels": 0,
        "uptime": 120,
        "infos": [{"channel": "x", "published_messages": 4, "stored_messages": 4,
                   "subscribers": 1, "by_worker": []}],
    })
    status = decode_status(body)
    assert status.channels[0].name == "x"


def test_decode_missing_fields_default_to_zero():
    status = decode_status('{"infos": [{"channel": "x"}]}')
    assert status.total_channels == 0
    assert status.channels[0] == ChannelRecord("x", 0, 0, 0)


@pytest.mark.parametrize("body", [
    '{"channels": 1}',
    '{"channels": 1, "infos": null}',
])
def test_decode_without_infos(body):
    assert decode_status(body).channels == ()


@pytest.mark.parametrize("body", [
    b"",
    b"not json",
    b'{"channels": 2, "infos": [',
    b"[1, 2, 3]",
    b'"channels"',
    b"\xff\xfe\x00",
    "[" * 100000 + "]" * 100000,
    '{"channels": ' + "[" * 100000 + "]" * 100000 + "}",
])
def test_decode_malformed(body):
    with pytest.raises(DecodeError):
        decode_status(body)


def test_decode_non_numeric_top_level_count():
    with pytest.raises(CastError, match="Field 'channels'"):
        decode_status('{"channels": "not-a-number", "infos": []}')


@pytest.mark.parametrize("value", ['"5"', "5.5", "true", "null", "-1", "[]"])
def test_decode_numeric_schema_is_strict(value):
    body = '{"channels": 1, "infos": [{"channel": "a", "subscribers": %s}]}' % value
    with pytest.raises(CastError, match="Field 'a.subscribers'"):
        decode_status(body)


@pytest.mark.parametrize("value", ['"five"', '"-1"', '" 5"', '""', '"1.5"'])
def test_decode_string_schema_keeps_bad_channel_count_unknown(value):
    body = '{"channels": "1", "infos": [{"channel": "a", "subscribers": %s, "stored_messages": "2"}]}' % value
    status = decode_status(body)

    assert status.channels[0].subscribers is None
    assert status.channels[0].stored_messages == 2


def test_decode_string_schema_accepts_native_numbers():
    body = '{"channels": "1", "infos": [{"channel": "a", "subscribers": 3}]}'
    assert decode_status(body).channels[0].subscribers == 3


@pytest.mark.parametrize("value", ["{}", "[]", "1.5", "false"])
def test_decode_string_schema_rejects_non_string_garbage(value):
    body = '{"channels": "1", "infos": [{"channel": "a", "subscribers": %s}]}' % value
    with pytest.raises(CastError):
        decode_status(body)


@pytest.mark.parametrize("body, message", [
    ('{"channels": 1, "infos": {"channel": "a"}}', "Field 'infos' must be a list"),
    ('{"channels": 1, "infos": ["a"]}', "Channel entry must be an object"),
    ('{"channels": 1, "infos": [{"subscribers": 1}]}', "no usable name"),
    ('{"channels": 1, "infos": [{"channel": ""}]}', "no usable name"),
    ('{"channels": 1, "infos": [{"channel": 7}]}', "no usable name"),
])
def test_decode_bad_structure(body, message):
    with pytest.raises(DecodeError, match=message):
        decode_status(body)


def test_decode_keeps_duplicate_channels_in_order():
    body = json.dumps({"channels": 2, "infos": [
        {"channel": "dup", "subscribers": 1},
        {"channel": "other", "subscribers": 2},
        {"channel": "dup", "subscribers": 3},
    ]})
    names = [c.name for c in decode_status(body).channels]
    assert names == ["dup", "other", "dup"]


def test_decode_largest_count():
    body = '{"channels": 9223372036854775807, "infos": [{"channel": "a", "subscribers": 9223372036854775807}]}'
    status = decode_status(body)
    assert status.total_channels == 2 ** 63 - 1
    assert status.channels[0].subscribers == 2 ** 63 - 1


@pytest.mark.parametrize("body", [
    '{"channels": 9223372036854775808, "infos": []}',
    '{"channels": 1, "infos": [{"channel": "a", "subscribers": %s}]}' % ("9" * 400),
    '{"channels": "9223372036854775808", "infos": []}',
    '{"channels": "%s", "infos": []}' % ("9" * 5000),
])
def test_decode_count_out_of_range(body):
    with pytest.raises(CastError):
        decode_status(body)


@pytest.mark.parametrize("value", ["9223372036854775808", "9" * 400])
def test_decode_string_schema_keeps_out_of_range_channel_count_unknown(value):
    body = '{"channels": "1", "infos": [{"channel": "a", "subscribers": "%s", "stored_messages": "2"}]}' % value
    status = decode_status(body)

    assert status.channels[0].subscribers is None
    assert status.channels[0].stored_messages == 2
