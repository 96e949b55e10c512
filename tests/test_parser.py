import pytest

from fastnetmon_exporter.errors import DecodeError, ParseError, UpstreamNotSuccessful
from fastnetmon_exporter.models import BlockedEntry
from fastnetmon_exporter.parser import parse_blocked_entries


def test_parse_success_payload():
    body = b'{"success":true,"values":[{"uuid":"u1","ip":"1.2.3.4"}]}'

    assert parse_blocked_entries(body) == [BlockedEntry(address="1.2.3.4", identifier="u1")]


def test_parse_keeps_upstream_order_and_duplicates():
    body = (b'{"success":true,"values":['
            b'{"uuid":"u2","ip":"10.0.0.2"},'
            b'{"uuid":"u1","ip":"10.0.0.1"},'
            b'{"uuid":"u2","ip":"10.0.0.2"}]}')

    entries = parse_blocked_entries(body)
    assert [entry.key for entry in entries] == [
        ("10.0.0.2", "u2"), ("10.0.0.1", "u1"), ("10.0.0.2", "u2")
    ]


def test_unsuccessful_response_is_rejected_even_with_values():
    body = b'{"success":false,"values":[{"uuid":"u1","ip":"1.2.3.4"}]}'

    with pytest.raises(UpstreamNotSuccessful):
        parse_blocked_entries(body)


def test_missing_success_flag_counts_as_unsuccessful():
    with pytest.raises(UpstreamNotSuccessful):
        parse_blocked_entries(b'{"values":[]}')


@pytest.mark.parametrize("body", [
    b'',
    b'not json',
    b'{"success":true,"values":[',
    b'{"success":"yes","values":[]}',
    b'{"success":true,"values":{"uuid":"u1"}}',
    b'{"success":true,"values":[{"uuid":"u1","ip":1234}]}',
    b'[]',
])
def test_malformed_payload_is_a_decode_error(body):
    with pytest.raises(DecodeError):
        parse_blocked_entries(body)


def test_parse_errors_share_the_parse_stage():
    with pytest.raises(ParseError) as exc_info:
        parse_blocked_entries(b'not json')
    assert exc_info.value.stage == "parse"


def test_empty_and_missing_fields_pass_through():
    body = b'{"success":true,"values":[{"uuid":"","ip":""},{"ip":"1.2.3.4"},{}]}'

    entries = parse_blocked_entries(body)
    assert [entry.key for entry in entries] == [("", ""), ("1.2.3.4", ""), ("", "")]


def test_null_or_missing_values_is_an_empty_list():
    assert parse_blocked_entries(b'{"success":true,"values":null}') == []
    assert parse_blocked_entries(b'{"success":true}') == []


def test_unknown_fields_are_ignored():
    body = b'{"success":true,"total":1,"values":[{"uuid":"u1","ip":"1.2.3.4","attack_details":{}}]}'

    assert parse_blocked_entries(body)[0].key == ("1.2.3.4", "u1")


def test_blocked_entry_is_immutable():
    entry = BlockedEntry(address="1.2.3.4", identifier="u1")
    with pytest.raises(Exception):
        entry.address = "5.6.7.8"


def test_null_element_becomes_an_empty_entry():
    body = b'{"success":true,"values":[null,{"uuid":"u1","ip":"1.2.3.4"}]}'

    entries = parse_blocked_entries(body)
    assert [entry.key for entry in entries] == [("", ""), ("1.2.3.4", "u1")]


def test_invalid_utf8_is_replaced_not_rejected():
    body = b'{"success":true,"values":[{"uuid":"u\xff","ip":"1.2.3.4"}]}'

    entries = parse_blocked_entries(body)
    assert entries == [BlockedEntry(address="1.2.3.4", identifier="u\ufffd")]
