from __future__ import annotations

import pytest

from shopwatch.domain.errors import InvalidIdentifier, ValidationError
from shopwatch.security.identifiers import (
    SQL_KEYWORDS,
    detect_injection_patterns,
    find_suspicious_values,
    validate_identifier,
)


@pytest.mark.parametrize(
    "identifier",
    ["oxorder", "OXORDER", "_private", "osc_payment_contract", "t1", "a", "OXID_2", "selection", "fromage"],
)
def test_accepts_plain_identifiers(identifier: str) -> None:
    assert validate_identifier(identifier) == identifier


@pytest.mark.parametrize(
    "identifier",
    ["1table", "ox-order", "ox order", "oxorder;", "ox.order", "`oxorder`", '"oxorder"', "oxé", "t\n"],
)
def test_rejects_malformed_identifiers(identifier: str) -> None:
    with pytest.raises(InvalidIdentifier, match="Only alphanumeric characters and underscores allowed"):
        validate_identifier(identifier, "table name")


@pytest.mark.parametrize("keyword", sorted(SQL_KEYWORDS))
def test_rejects_every_reserved_keyword_case_insensitively(keyword: str) -> None:
    for spelling in (keyword, keyword.lower(), keyword.capitalize()):
        with pytest.raises(InvalidIdentifier, match="SQL keyword not allowed as field name"):
            validate_identifier(spelling, "field name")


def test_rejects_empty_and_non_string() -> None:
    with pytest.raises(InvalidIdentifier, match="Table name cannot be empty"):
        validate_identifier("", "table name")
    with pytest.raises(InvalidIdentifier, match="WHERE clause field must be a string"):
        validate_identifier(42, "WHERE clause field")


def test_invalid_identifier_is_a_validation_error() -> None:
    assert issubclass(InvalidIdentifier, ValidationError)


def test_error_message_names_role_and_identifier() -> None:
    with pytest.raises(InvalidIdentifier) as excinfo:
        validate_identifier("ox-order", "table name")
    assert str(excinfo.value).startswith('Invalid table name format: "ox-order".')


@pytest.mark.parametrize(
    "value",
    [
        "x'; DROP TABLE oxorder",
        "1 UNION SELECT password FROM oxuser",
        "abc /* hidden */",
        "admin' --",
        "1 OR 1=1",
        "' or 'a'='a'",
    ],
)
def test_detects_injection_shaped_values(value: str) -> None:
    assert detect_injection_patterns(value)


@pytest.mark.parametrize("value", ["ORDERFOLDER_NEW", "committed", "O'Brien", "100.00", "a-b-c"])
def test_ignores_ordinary_values(value: str) -> None:
    assert not detect_injection_patterns(value)


def test_find_suspicious_values_walks_nested_payload_and_truncates() -> None:
    long_attack = "1 UNION SELECT " + "x" * 200
    payload = {
        "assumption": {
            "oxorder.OXFOLDER": "ORDERFOLDER_NEW",
            "where": {"OXID": long_attack, "OXUSERID": "u-1"},
        },
        "notes": ["fine", "'; DELETE FROM oxuser"],
    }

    found = find_suspicious_values(payload)

    assert found == [long_attack[:100], "'; DELETE FROM oxuser"]
