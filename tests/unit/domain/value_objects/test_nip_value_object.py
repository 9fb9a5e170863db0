# tests/unit/domain/value_objects/test_nip_value_object.py
from __future__ import annotations

import pytest

from ceidg_api.domain.exceptions.ceidg import CompanyNotFound, InvalidNipFormat
from ceidg_api.domain.value_objects.nip import Nip


@pytest.mark.parametrize(
    "raw",
    ["1234567890", "123-456-78-90", " 123 456 78 90 ", "PL1234567890"],
)
def test_parse_strips_separators(raw: str) -> None:
    assert Nip.parse(raw).value == "1234567890"


@pytest.mark.parametrize("raw", ["", "123456789", "12345678901", "abcdefghij", None])
def test_parse_rejects_wrong_digit_count(raw: str | None) -> None:
    with pytest.raises(InvalidNipFormat) as ei:
        Nip.parse(raw)
    assert ei.value.code == "INVALID_NIP_FORMAT"


def test_invalid_format_is_a_not_found_signal() -> None:
    with pytest.raises(CompanyNotFound):
        Nip.parse("12")


def test_constructor_requires_canonical_form() -> None:
    with pytest.raises(InvalidNipFormat):
        Nip("123-456-78-90")
    assert str(Nip("0000000000")) == "0000000000"


def test_non_ascii_digits_are_dropped() -> None:
    # Arabic-Indic digits are not [0-9] and do not count towards the length.
    with pytest.raises(InvalidNipFormat):
        Nip.parse("١٢٣٤٥٦٧٨٩٠")
