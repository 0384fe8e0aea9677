from __future__ import annotations

from contact_discovery.geo import (
    apply_geo_plausibility,
    is_au_nz_region,
    region_country_code,
)
from contact_discovery.models import PHONE, ConsolidatedFieldRecord


def _phone(value: str, confidence: float) -> ConsolidatedFieldRecord:
    return ConsolidatedFieldRecord(channel=PHONE, value=value, confidence=confidence, sources=["apollo"])


def test_region_detection() -> None:
    assert is_au_nz_region("Sydney, NSW")
    assert is_au_nz_region("Australia")
    assert is_au_nz_region("Auckland")
    assert not is_au_nz_region("Austin, Texas")
    assert not is_au_nz_region(None)

    assert region_country_code("Wellington, New Zealand") == "NZ"
    assert region_country_code("Melbourne") == "AU"
    assert region_country_code("London") is None


def test_national_landline_counts_as_local() -> None:
    phones = [_phone("0290000000", 0.7), _phone("+61 2 9000 0000", 0.8)]

    result = apply_geo_plausibility(phones, "Sydney")

    assert [record.confidence for record in result] == [0.8, 0.7]
    assert [record.non_local for record in result] == [False, False]


def test_uk_number_down_weighted_for_australian_subject() -> None:
    phones = [_phone("+44 20 7946 0991", 0.85)]

    result = apply_geo_plausibility(phones, "Australia")

    assert result[0].confidence == 0.55
    assert result[0].non_local is True


def test_local_numbers_untouched_and_list_resorted() -> None:
    phones = [_phone("+1 415 555 0100", 0.9), _phone("0412 345 678", 0.8), _phone("+64 21 123 4567", 0.7)]

    result = apply_geo_plausibility(phones, "Sydney")

    assert len(result) == 3
    assert [record.value for record in result] == ["0412 345 678", "+64 21 123 4567", "+1 415 555 0100"]
    assert result[-1].confidence == 0.6
    assert [record.non_local for record in result] == [False, False, True]


def test_floor_never_raises_confidence() -> None:
    phones = [_phone("+1 415 555 0100", 0.3), _phone("+1 415 555 0101", 0.05)]

    result = apply_geo_plausibility(phones, "Australia")

    assert [record.confidence for record in result] == [0.1, 0.05]


def test_no_op_outside_au_nz() -> None:
    phones = [_phone("+44 20 7946 0991", 0.85)]

    result = apply_geo_plausibility(phones, "London, UK")

    assert result[0].confidence == 0.85
    assert result[0].non_local is False
    assert apply_geo_plausibility([_phone("+44 20 7946 0991", 0.85)], None)[0].confidence == 0.85
