from __future__ import annotations

import pytest

from pdfalvo.engine_config import BYTES_PER_KB, BYTES_PER_MB
from pdfalvo.exceptions import InvalidTargetSize, UnsupportedFileType
from pdfalvo.targets import (
    clamp_target_bytes,
    compute_bounds,
    normalize_target_unit,
    parse_target_size,
    sniff_pdf,
    validate_pdf_candidate,
)

SIZES = [1, 2, 3, 4, 7, 10, 99, 1000, 12_345, 10_000_000, 987_654_321]


def test_bounds_for_1000_bytes() -> None:
    bounds = compute_bounds(1000)
    assert bounds.min_bytes == 200
    assert bounds.max_bytes == 900


def test_bounds_never_collapse_below_one_byte() -> None:
    bounds = compute_bounds(1)
    assert bounds.min_bytes == 1
    assert bounds.max_bytes == 1


@pytest.mark.parametrize("size", SIZES)
def test_bounds_are_ordered_and_positive(size: int) -> None:
    bounds = compute_bounds(size)
    assert 1 <= bounds.min_bytes <= bounds.max_bytes


@pytest.mark.parametrize("size", SIZES)
@pytest.mark.parametrize("requested", [0, 1, 150, 500, 10**6, 10**12])
def test_clamp_always_lands_inside_bounds(size: int, requested: int) -> None:
    bounds = compute_bounds(size)
    assert bounds.min_bytes <= clamp_target_bytes(size, requested) <= bounds.max_bytes


def test_clamp_keeps_value_inside_range() -> None:
    assert clamp_target_bytes(1000, 500) == 500


def test_clamp_raises_tiny_target_to_minimum() -> None:
    assert clamp_target_bytes(1000, 1) == 200


def test_clamp_lowers_huge_target_to_maximum() -> None:
    assert clamp_target_bytes(1000, 10**6) == 900


@pytest.mark.parametrize("unit", ["kb", "mb", "qualquer"])
def test_empty_target_means_no_target(unit: str) -> None:
    parsed = parse_target_size("", unit)
    assert parsed.bytes == 0
    assert parsed.error is None


def test_blank_and_none_are_empty() -> None:
    assert parse_target_size("   ", "mb") == (0, None)
    assert parse_target_size(None, "kb") == (0, None)


@pytest.mark.parametrize("value", ["-1", "abc", "inf", "nan", "-0.5"])
def test_invalid_targets_report_error(value: str) -> None:
    parsed = parse_target_size(value, "kb")
    assert parsed.bytes == 0
    assert isinstance(parsed.error, InvalidTargetSize)


@pytest.mark.parametrize(
    ("value", "unit", "expected"),
    [
        ("1.5", "kb", 1536),
        ("2", "mb", 2 * BYTES_PER_MB),
        ("0,5", "mb", BYTES_PER_MB // 2),
        (" 10 ", "kb", 10 * BYTES_PER_KB),
        ("0.0001", "kb", 0),
        ("0", "mb", 0),
    ],
)
def test_parse_scales_by_unit(value: str, unit: str, expected: int) -> None:
    parsed = parse_target_size(value, unit)
    assert parsed.error is None
    assert parsed.bytes == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [("kb", "kb"), ("mb", "mb"), ("KB", "mb"), ("gb", "mb"), ("", "mb"), (None, "mb")],
)
def test_unknown_units_fall_back_to_megabytes(value, expected: str) -> None:
    assert normalize_target_unit(value) == expected


@pytest.mark.parametrize(
    ("name", "mime"),
    [
        ("relatorio.pdf", "application/pdf"),
        ("RELATORIO.PDF", ""),
        ("scan.pdf", "application/octet-stream"),
    ],
)
def test_pdf_candidates_are_accepted(name: str, mime: str) -> None:
    validate_pdf_candidate(name, mime)


@pytest.mark.parametrize(
    ("name", "mime"),
    [
        ("foto.png", "application/pdf"),
        ("relatorio.pdf", "image/png"),
        ("", ""),
    ],
)
def test_non_pdf_candidates_are_rejected(name: str, mime: str) -> None:
    with pytest.raises(UnsupportedFileType):
        validate_pdf_candidate(name, mime)


def test_sniff_counts_pages(text_pdf: bytes) -> None:
    assert sniff_pdf(text_pdf) == 3


def test_sniff_rejects_non_pdf_bytes() -> None:
    with pytest.raises(UnsupportedFileType):
        sniff_pdf(b"isto definitivamente nao e um pdf")
