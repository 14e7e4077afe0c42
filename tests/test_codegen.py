"""Tests for code and expiry generation."""

import pytest

from otp_auth.exceptions import ClockError
from otp_auth.services.codegen import (
    CODE_MAX,
    CODE_MIN,
    compute_expiry,
    current_timestamp,
    generate_code,
)


def test_generate_code_is_six_digits():
    codes = {generate_code() for _ in range(500)}
    assert all(CODE_MIN <= code <= CODE_MAX for code in codes)
    assert all(len(str(code)) == 6 for code in codes)
    # Uniform draw over 900k values; 500 draws should be almost all distinct
    assert len(codes) > 450


def test_compute_expiry_default_window():
    assert compute_expiry(0, 10) == 600
    assert compute_expiry(1_700_000_000, 10) == 1_700_000_600


@pytest.mark.parametrize("minutes", [0, -1, -10])
def test_compute_expiry_rejects_non_positive_window(minutes):
    with pytest.raises(ClockError):
        compute_expiry(1_700_000_000, minutes)


def test_current_timestamp_is_whole_seconds():
    assert isinstance(current_timestamp(), int)
