import pytest

from abstats.models import ConfidenceInterval
from abstats.significance import (
    ALPHA_Z,
    CONFIDENCE_Z,
    apply_bonferroni_correction,
    calculate_confidence_interval,
    calculate_p_value,
    calculate_power,
    critical_value,
)


def test_p_value_at_zero_is_one():
    assert calculate_p_value(0) == pytest.approx(1.0, abs=1e-6)


def test_p_value_reference():
    assert calculate_p_value(1.96) == pytest.approx(0.05, abs=1e-3)
    assert calculate_p_value(2.1027) == pytest.approx(0.036, abs=1e-3)


def test_p_value_is_two_tailed():
    assert calculate_p_value(-2.5) == pytest.approx(calculate_p_value(2.5))


def test_p_value_non_increasing_in_abs_z():
    zs = [0, 0.25, 0.5, 1, 1.5, 2, 2.5, 3, 4, 6]
    ps = [calculate_p_value(z) for z in zs]
    assert all(a >= b for a, b in zip(ps, ps[1:]))


def test_confidence_interval_brackets_difference():
    ci = calculate_confidence_interval(1000, 100, 1000, 130)
    assert ci.lower < 0.03 < ci.upper
    assert ci.lower > 0
    # 1.96 * sqrt(.1*.9/1000 + .13*.87/1000)
    assert ci.upper - ci.lower == pytest.approx(2 * 1.96 * 0.014251, abs=1e-4)


def test_confidence_interval_widens_with_level():
    narrow = calculate_confidence_interval(1000, 100, 1000, 130, 0.90)
    wide = calculate_confidence_interval(1000, 100, 1000, 130, 0.99)
    assert (wide.upper - wide.lower) > (narrow.upper - narrow.lower)


def test_confidence_interval_unknown_level_uses_95():
    default = calculate_confidence_interval(1000, 100, 1000, 130, 0.95)
    odd = calculate_confidence_interval(1000, 100, 1000, 130, 0.93)
    assert odd == default


def test_confidence_interval_empty_arm():
    assert calculate_confidence_interval(0, 0, 1000, 130) == ConfidenceInterval(0.0, 0.0)
    assert calculate_confidence_interval(1000, 100, 0, 0) == ConfidenceInterval(0.0, 0.0)


def test_power_is_bounded():
    for args in [(1000, 100, 1000, 130), (50, 5, 50, 6), (100000, 10000, 100000, 11000)]:
        assert 0.0 <= calculate_power(*args) <= 1.0


def test_power_grows_with_sample():
    small = calculate_power(1000, 100, 1000, 130)
    large = calculate_power(10000, 1000, 10000, 1300)
    assert large > small


def test_power_empty_arm_is_zero():
    assert calculate_power(0, 0, 1000, 130) == 0.0


def test_power_alpha_lookup():
    strict = calculate_power(1000, 100, 1000, 130, alpha=0.01)
    loose = calculate_power(1000, 100, 1000, 130, alpha=0.10)
    assert strict < calculate_power(1000, 100, 1000, 130) < loose


def test_critical_value_default_branch():
    assert critical_value(CONFIDENCE_Z, 0.95, 1.96) == 1.96
    assert critical_value(ALPHA_Z, 0.2, 1.645) == 1.645


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        CONFIDENCE_Z[0.8] = 1.28


def test_bonferroni_reference():
    assert apply_bonferroni_correction([0.01, 0.03, 0.04], 0.05) == [True, False, False]


def test_bonferroni_single_comparison_is_uncorrected():
    assert apply_bonferroni_correction([0.049]) == [True]


def test_bonferroni_empty():
    assert apply_bonferroni_correction([]) == []
