import pytest

from matfx.transport.step_limits import NO_LIMIT, StepLimits, StepLimitType


def test_empty_limits():
    limits = StepLimits()
    assert limits.lowest_limit() == (None, NO_LIMIT)
    assert limits.get_limit(StepLimitType.PLANE) == NO_LIMIT


def test_lowest_limit_wins():
    limits = StepLimits()
    limits.set_limit(StepLimitType.S_MAX, 25.)
    limits.set_limit(StepLimitType.BOUNDARY, 3.)
    limits.set_limit(StepLimitType.FIELD_CURVATURE, 7.)

    assert limits.lowest_limit() == (StepLimitType.BOUNDARY, 3.)
    limits.remove_limit(StepLimitType.BOUNDARY)
    assert limits.lowest_limit_value() == 7.


def test_magnitudes_with_separate_sign():
    limits = StepLimits(step_sign=-1.)
    limits.set_limit(StepLimitType.S_MAX, -25.)

    assert limits.get_limit(StepLimitType.S_MAX) == 25.
    assert limits.lowest_limit_signed_value() == -25.


def test_overwrite_and_reset():
    limits = StepLimits(step_sign=-1.)
    limits.set_limit(StepLimitType.S_MAX, 25.)
    limits.set_limit(StepLimitType.S_MAX, 40.)
    assert limits.get_limit(StepLimitType.S_MAX) == 40.

    limits.reset()
    assert StepLimitType.S_MAX not in limits
    assert limits.step_sign == 1.


@pytest.mark.parametrize("sign, expected", [(0., 1.), (3., 1.), (-0.5, -1.)])
def test_step_sign_normalized(sign, expected):
    assert StepLimits(step_sign=sign).step_sign == expected
