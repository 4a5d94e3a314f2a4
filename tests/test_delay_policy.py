import pytest

from login_throttle.services.delay_policy import DEFAULT_TIERS, DelayPolicy, ONE_WEEK_SECONDS


def test_default_policy_has_three_tiers() -> None:
    policy = DelayPolicy()
    assert [policy.delay(n) for n in range(5)] == [0, 0, 0, 0, 0]
    assert [policy.delay(n) for n in range(5, 10)] == [20] * 5
    assert policy.delay(10) == ONE_WEEK_SECONDS == 604800
    assert policy.delay(10_000) == 604800


def test_default_policy_is_non_decreasing() -> None:
    policy = DelayPolicy(DEFAULT_TIERS)
    delays = [policy.delay(n) for n in range(50)]
    assert delays == sorted(delays)


def test_custom_tiers_override_defaults() -> None:
    policy = DelayPolicy([(3, 1), (6, 60), (9, 3600)])
    assert policy.delay(2) == 0
    assert policy.delay(3) == 1
    assert policy.delay(8) == 60
    assert policy.delay(9) == 3600


def test_empty_policy_never_delays() -> None:
    policy = DelayPolicy([])
    assert policy.delay(100) == 0
    assert policy.is_top_tier(100) is False


def test_top_tier_detection() -> None:
    policy = DelayPolicy()
    assert policy.is_top_tier(9) is False
    assert policy.is_top_tier(10) is True


@pytest.mark.parametrize(
    "tiers",
    [
        [(5, 20), (5, 30)],
        [(10, 20), (5, 30)],
        [(5, 60), (10, 20)],
        [(0, 20)],
        [(5, -1)],
    ],
)
def test_invalid_tiers_are_rejected(tiers) -> None:
    with pytest.raises(ValueError):
        DelayPolicy(tiers)
