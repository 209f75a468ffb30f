"""Unit tests for math_utils."""

import pytest

from custom_components.nomor.utils.math_utils import calculate_percentage, round_coins


def test_round_coins_removes_float_drift() -> None:
    """Repeated 0.2 credits stay exact."""
    total = 0.0
    for _ in range(3):
        total = round_coins(total + 0.2)
    assert total == 0.6
    assert round_coins(10.456) == 10.46


@pytest.mark.parametrize(
    ("current", "target", "expected"),
    [
        (9, 15, 60),
        (15, 15, 100),
        (0, 15, 0),
        (1, 8, 13),
        (1, 3, 33),
        (2, 3, 67),
        (3, 0, 0),
    ],
)
def test_calculate_percentage(current: int, target: int, expected: int) -> None:
    """Percentages round halves up and guard a zero target."""
    assert calculate_percentage(current, target) == expected
