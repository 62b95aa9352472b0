import pytest

from status import OPTIMAL, TOO_DRY, TOO_WET, classify


@pytest.mark.parametrize(
    "moisture,expected",
    [
        (29.9, TOO_DRY),
        (30.0, OPTIMAL),
        (59.9, OPTIMAL),
        (60.0, TOO_WET),
    ],
)
def test_boundaries(moisture, expected):
    assert classify(moisture) == expected


def test_labels_and_severities():
    assert classify(10) == ("Too Dry", "critical", "DRY")
    assert classify(45) == ("Optimal", "healthy", "GOOD")
    assert classify(80) == ("Too Wet", "warning", "WET")


def test_out_of_range_values_are_not_clamped():
    assert classify(-5).severity == "critical"
    assert classify(150).severity == "warning"
