# status.py
from typing import NamedTuple

DRY_BELOW = 30.0
WET_FROM = 60.0


class MoistureStatus(NamedTuple):
    label: str
    severity: str
    short: str


TOO_DRY = MoistureStatus("Too Dry", "critical", "DRY")
OPTIMAL = MoistureStatus("Optimal", "healthy", "GOOD")
TOO_WET = MoistureStatus("Too Wet", "warning", "WET")


def classify(moisture: float) -> MoistureStatus:
    """
    Maps soil moisture (%) to one of three bands.
    No clamping: negative or >100 readings still land in DRY / WET.
    """
    if moisture < DRY_BELOW:
        return TOO_DRY
    if moisture < WET_FROM:
        return OPTIMAL
    return TOO_WET
