"""Shared type aliases and sentinels."""

from enum import Enum
from typing import Literal

ExportStatus = Literal["all", "completed", "incomplete"]
DateRange = Literal[5, 7, 14, 30, "all"]


class _Unset(Enum):
    UNSET = "UNSET"


# Distinguishes "leave the field alone" from an explicit value in partial updates.
UNSET: Literal[_Unset.UNSET] = _Unset.UNSET
Unset = Literal[_Unset.UNSET]
