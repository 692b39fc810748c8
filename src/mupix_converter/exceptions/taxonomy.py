"""Diagnostic codes for conversion outcomes.

Code Convention:
    MC1xx - Input/event structure
    MC2xx - Hit validation
    MC3xx - Frame decoding
    MC4xx - Collection insertion
"""

from __future__ import annotations

from enum import Enum


class DiagnosticCode(Enum):
    """Structured codes attached to conversion diagnostics."""

    # Input errors (MC1xx)
    MC100 = "MC100"  # Not a raw data event
    MC101 = "MC101"  # Begin-of-run event during conversion
    MC102 = "MC102"  # End-of-run event during conversion
    MC103 = "MC103"  # Trigger id below quick-look threshold
    MC104 = "MC104"  # Event carries no raw blocks

    # Hit errors (MC2xx)
    MC200 = "MC200"  # Hit outside sensor geometry
    MC201 = "MC201"  # Zero/zero decoder artifact suppressed

    # Decode errors (MC3xx)
    MC300 = "MC300"  # Frame buffer could not be decoded

    # Collection errors (MC4xx)
    MC400 = "MC400"  # Collection already existed
    MC401 = "MC401"  # Merged record is empty


class Severity(Enum):
    """Diagnostic severity, mapped onto logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
