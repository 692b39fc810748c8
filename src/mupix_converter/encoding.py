"""Encoding of triggers and ToT entries into tagged 64-bit words.

A tagged word holds a 48-bit timestamp in its upper bits and one byte of
payload (tag or pulse length) in its low byte:

    word = (timestamp & 0xFFFFFFFFFFFF) << 8 | (payload & 0xFF)

Triggers are carried as ``(timestamp, tag)`` pairs, exactly as read from the
frame. ToT entries are packed into a word up front and stored under the fixed
label 0x2, so readers tell them apart from real triggers by label, not by
value range. Masking is silent: hardware values wider than their field are
truncated, never rejected.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import LABEL_MASK_16, LOW_BYTE_MASK, TIMESTAMP_MASK_48, TOT_LABEL
from .models import TimeOverThreshold, Trigger


@dataclass(frozen=True)
class EncodedTrigger:
    """An external-trigger entry: 64-bit timestamp field and 16-bit label."""

    timestamp: int
    label: int
    packed: bool = False

    @property
    def is_tot(self) -> bool:
        return self.packed and self.label == TOT_LABEL

    @property
    def value(self) -> int:
        """The tagged 64-bit word this entry stands for."""
        if self.packed:
            return self.timestamp
        return pack_word(self.timestamp, self.label)


def pack_word(timestamp: int, payload: int) -> int:
    """Pack a 48-bit timestamp and a one-byte payload into a 64-bit word."""
    return (timestamp & TIMESTAMP_MASK_48) << 8 | (payload & LOW_BYTE_MASK)


def unpack_word(word: int) -> tuple[int, int]:
    """Split a tagged word into its 48-bit timestamp and low-byte payload."""
    return (word >> 8) & TIMESTAMP_MASK_48, word & LOW_BYTE_MASK


def encode_trigger(trigger: Trigger) -> EncodedTrigger:
    return EncodedTrigger(timestamp=trigger.timestamp, label=trigger.tag & LABEL_MASK_16)


def encode_tot(tot: TimeOverThreshold) -> EncodedTrigger:
    return EncodedTrigger(
        timestamp=pack_word(tot.timestamp, tot.length), label=TOT_LABEL, packed=True
    )
