"""
Unit conversions between human values and mixer wire values.

The mixer stores almost every control as a normalized 0.0-1.0 float. Each
EncodingRule clamps the human value to its documented range, then maps it
to the wire; the inverse mapping decodes query replies.

Reference scale for faders and sends:
    0.0 = -inf dB, 0.75 = 0 dB (unity), 1.0 = +10 dB
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class EncodingRule:
    """Invertible mapping for one value domain.

    Attributes:
        name: Rule identifier used in logs
        encode: Human value (already clamped) -> wire value
        decode: Wire value -> human value
        low, high: Human range for clamping (None = no clamping)
        placeholder: Value returned when the family cannot query this control
    """
    name: str
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]
    low: Optional[float] = None
    high: Optional[float] = None
    placeholder: Any = 0.0

    def clamp(self, value):
        if self.low is None or self.high is None:
            return value
        return max(self.low, min(self.high, value))

    def to_wire(self, value):
        return self.encode(self.clamp(value))

    def from_wire(self, value):
        return self.decode(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ============================================================================
# FREQUENCY CURVES
# ============================================================================

FREQ_MIN_HZ = 20.0
FREQ_MAX_HZ = 20000.0

LOW_CUT_MIN_HZ = 20.0
LOW_CUT_MAX_HZ = 400.0

# The X-Air quantizes low-cut steps and rounds down below 250 Hz; adding
# 1 Hz before encoding lands on the requested step. Measured, not derived.
LOW_CUT_NUDGE_HZ = 1.0
LOW_CUT_NUDGE_BELOW_HZ = 250.0


def hz_to_log(frequency: float, low: float = FREQ_MIN_HZ, high: float = FREQ_MAX_HZ) -> float:
    """Map a frequency to 0..1 on a logarithmic scale spanning [low, high]."""
    frequency = clamp(frequency, low, high)
    return (math.log10(frequency) - math.log10(low)) / (math.log10(high) - math.log10(low))


def log_to_hz(value: float, low: float = FREQ_MIN_HZ, high: float = FREQ_MAX_HZ) -> float:
    """Inverse of hz_to_log()."""
    return low * math.pow(10, value * (math.log10(high) - math.log10(low)))


def encode_low_cut(frequency: float) -> float:
    """X-Air low-cut encoding with the +1 Hz quantization nudge below 250 Hz."""
    hz = clamp(frequency, LOW_CUT_MIN_HZ, LOW_CUT_MAX_HZ)
    if hz < LOW_CUT_NUDGE_BELOW_HZ:
        hz = min(LOW_CUT_MAX_HZ, hz + LOW_CUT_NUDGE_HZ)
    return hz_to_log(hz, LOW_CUT_MIN_HZ, LOW_CUT_MAX_HZ)


# ============================================================================
# FX SEND CALIBRATION
# ============================================================================

# Fitted against the dB readout of the X-Air Edit app:
#     dB ~= 66 * log10(level) + 8
SEND_DB_SLOPE = 66.0
SEND_DB_OFFSET = 8.0
SEND_DB_FLOOR = -100.0


def db_to_send_level(db: float) -> float:
    """Convert a send level in dB to the wire level (0..1)."""
    if db <= SEND_DB_FLOOR:
        return 0.0
    return clamp(math.pow(10, (db - SEND_DB_OFFSET) / SEND_DB_SLOPE), 0.0, 1.0)


def send_level_to_db(level: float) -> float:
    """Display value for a wire send level; -inf at 0."""
    if level <= 0:
        return float("-inf")
    return SEND_DB_SLOPE * math.log10(level) + SEND_DB_OFFSET


# ============================================================================
# RULES
# ============================================================================

def _integer_rule(name: str, low: int, high: int) -> EncodingRule:
    return EncodingRule(
        name=name,
        encode=lambda value: int(round(value)),
        decode=lambda value: int(value),
        low=low,
        high=high,
        placeholder=0,
    )


FADER = EncodingRule(
    name="fader",
    encode=float,
    decode=float,
    low=0.0,
    high=1.0,
)

NORMALIZED = EncodingRule(
    name="normalized",
    encode=float,
    decode=float,
    low=0.0,
    high=1.0,
)

# Wire "on" means the signal passes, so 1 = unmuted
MUTE = EncodingRule(
    name="mute",
    encode=lambda muted: 0 if muted else 1,
    decode=lambda value: int(value) == 0,
    placeholder=False,
)

ON_OFF = EncodingRule(
    name="on_off",
    encode=lambda enabled: 1 if enabled else 0,
    decode=lambda value: int(value) == 1,
    placeholder=False,
)

PAN = EncodingRule(
    name="pan",
    encode=lambda pan: (pan + 1) / 2,
    decode=lambda value: value * 2 - 1,
    low=-1.0,
    high=1.0,
)

EQ_GAIN = EncodingRule(
    name="eq_gain",
    encode=lambda gain: (gain + 15) / 30,
    decode=lambda value: value * 30 - 15,
    low=-15.0,
    high=15.0,
)

FREQUENCY = EncodingRule(
    name="frequency",
    encode=hz_to_log,
    decode=log_to_hz,
    low=FREQ_MIN_HZ,
    high=FREQ_MAX_HZ,
)

GATE_THRESHOLD = EncodingRule(
    name="gate_threshold",
    encode=lambda threshold: (threshold + 80) / 80,
    decode=lambda value: value * 80 - 80,
    low=-80.0,
    high=0.0,
)

COMP_THRESHOLD = EncodingRule(
    name="comp_threshold",
    encode=lambda threshold: (threshold + 60) / 60,
    decode=lambda value: value * 60 - 60,
    low=-60.0,
    high=0.0,
)

COMP_RATIO = EncodingRule(
    name="comp_ratio",
    encode=lambda ratio: (ratio - 1) / 19,
    decode=lambda value: value * 19 + 1,
    low=1.0,
    high=20.0,
)

LOW_CUT = EncodingRule(
    name="low_cut",
    encode=encode_low_cut,
    decode=lambda value: log_to_hz(value, LOW_CUT_MIN_HZ, LOW_CUT_MAX_HZ),
    low=LOW_CUT_MIN_HZ,
    high=LOW_CUT_MAX_HZ,
)

LOW_CUT_PLAIN = EncodingRule(
    name="low_cut_plain",
    encode=lambda hz: hz_to_log(hz, LOW_CUT_MIN_HZ, LOW_CUT_MAX_HZ),
    decode=lambda value: log_to_hz(value, LOW_CUT_MIN_HZ, LOW_CUT_MAX_HZ),
    low=LOW_CUT_MIN_HZ,
    high=LOW_CUT_MAX_HZ,
)

TEXT = EncodingRule(
    name="text",
    encode=str,
    decode=str,
    placeholder="",
)

EQ_TYPE = _integer_rule("eq_type", 0, 5)
COLOR = _integer_rule("color", 0, 15)
SCENE_INDEX = _integer_rule("scene_index", 0, 100)
X32_SOURCE = _integer_rule("x32_source", 0, 64)
XAIR_SOURCE = _integer_rule("xair_source", 0, 15)
