# wsm_serial_bridge/protocol.py

import math
from typing import Dict, Optional

# ======================================================
# CONSTANTS
# ======================================================

BUF_IN_TIMEOUT_MS = 60
SPEED_RECEIVE_TIMEOUT_MS = 3000

# Sensor timer clock and prescaler
F_CPU = 3686400  # Hz
PSK = 64

MSG_SPEED = 0x1
MSG_VOLTAGE = 0x2

MSG_SPEED_INTERVAL = 0x81
MSG_SPEED_DISTANCE = 0x82

INTERVAL_NO_PULSES = 0xFFFF
VOLTAGE_REF = 4.587
ADC_RANGE = 1024

UINT32_MASK = 0xFFFFFFFF


# ======================================================
# FRAMING / CHECKSUM
# ======================================================

def frame_length(header: int) -> int:
    """
    Total frame length declared by a header byte,
    including the header itself and the trailing checksum.
    """
    return (header & 0x0F) + 2


def compute_checksum(data: bytes) -> int:
    """
    XOR of the low 7 bits of every byte.
    """
    cs = 0
    for b in data:
        cs ^= b & 0x7F
    return cs


def validate_frame(frame: bytes) -> bool:
    """
    A frame is valid when the checksum over all of its bytes,
    checksum byte included, is zero.
    """
    return compute_checksum(frame) == 0


def encode_frame(category: int, payload: bytes) -> bytes:
    """
    Build a sensor frame:

      [category<<4 | len(payload)] payload... [xor]
    """
    if not 0 <= category <= 0x7:
        raise ValueError("category must be 0..7")
    if len(payload) > 0x0F:
        raise ValueError("payload must be at most 15 bytes")

    body = bytes([(category << 4) | len(payload)]) + bytes(payload)
    return body + bytes([compute_checksum(body)])


# ======================================================
# FIELD CODEC
# ======================================================

def decode_interval(frame: bytes) -> int:
    return ((frame[2] & 0x03) << 14) | ((frame[3] & 0x7F) << 7) | (frame[4] & 0x7F)


def decode_distance(frame: bytes) -> int:
    return (
        ((frame[2] & 0x0F) << 28)
        | ((frame[3] & 0x7F) << 21)
        | ((frame[4] & 0x7F) << 14)
        | ((frame[5] & 0x7F) << 7)
        | (frame[6] & 0x7F)
    )


def decode_voltage(frame: bytes) -> int:
    return ((frame[1] & 0x07) << 7) | (frame[2] & 0x7F)


def is_battery_critical(frame: bytes) -> bool:
    return bool((frame[1] >> 6) & 0x1)


def speed_from_interval(interval: int, wheel_diameter: float,
                        scale: float, ticks_per_revolution: int) -> float:
    """
    Interval (timer ticks between wheel pulses) → speed in km/h.

    0xFFFF means the wheel is not turning.
    """
    if interval == INTERVAL_NO_PULSES or interval == 0:
        return 0.0
    return (
        (math.pi * wheel_diameter * F_CPU * 3.6 * scale / 1000)
        / (ticks_per_revolution * PSK * interval)
    )


def distance_from_ticks(ticks: int, wheel_diameter: float,
                        ticks_per_revolution: int) -> float:
    return (ticks * math.pi * wheel_diameter) / (1000 * ticks_per_revolution)


def voltage_from_raw(raw: int) -> float:
    return raw * VOLTAGE_REF / ADC_RANGE


# ======================================================
# DISPATCH
# ======================================================

def decode_frame(frame: bytes) -> Optional[Dict]:
    """
    Decode a validated frame into its raw fields.

    Expected:
      Speed   / Interval : [0x1n] [0x81] i2 i3 i4 ... [xor]
      Speed   / Distance : [0x1n] [0x82] d2 d3 d4 d5 d6 ... [xor]
      Voltage            : [0x2n] v1 v2 ... [xor]

    Unknown categories, unknown speed sub-types and frames too
    short for their layout return None.
    """
    if len(frame) < 2:
        return None

    category = (frame[0] >> 4) & 0x07

    if category == MSG_SPEED:
        sub_type = frame[1]

        if sub_type == MSG_SPEED_INTERVAL and len(frame) >= 5:
            return {
                "type": "interval",
                "interval": decode_interval(frame),
            }

        if sub_type == MSG_SPEED_DISTANCE and len(frame) >= 7:
            return {
                "type": "distance",
                "ticks": decode_distance(frame),
            }

        return None

    if category == MSG_VOLTAGE and len(frame) >= 3:
        return {
            "type": "voltage",
            "raw": decode_voltage(frame),
            "critical": is_battery_critical(frame),
        }

    return None
