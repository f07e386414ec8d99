import math

import pytest

from wsm_serial_bridge.protocol import (
    compute_checksum,
    decode_frame,
    distance_from_ticks,
    encode_frame,
    frame_length,
    speed_from_interval,
    validate_frame,
    voltage_from_raw,
)

from frames import distance_frame, interval_frame, voltage_frame


def test_frame_length_from_header_low_nibble():
    assert frame_length(0x15) == 7
    assert frame_length(0x20) == 2
    assert frame_length(0xFF) == 17


def test_encoded_frame_is_valid():
    frame = encode_frame(1, bytes([0x81, 0x00, 0x07, 0x68]))
    assert frame[0] == 0x14
    assert len(frame) == frame_length(frame[0])
    assert compute_checksum(frame) == 0
    assert validate_frame(frame)


def test_checksum_ignores_high_bit():
    frame = bytes([0x21, 0x05, 0x24])
    assert validate_frame(frame)
    assert validate_frame(bytes([0x21, 0x85, 0xA4]))


def test_single_bit_flip_breaks_checksum():
    frame = interval_frame(1000)
    for i in range(len(frame)):
        for bit in range(7):
            corrupted = bytearray(frame)
            corrupted[i] ^= 1 << bit
            assert not validate_frame(bytes(corrupted))


def test_encode_frame_rejects_bad_input():
    with pytest.raises(ValueError):
        encode_frame(8, b"")
    with pytest.raises(ValueError):
        encode_frame(1, bytes(16))


def test_decode_interval():
    assert decode_frame(interval_frame(1000)) == {"type": "interval", "interval": 1000}
    assert decode_frame(interval_frame(0xFFFF))["interval"] == 0xFFFF


def test_decode_distance_uses_all_32_bits():
    for ticks in (0, 1, 123456, 0xFFFFFFFF, 0x80000001):
        assert decode_frame(distance_frame(ticks)) == {"type": "distance", "ticks": ticks}


def test_decode_voltage_and_critical_flag():
    assert decode_frame(voltage_frame(700)) == {
        "type": "voltage", "raw": 700, "critical": False,
    }
    assert decode_frame(voltage_frame(1023, critical=True))["critical"] is True


def test_unknown_messages_are_ignored():
    assert decode_frame(encode_frame(3, bytes([1, 2]))) is None
    assert decode_frame(encode_frame(0, b"")) is None
    # unknown speed sub-type
    assert decode_frame(encode_frame(1, bytes([0x83, 0, 0, 0]))) is None


def test_truncated_frames_are_ignored():
    assert decode_frame(encode_frame(1, bytes([0x81, 0]))) is None
    assert decode_frame(encode_frame(1, bytes([0x82, 0, 0, 0]))) is None


def test_speed_formula():
    expected = (math.pi * 8.0 * 3686400 * 3.6 * 120 / 1000) / (8 * 64 * 1000)
    assert speed_from_interval(1000, 8.0, 120, 8) == pytest.approx(expected)
    assert speed_from_interval(1000, 8.0, 120, 8) == pytest.approx(78.17, abs=0.01)


@pytest.mark.parametrize("diameter,scale,ticks", [(8.0, 120, 8), (700.0, 1, 1), (26.0, 3, 32)])
def test_no_pulses_is_zero_speed(diameter, scale, ticks):
    assert speed_from_interval(0xFFFF, diameter, scale, ticks) == 0.0


def test_distance_and_voltage_conversion():
    assert distance_from_ticks(8, 8.0, 8) == pytest.approx(math.pi * 8.0 / 1000)
    assert voltage_from_raw(1024) == pytest.approx(4.587)
    assert voltage_from_raw(0) == 0.0
