from wsm_serial_bridge.parser import FrameParser

from frames import interval_frame, voltage_frame


def test_whole_frame():
    parser = FrameParser()
    frame = interval_frame(1000)

    assert parser.push(frame, now=0.0) == [frame]
    assert parser.buffered_bytes() == 0
    assert parser.valid_frames == 1
    assert parser.bytes_received == len(frame)


def test_fragmented_frame_matches_whole_frame():
    data = interval_frame(1234) + voltage_frame(512)

    for split in range(1, len(data)):
        parser = FrameParser()
        frames = parser.push(data[:split], now=0.0)
        frames += parser.push(data[split:], now=0.01)
        assert frames == [interval_frame(1234), voltage_frame(512)]
        assert parser.buffered_bytes() == 0


def test_byte_by_byte_within_timeout():
    parser = FrameParser()
    frame = interval_frame(42)
    frames = []
    now = 0.0
    for b in frame:
        frames += parser.push(bytes([b]), now=now)
        now += 0.05

    assert frames == [frame]
    assert parser.stale_flushes == 0


def test_stale_partial_frame_is_discarded():
    parser = FrameParser()
    frame = interval_frame(1000)

    assert parser.push(frame[:3], now=0.0) == []
    assert parser.push(frame[3:], now=0.1) == []
    assert parser.stale_flushes == 1

    # the leftover tail is stale too by the time the sensor resends
    assert parser.push(frame, now=0.2) == [frame]
    assert parser.stale_flushes == 2


def test_invalid_frame_dropped_whole():
    parser = FrameParser()
    bad = bytearray(interval_frame(1000))
    bad[-1] ^= 0x01
    good = voltage_frame(300)

    assert parser.push(bytes(bad) + good, now=0.0) == [good]
    assert parser.invalid_frames == 1
    assert parser.valid_frames == 1


def test_partial_frame_waits():
    parser = FrameParser()
    frame = voltage_frame(300)

    assert parser.push(frame[:-1], now=0.0) == []
    assert parser.buffered_bytes() == len(frame) - 1


def test_empty_push_is_noop():
    parser = FrameParser()
    assert parser.push(b"", now=0.0) == []
    assert parser.bytes_received == 0


def test_reset():
    parser = FrameParser()
    parser.push(voltage_frame(300)[:2], now=0.0)
    parser.reset()

    assert parser.buffered_bytes() == 0
    assert parser.bytes_received == 0


def test_bad_header_swallows_following_bytes():
    parser = FrameParser()
    frame = interval_frame(1000)

    # 0x07 declares a 9 byte frame, which eats the good one and fails
    assert parser.push(bytes([0x07, 0x68, 0x00]) + frame, now=0.0) == []
    assert parser.invalid_frames == 1
    assert parser.buffered_bytes() == 0
