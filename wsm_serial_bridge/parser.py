# wsm_serial_bridge/parser.py

from typing import List, Optional

from .protocol import BUF_IN_TIMEOUT_MS, frame_length, validate_frame


class FrameParser:
    """
    Length-delimited binary frame parser.

    Responsibilities:
    - Accumulate partial serial input
    - Drop stale partial input after a link stall
    - Cut frames by the length declared in the header byte
    - Validate the XOR checksum, dropping bad frames whole
    - Track valid / invalid frame statistics
    """

    def __init__(self, input_timeout_ms: int = BUF_IN_TIMEOUT_MS):
        self.input_timeout = input_timeout_ms / 1000.0

        self._buffer = bytearray()
        self._last_activity: Optional[float] = None

        # Statistics
        self.valid_frames = 0
        self.invalid_frames = 0
        self.bytes_received = 0
        self.stale_flushes = 0

    def push(self, data: bytes, now: float) -> List[bytes]:
        frames: List[bytes] = []

        if not data:
            return frames

        # Resuming after a stall would start mid-frame
        if (self._buffer and self._last_activity is not None
                and now - self._last_activity > self.input_timeout):
            self._buffer.clear()
            self.stale_flushes += 1

        self.bytes_received += len(data)
        self._buffer.extend(data)
        self._last_activity = now

        # Process complete frames only
        while self._buffer and len(self._buffer) >= frame_length(self._buffer[0]):
            length = frame_length(self._buffer[0])
            frame = bytes(self._buffer[:length])
            del self._buffer[:length]

            if validate_frame(frame):
                self.valid_frames += 1
                frames.append(frame)
            else:
                self.invalid_frames += 1

        return frames

    def buffered_bytes(self) -> int:
        return len(self._buffer)

    def flush(self):
        self._buffer.clear()
        self._last_activity = None

    def reset(self):
        self.flush()
        self.valid_frames = 0
        self.invalid_frames = 0
        self.bytes_received = 0
        self.stale_flushes = 0
