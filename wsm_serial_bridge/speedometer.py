# wsm_serial_bridge/speedometer.py

"""
Decoder for the Wireless SpeedoMeter sensor stream.

The sensor only talks, the host only listens. Feed raw serial bytes
into Speedometer.feed() and receive decoded values through a
SpeedometerListener.

A long-term measurement averages a number of speed readings and
reports abs(min - max), so the user knows the diffusion.
"""

import time
from typing import Callable, Dict, Optional

from .events import SpeedometerListener
from .exceptions import AlreadyMeasuringError, NoSpeedDataError
from .monitor import LongTermMeasurement, SpeedMonitor
from .parser import FrameParser
from .protocol import (
    UINT32_MASK,
    decode_frame,
    distance_from_ticks,
    speed_from_interval,
    voltage_from_raw,
)

DEFAULT_SCALE = 120
DEFAULT_WHEEL_DIAMETER = 8.0  # mm
DEFAULT_TICKS_PER_REVOLUTION = 8


class Speedometer:

    def __init__(self,
                 scale: float = DEFAULT_SCALE,
                 wheel_diameter: float = DEFAULT_WHEEL_DIAMETER,
                 ticks_per_revolution: int = DEFAULT_TICKS_PER_REVOLUTION,
                 listener: Optional[SpeedometerListener] = None,
                 clock: Callable[[], float] = time.monotonic):

        if scale <= 0:
            raise ValueError("scale must be positive")
        if wheel_diameter <= 0:
            raise ValueError("wheel_diameter must be positive")
        if ticks_per_revolution <= 0:
            raise ValueError("ticks_per_revolution must be positive")

        self.scale = scale
        self.wheel_diameter = wheel_diameter
        self.ticks_per_revolution = ticks_per_revolution

        self.listener = listener if listener is not None else SpeedometerListener()
        self._clock = clock

        self.parser = FrameParser()
        self.speed_monitor = SpeedMonitor()
        self.long_term = LongTermMeasurement()

        self._dist = 0
        self._dist_start = 0

        # Statistics
        self.ignored_frames = 0

    # =====================================================
    # INPUT
    # =====================================================
    def feed(self, data: bytes):
        now = self._clock()
        self._check_speed_timeout(now)

        for frame in self.parser.push(data, now):
            msg = decode_frame(frame)
            if msg is None:
                self.ignored_frames += 1
                continue
            self.handle_message(msg, now)

    def tick(self):
        """
        Check the speed watchdog. Call periodically while no bytes
        arrive.
        """
        self._check_speed_timeout(self._clock())

    def link_error(self, message: str):
        self.listener.on_link_error(message)

    def stop(self):
        """
        Forget link state: pending input, watchdog and any running
        long-term measurement. No events are emitted.
        """
        self.parser.flush()
        self.speed_monitor.disarm()
        self.long_term.cancel()

    # =====================================================
    # MESSAGES
    # =====================================================
    def handle_message(self, msg: Dict, now: float):
        kind = msg.get('type')

        if kind == 'interval':
            self._handle_interval(msg['interval'], now)
        elif kind == 'distance':
            self._handle_distance(msg['ticks'])
        elif kind == 'voltage':
            self._handle_voltage(msg['raw'], msg['critical'])

    def _handle_interval(self, interval: int, now: float):
        if self.speed_monitor.refresh(now):
            self.listener.on_speed_restored()

        speed = self.speed_from_interval(interval)
        self.listener.on_speed_read(speed, interval)

        if self.long_term.active:
            result = self.long_term.record(speed)
            if result is not None:
                self.listener.on_long_term_done(*result)

    def _handle_distance(self, ticks: int):
        self._dist = ticks
        delta = self.raw_distance_delta()
        self.listener.on_distance_read(self.distance_from_raw(delta), delta)

    def _handle_voltage(self, raw: int, critical: bool):
        self.listener.on_battery_read(voltage_from_raw(raw), raw)
        if critical:
            self.listener.on_battery_critical()

    def _check_speed_timeout(self, now: float):
        if self.speed_monitor.expired(now):
            self.long_term.cancel()
            self.listener.on_speed_timeout()

    # =====================================================
    # PUBLIC API
    # =====================================================
    def reset_distance_baseline(self):
        self._dist_start = self._dist

    def start_long_term_measurement(self, count: int):
        if self.long_term.active:
            raise AlreadyMeasuringError(
                "Long-term speed measurement is already running")
        if not self.is_speed_fresh():
            raise NoSpeedDataError(
                "Cannot start measurement, speed not received")
        self.long_term.start(count)

    def is_speed_fresh(self) -> bool:
        return self.speed_monitor.is_fresh()

    def raw_distance_delta(self) -> int:
        return (self._dist - self._dist_start) & UINT32_MASK

    def distance_from_raw(self, delta: int) -> float:
        return distance_from_ticks(delta, self.wheel_diameter,
                                   self.ticks_per_revolution)

    def speed_from_interval(self, interval: int) -> float:
        return speed_from_interval(interval, self.wheel_diameter,
                                   self.scale, self.ticks_per_revolution)
