import pytest

from wsm_serial_bridge.events import SpeedometerListener


class FakeClock:

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingListener(SpeedometerListener):

    def __init__(self):
        self.events = []

    def names(self):
        return [name for name, _ in self.events]

    def of(self, name):
        return [args for n, args in self.events if n == name]

    def on_speed_read(self, speed, interval):
        self.events.append(('speed_read', (speed, interval)))

    def on_distance_read(self, distance, ticks):
        self.events.append(('distance_read', (distance, ticks)))

    def on_battery_read(self, voltage, raw):
        self.events.append(('battery_read', (voltage, raw)))

    def on_battery_critical(self):
        self.events.append(('battery_critical', ()))

    def on_link_error(self, message):
        self.events.append(('link_error', (message,)))

    def on_speed_timeout(self):
        self.events.append(('speed_timeout', ()))

    def on_speed_restored(self):
        self.events.append(('speed_restored', ()))

    def on_long_term_done(self, speed, diffusion):
        self.events.append(('long_term_done', (speed, diffusion)))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def listener():
    return RecordingListener()
