# wsm_serial_bridge/events.py


class SpeedometerListener:
    """
    Receiver of decoded speedometer events.

    Called synchronously, in arrival order, from Speedometer.feed()
    and Speedometer.tick(). Every method is a no-op here; override
    the ones you need.
    """

    def on_speed_read(self, speed: float, interval: int):
        pass

    def on_distance_read(self, distance: float, ticks: int):
        pass

    def on_battery_read(self, voltage: float, raw: int):
        pass

    def on_battery_critical(self):
        """The sensor disconnects itself shortly after this."""
        pass

    def on_link_error(self, message: str):
        pass

    def on_speed_timeout(self):
        pass

    def on_speed_restored(self):
        pass

    def on_long_term_done(self, speed: float, diffusion: float):
        pass
