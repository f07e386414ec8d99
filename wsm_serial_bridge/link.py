# wsm_serial_bridge/link.py

import serial

from .exceptions import LinkOpenError

DEFAULT_BAUDRATE = 9600
READ_BUFFER_SIZE = 256


class SerialLink:
    """
    Read-only serial connection to the sensor receiver.

    `port` is a device path or any pyserial URL (e.g. loop://).
    Reads never block.
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE):
        self.port = port
        self.baudrate = baudrate
        self.ser = None

    def open(self):
        try:
            self.ser = serial.serial_for_url(
                self.port,
                baudrate=self.baudrate,
                rtscts=True,
                timeout=0,
            )
        except (serial.SerialException, ValueError) as e:
            self.ser = None
            raise LinkOpenError(str(e), port=self.port) from e

        # Drop whatever piled up before we were listening
        self.ser.reset_input_buffer()

    def close(self):
        if self.ser and self.ser.is_open:
            self.ser.close()
        self.ser = None

    @property
    def connected(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def read(self) -> bytes:
        """
        Return the bytes available right now (possibly none).

        Raises serial.SerialException on link failure.
        """
        if not self.connected:
            raise serial.PortNotOpenError()
        try:
            waiting = self.ser.in_waiting
            if not waiting:
                return b""
            return self.ser.read(min(waiting, READ_BUFFER_SIZE))
        except serial.SerialException:
            raise
        except OSError as e:
            # posix ioctl failures (device unplugged) bypass pyserial
            raise serial.SerialException(str(e)) from e


def poll(link: SerialLink, wsm) -> bool:
    """
    One receive step: hand available bytes to the decoder, or just
    run its watchdog when there are none.

    A read failure is reported once through wsm.link_error() and the
    link is closed; it is not reopened. The watchdog keeps running on
    later polls, so speed still times out.

    Returns False when the link is not (or no longer) connected.
    """
    if not link.connected:
        wsm.tick()
        return False

    try:
        raw = link.read()
    except serial.SerialException as e:
        link.close()
        wsm.link_error(str(e))
        wsm.tick()
        return False

    if raw:
        wsm.feed(raw)
    else:
        wsm.tick()
    return True
