"""
Serial transport for composed payloads.

This module provides the `SerialConnection` class, the connection object the
send commands hand their payloads to. It exposes the small capability the
commands rely on (`is_closing`, `is_closed`, `send`) on top of pyserial.
"""

from contextlib import suppress

from serial import Serial

from payloadsmith.lib.config import Config
from payloadsmith.lib.logger import Logger


class ConnectionClosedError(Exception):
    """Raised when sending on a connection that is not open."""

    pass


class SerialConnection:
    """
    Write text or binary payloads to a serial device.

    Text payloads are encoded as UTF-8 (lone surrogates passed through),
    binary payloads are written as-is. With `disable_serial` set the port is
    never opened and sends are only logged, which is useful for development.
    """

    def __init__(
        self,
        path: str | None = None,
        baud: int | None = None,
        disable_serial: bool | None = None,
    ):
        """
        Initialize a serial connection. The port is not opened until `open()`.

        Args:
            path (str, optional): Serial device path. Defaults to config value.
            baud (int, optional): Baud rate. Defaults to config value.
            disable_serial (bool, optional): Disable serial I/O (dev/test). Defaults to config value.
        """
        self.device_path = path if path is not None else Config.get("serial", "path", "/dev/ttyUSB0")
        self.baud = baud if baud is not None else Config.get("serial", "baud", 115200)
        self.disable_serial = disable_serial if disable_serial is not None else Config.get("dev", "disable_serial", False)

        self._ser: Serial | None = None
        self._closing = False

    def open(self, ser: Serial | None = None) -> "SerialConnection":
        """
        Open the serial port.

        Args:
            ser (object, optional): Serial-like object (write/flush/close/is_open) to use instead.

        Returns:
            SerialConnection: self, for chaining.
        """

        if self.disable_serial:
            Logger.debug("Serial disabled in config. Skipping connection...")
            return self

        self._ser = ser or Serial(self.device_path, baudrate=self.baud, timeout=0, write_timeout=5)
        self._closing = False
        Logger.debug(f"Opened {self.device_path} at {self.baud} baud.")
        return self

    def close(self) -> None:
        """Close the serial port if it is open."""

        if self._ser is None:
            return

        self._closing = True
        with suppress(Exception):
            self._ser.close()
        self._ser = None
        self._closing = False

    def is_closing(self) -> bool:
        return self._closing

    def is_closed(self) -> bool:
        if self.disable_serial:
            return False
        return self._ser is None or not self._ser.is_open

    def send(self, payload: str | bytes) -> None:
        """
        Write a payload to the device.

        Args:
            payload (str | bytes): Text or binary payload.

        Raises:
            ConnectionClosedError: If the port is not open.
        """

        data = payload.encode("utf-8", "surrogatepass") if isinstance(payload, str) else bytes(payload)

        if self.disable_serial:
            Logger.debug(f"Serial disabled. Dropping {len(data)} bytes.")
            return

        if self.is_closed():
            raise ConnectionClosedError(f"Serial port '{self.device_path}' is not open.")

        self._ser.write(data)
        self._ser.flush()

    def __enter__(self) -> "SerialConnection":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()
