"""
The `send` and `binary` commands.

Each command composes a payload from its template, reports template errors
through the Logger, and hands a complete payload to the connection. Nothing
is sent when composition fails.
"""

import random

from payloadsmith.lib.composer import compose
from payloadsmith.lib.errors import InvalidSyntax, UnknownInstruction
from payloadsmith.lib.instructions import Context
from payloadsmith.lib.logger import Logger
from payloadsmith.lib.particles import Mode
from payloadsmith.lib.variables import VariableStore


def hexdump(data: bytes, width: int = 16) -> list[str]:
    """Format bytes as offset-prefixed hex dump lines."""

    return [
        f"{offset:05X}  {' '.join(f'{byte:02X}' for byte in data[offset:offset + width])}"
        for offset in range(0, len(data), width)
    ]


class _TemplateCommand:
    """Shared composition and sending logic for the template commands."""

    mode: Mode
    name: str

    def __init__(
        self,
        connection=None,
        texts: VariableStore[str] | None = None,
        bins: VariableStore[bytes] | None = None,
        rng: random.Random | None = None,
    ):
        self.connection = connection
        self.texts = texts if texts is not None else VariableStore()
        self.bins = bins if bins is not None else VariableStore()
        self.rng = rng if rng is not None else random.Random()

    def context(self) -> Context:
        return Context(texts=self.texts, bins=self.bins, rng=self.rng)

    def describe(self, payload: str | bytes) -> str:
        return payload

    def compose(self, template: str) -> str | bytes | None:
        """
        Compose a payload, logging template errors.

        Args:
            template (str): The raw template.

        Returns:
            str | bytes | None: The payload, or None if the template was rejected.
        """

        try:
            return compose(template, self.mode, self.context())
        except InvalidSyntax as e:
            Logger.error("Syntax error.")
            Logger.debug(str(e))
            return None
        except UnknownInstruction as e:
            Logger.error(f"No helper {e.instruction} available for {self.name}.")
            return None

    def run(self, template: str) -> bool:
        """
        Compose a payload and send it over the connection.

        Args:
            template (str): The raw template.

        Returns:
            bool: True if the payload was handed to the connection.
        """

        payload = self.compose(template)
        if payload is None:
            return False

        connection = self.connection
        if connection is None or connection.is_closing() or connection.is_closed():
            Logger.error("No connection.")
            Logger.error(f"Cannot send: {self.describe(payload)}")
            Logger.info("Check the [serial] settings and try again.")
            return False

        self.log_sent(payload)
        connection.send(payload)
        return True

    def log_sent(self, payload: str | bytes) -> None:
        Logger.success(f"Sent: {self.describe(payload)}")


class Send(_TemplateCommand):
    """Send textual data built from a `${...}` template."""

    mode = Mode.TEXT
    name = "send"

    def commands(self) -> list[str]:
        return ["send", "s"]

    def usage(self) -> list[str]:
        return [
            "send [template]",
            "s [template]",
        ]

    def examples(self) -> list[str]:
        return [
            "send Hello world!",
            "send rpc(${random(5)})",
            "send ${text()}",
            'send ["JSON","is","cool"]',
            "send ${time()}s since epoch",
            "send From a to z: ${range(97,122)}",
            "s Available now with 60% less typing!",
        ]

    def info(self) -> str:
        return "send textual data"


class Binary(_TemplateCommand):
    """Send binary data built from a `[...]` template."""

    mode = Mode.BINARY
    name = "binary"

    def commands(self) -> list[str]:
        return ["binary", "b"]

    def usage(self) -> list[str]:
        return [
            "binary [template]",
            "b [template]",
        ]

    def examples(self) -> list[str]:
        return [
            "binary Hello\\ world!",
            "binary [random(16)]",
            "binary [text]",
            "binary [bin]",
            'binary \\["JSON","is","cool"\\]',
            "binary [range(0,0xff)]",
            "binary [hex(1234567890abcdef)]",
            "binary [hex(52)] [random(1)] lol",
        ]

    def info(self) -> str:
        return "send binary data"

    def describe(self, payload: bytes) -> str:
        return f"<{len(payload)}B of data>"

    def log_sent(self, payload: bytes) -> None:
        super().log_sent(payload)
        for line in hexdump(payload):
            Logger.debug(line)
