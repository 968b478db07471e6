"""
# payloadsmith Technical Documentation

payloadsmith composes test traffic from short templates and writes it to a
serial device. These docs are generated from the project's docstrings and
serve as a technical reference for developers and operators.

---

## Templates

Text templates mix literal characters with `${name(args)}` instructions:

    From a to z: ${range(97,122)}

Binary templates use `[name(args)]` and map each literal character to a byte:

    [hex(52)] [random(1)] lol

A backslash makes the next character literal in either mode.

---

## Disclaimer

The random instructions generate test data. They are not suitable for
anything security sensitive.
"""

from importlib.metadata import version

__version__ = version("payloadsmith")
