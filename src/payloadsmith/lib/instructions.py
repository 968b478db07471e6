"""
Instruction tables for text and binary templates.

Each table maps an instruction name to a function of `(args, ctx)`. Literal
particles are evaluated through the `default` entry. Adding an instruction
means adding a table entry; the dispatch in `evaluate_text` and
`evaluate_binary` never changes.

Text and binary mode share instruction names but not behavior: defaults,
output domain and the handling of unknown names differ (see the tables).
"""

import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from payloadsmith.lib.errors import UnknownInstruction
from payloadsmith.lib.logger import Logger
from payloadsmith.lib.numbers import parse_hex, parse_num
from payloadsmith.lib.particles import Literal, Particle
from payloadsmith.lib.variables import VariableStore

DEFAULT_COUNT = 16
DEFAULT_VARIABLE = "default"
UNDEFINED_TEXT = "undefined"

# Upper half of the 16-bit range is avoided to keep clear of surrogates
RANDOM_CHAR_MAX = 0x7FFF


@dataclass(frozen=True)
class Context:
    """Read-only inputs shared by every particle of one template evaluation."""

    texts: VariableStore[str] = field(default_factory=VariableStore)
    bins: VariableStore[bytes] = field(default_factory=VariableStore)
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = time.time


Handler = Callable[[Sequence[str], Context], object]


def _count(args: Sequence[str]) -> int:
    return parse_num(args[0]) if len(args) == 1 else DEFAULT_COUNT


def _variable(args: Sequence[str]) -> str:
    return args[0] if len(args) == 1 else DEFAULT_VARIABLE


def _bounds(args: Sequence[str], start: int, end: int) -> range:
    """Inclusive range; one argument sets the end, two set both."""

    if len(args) == 1:
        end = parse_num(args[0])
    elif len(args) == 2:
        start = parse_num(args[0])
        end = parse_num(args[1])
    return range(start, end + 1)


def _byte_value(ch: str) -> int:
    code = ord(ch)
    return code if code <= 0xFF else 0


def _to_bytes(text: str) -> bytes:
    return bytes(_byte_value(ch) for ch in text)


# Text mode


def _text_default(args: Sequence[str], ctx: Context) -> str:
    return args[0]


def _text_random(args: Sequence[str], ctx: Context) -> str:
    return "".join(chr(ctx.rng.randint(0, RANDOM_CHAR_MAX)) for _ in range(_count(args)))


def _text_text(args: Sequence[str], ctx: Context) -> str:
    value = ctx.texts.get(_variable(args))
    return UNDEFINED_TEXT if value is None else value


def _text_time(args: Sequence[str], ctx: Context) -> str:
    return str(int(ctx.clock()))


def _text_range(args: Sequence[str], ctx: Context) -> str:
    return "".join(chr(code & 0xFFFF) for code in _bounds(args, 32, 126))


TEXT_INSTRUCTIONS: dict[str, Handler] = {
    "default": _text_default,
    "random": _text_random,
    "text": _text_text,
    "time": _text_time,
    "range": _text_range,
}


# Binary mode


def _binary_default(args: Sequence[str], ctx: Context) -> bytes:
    return _to_bytes(args[0])


def _binary_random(args: Sequence[str], ctx: Context) -> bytes:
    return bytes(ctx.rng.randint(0, 0xFF) for _ in range(_count(args)))


def _binary_range(args: Sequence[str], ctx: Context) -> bytes:
    return bytes(code & 0xFF for code in _bounds(args, 0, 0xFF))


def _binary_bin(args: Sequence[str], ctx: Context) -> bytes:
    value = ctx.bins.get(_variable(args))
    return b"" if value is None else bytes(value)


def _binary_text(args: Sequence[str], ctx: Context) -> bytes:
    value = ctx.texts.get(_variable(args))
    return b"" if value is None else _to_bytes(value)


def _binary_hex(args: Sequence[str], ctx: Context) -> bytes:
    return parse_hex(args[0]) if len(args) == 1 else b""


BINARY_INSTRUCTIONS: dict[str, Handler] = {
    "default": _binary_default,
    "random": _binary_random,
    "range": _binary_range,
    "bin": _binary_bin,
    "text": _binary_text,
    "hex": _binary_hex,
}


def _split(particle: Particle) -> tuple[str, Sequence[str]]:
    if isinstance(particle, Literal):
        return "default", (particle.text,)
    return particle.name, particle.args


def evaluate_text(particle: Particle, ctx: Context) -> str:
    """
    Evaluate one particle of a text template.

    Raises:
        UnknownInstruction: If the instruction name is not in the text table.
    """

    name, args = _split(particle)
    handler = TEXT_INSTRUCTIONS.get(name)
    if handler is None:
        raise UnknownInstruction(name)
    return handler(args, ctx)


def evaluate_binary(particle: Particle, ctx: Context) -> bytes:
    """Evaluate one particle of a binary template. Unknown instructions yield no bytes."""

    name, args = _split(particle)
    handler = BINARY_INSTRUCTIONS.get(name)
    if handler is None:
        Logger.debug(f"Skipping unknown binary instruction '{name}'")
        return b""
    return handler(args, ctx)
