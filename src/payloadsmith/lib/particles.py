"""
Template scanner.

Splits a raw template into an ordered list of particles: literal text runs
and bracketed instruction calls. Text mode uses `${name(a,b)}` delimiters,
binary mode uses `[name(a,b)]`. A backslash makes the next character literal
anywhere in the template, including inside an instruction's arguments.
In binary mode, unescaped whitespace between two instructions only
separates them and produces no bytes.
"""

from dataclasses import dataclass
from enum import Enum

from payloadsmith.lib.errors import InvalidSyntax

ESCAPE = "\\"


class Mode(Enum):
    """Evaluation mode of a template."""

    TEXT = "text"
    BINARY = "binary"


# (opening delimiter, closing delimiter) per mode
DELIMITERS = {
    Mode.TEXT: ("${", "}"),
    Mode.BINARY: ("[", "]"),
}


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Instruction:
    name: str
    args: tuple[str, ...] = ()


Particle = Literal | Instruction


class _State(Enum):
    LITERAL = 0
    NAME = 1
    ARGS = 2
    CLOSING = 3


def _is_separator(mode: Mode, particles: list[Particle], buf: list[str], escaped: bool) -> bool:
    """Unescaped whitespace between two binary instructions only separates them."""

    return (
        mode == Mode.BINARY
        and not escaped
        and bool(particles)
        and isinstance(particles[-1], Instruction)
        and "".join(buf).isspace()
    )


def parse_particles(raw: str, mode: Mode) -> list[Particle]:
    """
    Scan a template into particles in their original order.

    Args:
        raw (str): The template text.
        mode (Mode): Selects the delimiter style.

    Returns:
        list[Particle]: Literal and Instruction particles.

    Raises:
        InvalidSyntax: On unmatched delimiters, a malformed instruction or a
            trailing escape. No particles are returned in that case.
    """

    opener, closer = DELIMITERS[mode]
    particles: list[Particle] = []
    state = _State.LITERAL
    buf: list[str] = []
    escaped = False
    name = ""
    args: list[str] = []
    start = 0
    i = 0

    while i < len(raw):
        ch = raw[i]

        if ch == ESCAPE:
            if i + 1 >= len(raw):
                raise InvalidSyntax("Dangling escape", i)
            if state == _State.CLOSING:
                raise InvalidSyntax(f"Expected '{closer}'", i)
            buf.append(raw[i + 1])
            escaped = escaped or state == _State.LITERAL
            i += 2
            continue

        if raw.startswith(opener, i):
            if state != _State.LITERAL:
                raise InvalidSyntax(f"Nested '{opener}'", i)
            if buf and not _is_separator(mode, particles, buf, escaped):
                particles.append(Literal("".join(buf)))
            buf = []
            escaped = False
            state = _State.NAME
            start = i
            i += len(opener)
            continue

        if ch == closer:
            if state == _State.LITERAL:
                raise InvalidSyntax(f"Unmatched '{closer}'", i)
            if state == _State.ARGS:
                raise InvalidSyntax("Expected ')'", i)
            if state == _State.NAME:
                name = "".join(buf).strip()
                args = []
            if not name:
                raise InvalidSyntax("Missing instruction name", start)
            particles.append(Instruction(name, tuple(args)))
            state = _State.LITERAL
            buf = []
            escaped = False
            i += 1
            continue

        if state == _State.NAME and ch == "(":
            name = "".join(buf).strip()
            buf = []
            args = []
            state = _State.ARGS
        elif state == _State.ARGS and ch == ",":
            args.append("".join(buf))
            buf = []
        elif state == _State.ARGS and ch == ")":
            # name() takes no arguments, name(,) takes two empty ones
            if buf or args:
                args.append("".join(buf))
            buf = []
            state = _State.CLOSING
        elif state == _State.CLOSING:
            if not ch.isspace():
                raise InvalidSyntax(f"Expected '{closer}'", i)
        else:
            buf.append(ch)
        i += 1

    if state != _State.LITERAL:
        raise InvalidSyntax(f"Unmatched '{opener}'", start)
    if buf:
        particles.append(Literal("".join(buf)))

    return particles
