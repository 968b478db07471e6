"""
Payload assembly.

A template is parsed completely and every particle is evaluated before
anything is joined, so a syntax error or an unknown text instruction always
surfaces before a payload exists.
"""

from collections.abc import Sequence

from payloadsmith.lib.instructions import Context, evaluate_binary, evaluate_text
from payloadsmith.lib.particles import Mode, parse_particles


def join_buffers(buffers: Sequence[bytes]) -> bytes:
    """Concatenate buffers into one exactly-sized allocation, preserving order."""

    out = bytearray(sum(len(buffer) for buffer in buffers))
    offset = 0
    for buffer in buffers:
        out[offset:offset + len(buffer)] = buffer
        offset += len(buffer)
    return bytes(out)


def compose_text(raw: str, ctx: Context | None = None) -> str:
    """
    Compose a text payload from a `${...}` template.

    Args:
        raw (str): The template.
        ctx (Context, optional): Variable stores and random source.

    Returns:
        str: The composed text.

    Raises:
        InvalidSyntax: If the template cannot be parsed.
        UnknownInstruction: If the template calls an unknown instruction.
    """

    ctx = ctx or Context()
    particles = parse_particles(raw, Mode.TEXT)
    return "".join([evaluate_text(particle, ctx) for particle in particles])


def compose_binary(raw: str, ctx: Context | None = None) -> bytes:
    """
    Compose a byte payload from a `[...]` template.

    Args:
        raw (str): The template.
        ctx (Context, optional): Variable stores and random source.

    Returns:
        bytes: The composed payload.

    Raises:
        InvalidSyntax: If the template cannot be parsed.
    """

    ctx = ctx or Context()
    particles = parse_particles(raw, Mode.BINARY)
    return join_buffers([evaluate_binary(particle, ctx) for particle in particles])


def compose(raw: str, mode: Mode, ctx: Context | None = None) -> str | bytes:
    """Compose a payload in the given mode."""

    if mode == Mode.BINARY:
        return compose_binary(raw, ctx)
    return compose_text(raw, ctx)
