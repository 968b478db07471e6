#!/usr/bin/env python3
import argparse
import random
import sys

from serial import SerialException

from payloadsmith import __version__
from payloadsmith.lib.commands import Binary, Send
from payloadsmith.lib.config import Config
from payloadsmith.lib.connection import SerialConnection
from payloadsmith.lib.logger import Logger
from payloadsmith.lib.numbers import parse_hex
from payloadsmith.lib.variables import VariableStore


def _assignment(raw: str) -> tuple[str, str]:
    """Parse a NAME=VALUE command line argument."""

    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{raw}'")
    return name, value


def _seed(raw: str) -> int:
    try:
        return int(raw, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid seed '{raw}'") from None


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argparse parser with subcommands."""

    parser = argparse.ArgumentParser(prog="payloadsmith", description="payloadsmith CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_version = sub.add_parser("version", help="Print the package version")
    p_version.set_defaults(handler=cmd_version)

    for command in (Send, Binary):
        meta = command()
        names = meta.commands()
        p = sub.add_parser(
            names[0],
            aliases=names[1:],
            help=meta.info(),
            description=meta.info(),
            usage="\n       ".join(f"payloadsmith {line} [options]" for line in meta.usage()),
            epilog="examples:\n" + "\n".join(f"  payloadsmith {line}" for line in meta.examples()),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        p.add_argument("template", help="Payload template")
        p.add_argument("--dry-run", action="store_true", help="Print the payload instead of sending it")
        p.add_argument("--seed", type=_seed, default=None, help="Seed for the random instructions")
        p.add_argument("--text", type=_assignment, action="append", default=[], metavar="NAME=VALUE", help="Set a text variable")
        p.add_argument("--bin", type=_assignment, action="append", default=[], metavar="NAME=HEX", help="Set a binary variable")
        p.set_defaults(handler=cmd_compose, command_class=command)

    return parser


def cmd_version(_: argparse.Namespace) -> int:
    """
    Print the package version.

    Args:
        _ (argparse.Namespace): Unused argparse namespace.

    Returns:
        int: Process exit code (0 on success).
    """

    print(__version__)
    return 0


def _open_connection() -> SerialConnection | None:
    try:
        return SerialConnection().open()
    except SerialException as e:
        Logger.error(f"Could not open serial port: {e}")
        return None


def _write_payload(payload: str | bytes) -> None:
    """Write a payload to stdout as UTF-8, passing lone surrogates through. Bytes are shown as hex."""

    text = payload.hex() if isinstance(payload, bytes) else payload
    sys.stdout.flush()
    sys.stdout.buffer.write(text.encode("utf-8", "surrogatepass") + b"\n")
    sys.stdout.buffer.flush()


def cmd_compose(ns: argparse.Namespace) -> int:
    texts = VariableStore.from_config("texts").layered(dict(ns.text))
    bins = VariableStore.from_config("bins", parse_hex).layered({name: parse_hex(value) for name, value in ns.bin})
    seed = ns.seed if ns.seed is not None else Config.get("compose", "seed")
    rng = random.Random(seed)

    if ns.dry_run:
        command = ns.command_class(texts=texts, bins=bins, rng=rng)
        payload = command.compose(ns.template)
        if payload is None:
            return 1
        _write_payload(payload)
        return 0

    connection = _open_connection()
    try:
        command = ns.command_class(connection=connection, texts=texts, bins=bins, rng=rng)
        return 0 if command.run(ns.template) else 1
    except Exception as e:
        if Config.get("dev", "stack_trace_errors", False):
            raise

        Logger.error(f"Failed to send payload: {e}")
        return 1
    finally:
        if connection is not None:
            connection.close()


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the `payloadsmith` CLI.

    Initializes logging, loads configuration, and dispatches subcommands.

    Args:
        argv (list[str] | None): Arguments excluding the executable; if None, uses sys.argv[1:].

    Returns:
        int: Process exit code.
    """

    Logger.setup(Logger.INFO)

    Config.load()
    Logger.set_level(Config.get("dev", "log_level", Logger.INFO))

    parser = _build_parser()
    ns = parser.parse_args(argv)
    return ns.handler(ns)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        if Config.get("dev", "stack_trace_errors", False):
            raise
        Logger.error(f"Error: {e}")
        sys.exit(1)
