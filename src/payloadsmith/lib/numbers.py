"""
Lenient number and hex decoding for template arguments.

Malformed input never raises here: numbers fall back to zero and
undecodable hex pairs are dropped.
"""

import re

_DECIMAL = re.compile(r"-?[0-9]+")
_HEXADECIMAL = re.compile(r"(-?)0[xX]([0-9a-fA-F]+)")
_HEX_PAIR = re.compile(r"[0-9a-fA-F]{2}")


def parse_num(token: str) -> int:
    """
    Parse a decimal or 0x-prefixed hexadecimal integer.

    Args:
        token (str): Raw argument text. Surrounding whitespace is ignored.

    Returns:
        int: The decoded value, or 0 if the token is not a valid number.
    """

    token = token.strip()

    match = _HEXADECIMAL.fullmatch(token)
    if match:
        value = int(match.group(2), 16)
        return -value if match.group(1) else value

    if _DECIMAL.fullmatch(token):
        return int(token)

    return 0


def parse_hex(digits: str) -> bytes:
    """
    Decode a string of hex digit pairs into bytes.

    The string is split into consecutive pairs from the left. A trailing
    unpaired character is dropped and so is every pair that is not valid hex.

    Args:
        digits (str): Hex digits, e.g. "52ff00".

    Returns:
        bytes: One byte per valid pair.
    """

    digits = digits.strip()
    pairs = (digits[i:i + 2] for i in range(0, len(digits) - 1, 2))
    return bytes(int(pair, 16) for pair in pairs if _HEX_PAIR.fullmatch(pair))
