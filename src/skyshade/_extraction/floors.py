"""
Floor counts from cadastral construction strings.

The cadastre encodes the floors of a construction unit with Roman numerals
joined by signs: ``"III"`` is three floors above ground, ``"-I+IV"`` one
basement and four floors above, ``"V+TZA"`` five floors plus a terrace.
"""

import re

ROMAN_VALUES = {
    "I": 1,
    "V": 5,
    "X": 10,
    "L": 50,
    "C": 100,
    "D": 500,
    "M": 1000,
}

_ROMAN_PATTERN = re.compile(r"^[IVXLCDM]+$")
_SIGNED_PART = re.compile(r"[+-]?[^+-]+")


def extract_positive_roman(constru: str) -> list[str]:
    """
    Extract the above-ground Roman numerals of a construction string.

    Parameters
    ----------
    constru
        Construction string, e.g. ``"II+I"`` or ``"-II+III"``.

    Returns
    -------
    numerals
        The numerals not preceded by a minus sign, without their sign.
    """
    numerals = []
    for part in _SIGNED_PART.findall(constru):
        part = part.strip()
        if part.startswith("-"):
            continue
        part = part.removeprefix("+").strip()
        if _ROMAN_PATTERN.match(part):
            numerals.append(part)
    return numerals


def roman_to_decimal(roman: str) -> int:
    """
    Convert a Roman numeral to an integer.

    Reads right to left, subtracting a symbol whenever it is smaller than the
    one after it (``IV`` is 4, ``IX`` is 9).
    """
    total = 0
    previous = 0
    for symbol in reversed(roman):
        value = ROMAN_VALUES[symbol]
        if value >= previous:
            total += value
        else:
            total -= value
        previous = value
    return total


def get_floor_count(constru: str | None, default: int = 1) -> int:
    """
    Number of floors above ground encoded in a construction string.

    Parameters
    ----------
    constru
        Construction string from the cadastre.
    default
        Value returned when the string is missing or carries no numeral.

    Returns
    -------
    floors
        The highest above-ground numeral, or ``default``.
    """
    if not constru or not isinstance(constru, str):
        return default

    numerals = extract_positive_roman(constru)
    if not numerals:
        return default

    floors = max(roman_to_decimal(numeral) for numeral in numerals)
    return floors if floors > 0 else default
