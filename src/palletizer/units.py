"""Imperial <-> wire unit conversions (the API speaks millimetres and grams)."""

from __future__ import annotations

MM_PER_INCH = 25.4
GRAMS_PER_POUND = 453.592


def inches_to_mm(inches: float) -> float:
    return inches * MM_PER_INCH


def mm_to_inches(mm: float) -> float:
    return mm / MM_PER_INCH


def pounds_to_grams(pounds: float) -> float:
    return pounds * GRAMS_PER_POUND


def grams_to_pounds(grams: float) -> float:
    return grams / GRAMS_PER_POUND
