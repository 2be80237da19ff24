"""
Geometric value types carried by Rectangle, Size, and Point controls.

Plain frozen dataclasses with no native layout; camctl.runtime.native owns the
ctypes mirrors and the conversions to and from them.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Point", "Size", "Rectangle"]


@dataclass(frozen=True, slots=True)
class Point:
    """Represents ``libcamera::Point``."""

    x: int
    y: int


@dataclass(frozen=True, slots=True)
class Size:
    """Represents ``libcamera::Size``."""

    width: int
    height: int


@dataclass(frozen=True, slots=True)
class Rectangle:
    """Represents ``libcamera::Rectangle``."""

    x: int
    y: int
    width: int
    height: int
