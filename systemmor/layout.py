"""Screen regions and the fixed proportional splits used by the dashboard."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    y: int
    x: int
    h: int
    w: int

    def inner(self, margin: int) -> Rect:
        """Shrink by *margin* cells on every side (never below zero size)."""
        return Rect(
            self.y + margin,
            self.x + margin,
            max(0, self.h - 2 * margin),
            max(0, self.w - 2 * margin),
        )


def split_percent(total: int, percentages: tuple[int, ...]) -> list[int]:
    """Sizes for *percentages* of *total*; the last part absorbs rounding.

    Percentages summing past 100 are scaled down so the parts always fit.
    """
    scale = max(100, sum(percentages))
    sizes = [total * p // scale for p in percentages]
    if sizes:
        sizes[-1] = max(0, total - sum(sizes[:-1]))
    return sizes


def split_columns(rect: Rect, percentages: tuple[int, ...]) -> list[Rect]:
    regions: list[Rect] = []
    x = rect.x
    for width in split_percent(rect.w, percentages):
        regions.append(Rect(rect.y, x, rect.h, width))
        x += width
    return regions


def split_rows(rect: Rect, percentages: tuple[int, ...]) -> list[Rect]:
    regions: list[Rect] = []
    y = rect.y
    for height in split_percent(rect.h, percentages):
        regions.append(Rect(y, rect.x, height, rect.w))
        y += height
    return regions


def split_frame(screen: Rect, header: int, footer: int) -> tuple[Rect, Rect, Rect]:
    """Header and footer keep fixed heights; the body gets what is left."""
    header_h = min(header, screen.h)
    footer_h = min(footer, max(0, screen.h - header_h))
    body_h = max(0, screen.h - header_h - footer_h)
    return (
        Rect(screen.y, screen.x, header_h, screen.w),
        Rect(screen.y + header_h, screen.x, body_h, screen.w),
        Rect(screen.y + header_h + body_h, screen.x, footer_h, screen.w),
    )
