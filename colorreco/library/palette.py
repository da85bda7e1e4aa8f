"""Display colours for reference classes.

Class ``i`` is drawn with the palette entry ``i % 8``. Entry ``n`` sets each
BGR channel to 255 according to one bit of ``n``:

    blue  = 255 * bit2(n)
    green = 255 * bit1(n)
    red   = 255 * bit0(n)

so class 0 is black, 1 red, 2 green, 3 yellow, 4 blue, 5 magenta, 6 cyan and
7 white. Classes 8 and above reuse these colours.
"""

from typing import List, Tuple

Color = Tuple[int, int, int]  # BGR

PALETTE_SIZE = 8


def _palette_entry(n: int) -> Color:
    blue = 255 if n & 4 else 0
    green = 255 if n & 2 else 0
    red = 255 if n & 1 else 0
    return (blue, green, red)


PALETTE: Tuple[Color, ...] = tuple(_palette_entry(n) for n in range(PALETTE_SIZE))


def class_color(index: int) -> Color:
    """BGR display colour of class ``index``, wrapping every 8 classes."""
    if index < 0:
        raise ValueError(f"Class index must be non-negative, got {index}")
    return PALETTE[index % PALETTE_SIZE]


def palette_for(num_classes: int) -> List[Color]:
    return [class_color(i) for i in range(num_classes)]
