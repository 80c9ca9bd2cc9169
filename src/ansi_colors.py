"""ANSI escape sequences and the 16-colour pixel classifier."""

from enum import Enum

import numpy as np

ESC = "\x1b"
CSI = ESC + "["
RESET = CSI + "0m"
TRUECOLOR = CSI + "38;2;"
CLEAR_SCREEN = CSI + "2J" + CSI + "H"
HIDE_CURSOR = CSI + "?25l"
SHOW_CURSOR = CSI + "?25h"

DARK_THRESHOLD = 30
GRAYSCALE_VARIANCE = 20
VERY_BRIGHT = 200
BRIGHT = 120
MEDIUM_BRIGHT = 128


class ColorCategory(Enum):
    BLACK = CSI + "30m"
    RED = CSI + "31m"
    GREEN = CSI + "32m"
    BLUE = CSI + "34m"
    WHITE = CSI + "37m"
    BRIGHT_BLACK = CSI + "90m"
    BRIGHT_RED = CSI + "91m"
    BRIGHT_GREEN = CSI + "92m"
    BRIGHT_BLUE = CSI + "94m"
    BRIGHT_WHITE = CSI + "97m"


CATEGORIES = tuple(ColorCategory)
_CATEGORY_INDEX = {category: i for i, category in enumerate(CATEGORIES)}
CATEGORY_ESCAPES = np.array([category.value for category in CATEGORIES], dtype=object)
CATEGORY_ESCAPES.flags.writeable = False


def ansi_category(r, g, b, brightness):
    if brightness < DARK_THRESHOLD:
        return ColorCategory.BLACK

    if max(r, g, b) - min(r, g, b) < GRAYSCALE_VARIANCE:
        if brightness > VERY_BRIGHT:
            return ColorCategory.BRIGHT_WHITE
        if brightness > BRIGHT:
            return ColorCategory.WHITE
        return ColorCategory.BRIGHT_BLACK

    bright = brightness > MEDIUM_BRIGHT
    if r > g and r > b:
        return ColorCategory.BRIGHT_RED if bright else ColorCategory.RED
    if g > r and g > b:
        return ColorCategory.BRIGHT_GREEN if bright else ColorCategory.GREEN
    if b > r and b > g:
        return ColorCategory.BRIGHT_BLUE if bright else ColorCategory.BLUE
    # two channels tied for the maximum
    return ColorCategory.WHITE


def classify_ansi(r, g, b, brightness):
    """
    Array form of ansi_category.

    Takes integer arrays of equal shape and returns an array of indices into
    CATEGORIES. np.select keeps the first matching condition, so the condition
    list mirrors the branch order of ansi_category exactly.
    """
    r = np.asarray(r, dtype=np.int32)
    g = np.asarray(g, dtype=np.int32)
    b = np.asarray(b, dtype=np.int32)
    brightness = np.asarray(brightness, dtype=np.int32)

    dark = brightness < DARK_THRESHOLD
    spread = np.maximum(np.maximum(r, g), b) - np.minimum(np.minimum(r, g), b)
    gray = spread < GRAYSCALE_VARIANCE
    bright = brightness > MEDIUM_BRIGHT
    red = (r > g) & (r > b)
    green = (g > r) & (g > b)
    blue = (b > r) & (b > g)

    choices = [
        (dark, ColorCategory.BLACK),
        (gray & (brightness > VERY_BRIGHT), ColorCategory.BRIGHT_WHITE),
        (gray & (brightness > BRIGHT), ColorCategory.WHITE),
        (gray, ColorCategory.BRIGHT_BLACK),
        (red & bright, ColorCategory.BRIGHT_RED),
        (red, ColorCategory.RED),
        (green & bright, ColorCategory.BRIGHT_GREEN),
        (green, ColorCategory.GREEN),
        (blue & bright, ColorCategory.BRIGHT_BLUE),
        (blue, ColorCategory.BLUE),
    ]
    return np.select(
        [condition for condition, _ in choices],
        [_CATEGORY_INDEX[category] for _, category in choices],
        default=_CATEGORY_INDEX[ColorCategory.WHITE],
    )


def true_color_escape(r, g, b):
    return f"{TRUECOLOR}{r};{g};{b}m"
