"""Glyph ramp used to turn brightness into characters."""

import numpy as np

# Densest glyph first: index 0 is used for black, the last entry for white.
GLYPH_RAMP = "@%#*+=-:. "

GLYPH_ARRAY = np.array(list(GLYPH_RAMP), dtype=object)
GLYPH_ARRAY.flags.writeable = False


def brightness_to_glyph(brightness):
    index = brightness * (len(GLYPH_RAMP) - 1) // 255
    return GLYPH_RAMP[index]


def glyph_indices(brightness):
    """Vectorised brightness_to_glyph: returns ramp indices for a brightness array."""
    levels = np.asarray(brightness, dtype=np.int32)
    return levels * (len(GLYPH_RAMP) - 1) // 255


def glyphs_for(brightness):
    return GLYPH_ARRAY[glyph_indices(brightness)]
