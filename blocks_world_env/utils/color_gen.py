import colorsys

import numpy as np


def random_color(rng: np.random.Generator, light=False):
    """Draw a visually saturated 8-bit RGB color with a random hue."""
    hue = float(rng.random())
    sat = 0.6 if light else 1.0
    val = 1.0 if light else 0.8
    r, g, b = colorsys.hsv_to_rgb(hue, sat, val)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))
