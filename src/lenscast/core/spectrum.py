"""Colour representation and display conversion.

Colours are linear RGB triples, nominally in [0, 1] before gamma correction.
The helpers here are the pure colour algebra used by resolvers and the sampling
loop, plus the conversion to 8-bit channels used by encoders.
"""

import math
from dataclasses import dataclass

# Scale used for float -> byte conversion. Slightly below 256 so that 1.0 maps
# to 255 rather than 256 while values still round up toward the next byte.
BYTE_SCALE = 255.99


@dataclass(frozen=True, slots=True)
class Colour:
    """An RGB colour with float channels.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float
    g: float
    b: float

    def as_tuple(self) -> tuple[float, float, float]:
        """Return the channels as a plain tuple."""
        return (self.r, self.g, self.b)


BLACK = Colour(0.0, 0.0, 0.0)
WHITE = Colour(1.0, 1.0, 1.0)
SKY_BLUE = Colour(0.5, 0.75, 1.0)


def add_colours(a: Colour, b: Colour) -> Colour:
    """Channel-wise sum a + b."""
    return Colour(a.r + b.r, a.g + b.g, a.b + b.b)


def scale_colour(c: Colour, k: float) -> Colour:
    """Multiply every channel by k."""
    return Colour(c.r * k, c.g * k, c.b * k)


def divide_colour(c: Colour, k: float) -> Colour:
    """Divide every channel by k."""
    return Colour(c.r / k, c.g / k, c.b / k)


def lerp_colour(a: Colour, b: Colour, t: float) -> Colour:
    """Linearly blend from a (t = 0) to b (t = 1)."""
    return add_colours(scale_colour(a, 1.0 - t), scale_colour(b, t))


def _sqrt_channel(value: float) -> float:
    # Negative channels have no real root; NaN later converts to byte 0.
    return math.sqrt(value) if value >= 0.0 else math.nan


def gamma_correct(c: Colour) -> Colour:
    """Apply gamma 2 correction (square root of each channel).

    Negative channels become NaN, which to_byte_triplet maps to 0, matching
    the float sqrt used by the Taichi backend.
    """
    return Colour(_sqrt_channel(c.r), _sqrt_channel(c.g), _sqrt_channel(c.b))


def channel_to_byte(value: float) -> int:
    """Convert one channel to an unsigned byte.

    The channel is scaled by BYTE_SCALE and truncated toward zero. Nothing is
    clamped before scaling; the integer cast saturates to [0, 255] and maps
    NaN to 0. Callers are expected to pass values in [0, 1].
    """
    scaled = value * BYTE_SCALE
    if math.isnan(scaled) or scaled <= 0.0:
        return 0
    if scaled >= 255.0:
        return 255
    return int(scaled)


def to_byte_triplet(c: Colour) -> tuple[int, int, int]:
    """Convert a colour to an (r, g, b) triple of bytes."""
    return (channel_to_byte(c.r), channel_to_byte(c.g), channel_to_byte(c.b))
