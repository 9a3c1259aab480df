"""
Duct geometry: a straight-walled jet engine channel.

Layout along x (fractions of the duct width):

    0 ── pre-inlet ── 0.125 ── inlet ── 0.375 ── combustion ── 0.625 ── nozzle ── 0.875 ── post-nozzle ── 1

The channel is symmetric about the vertical center. Half-widths are
fractions of the duct height: 0.25 up to the chamber, 0.15 through the
chamber (the throat), 0.20 from the nozzle onwards.

"Area" here is the channel height times a fixed scale factor, a 2D
stand-in for cross-sectional area, only ever used in ratios.
"""

import logging
import math
import numpy as np

logger = logging.getLogger(__name__)

SCALE_FACTOR = 0.1  # channel height -> abstract area unit

# sections in downstream order
PRE_INLET = "pre-inlet"
INLET = "inlet"
COMBUSTION = "combustion"
NOZZLE = "nozzle"
POST_NOZZLE = "post-nozzle"
SECTIONS = (PRE_INLET, INLET, COMBUSTION, NOZZLE, POST_NOZZLE)

# boundary positions, fraction of width
INLET_START = 0.125
COMBUSTION_START = 0.375
NOZZLE_START = 0.625
OUTLET = 0.875

# half-widths, fraction of height
INLET_HALF_WIDTH = 0.25
THROAT_HALF_WIDTH = 0.15
OUTLET_HALF_WIDTH = 0.20


class DuctGeometry:
    """
    Geometry queries for a duct of given width and height.

    All queries are pure functions of x (and y for `is_inside`).
    Derived quantities are recomputed eagerly by `resize`, so a query
    issued after `resize` returns always sees the new dimensions.
    """

    def __init__(self, width: float, height: float):
        self.resize(width, height)

    def resize(self, width: float, height: float):
        """
        Set new dimensions and recompute boundaries and half-widths.

        Non-positive dimensions would give a zero (or negative) channel
        area and a division by zero in the particle area ratio, so they
        are rejected. The geometry is left untouched on error.
        """
        for name, value in (("width", width), ("height", height)):
            if not math.isfinite(value) or value <= 0:
                raise ValueError(
                    f"Duct {name} must be positive and finite, got {value!r}"
                )

        self.width = float(width)
        self.height = float(height)

        self.inlet_half_width = self.height * INLET_HALF_WIDTH
        self.throat_half_width = self.height * THROAT_HALF_WIDTH
        self.outlet_half_width = self.height * OUTLET_HALF_WIDTH

        self.inlet_start = self.width * INLET_START
        self.combustion_start = self.width * COMBUSTION_START
        self.nozzle_start = self.width * NOZZLE_START
        self.outlet = self.width * OUTLET

        logger.debug("Duct resized to %.1f x %.1f", self.width, self.height)

    @property
    def center(self) -> float:
        return self.height / 2.0

    def section(self, x: float) -> str:
        if x < self.inlet_start:
            return PRE_INLET
        if x < self.combustion_start:
            return INLET
        if x < self.nozzle_start:
            return COMBUSTION
        if x < self.outlet:
            return NOZZLE
        return POST_NOZZLE

    def top(self, x: float) -> float:
        """Upper wall y (screen coordinates: smaller y is higher)."""
        if x < self.combustion_start:
            return self.center - self.inlet_half_width
        if x < self.nozzle_start:
            return self.center - self.throat_half_width
        return self.center - self.outlet_half_width

    def bottom(self, x: float) -> float:
        return self.height - self.top(x)

    def local_area(self, x: float) -> float:
        return (self.bottom(x) - self.top(x)) * SCALE_FACTOR

    def is_inside(self, x: float, y: float) -> bool:
        return self.top(x) <= y <= self.bottom(x)

    def random_point(self, noise) -> tuple[float, float]:
        """Point uniform in x over the width, uniform in y between the walls."""
        x = noise.fraction() * self.width
        top = self.top(x)
        y = top + noise.fraction() * (self.bottom(x) - top)
        return x, y

    def profile(self, n_points: int = 200):
        """
        Wall contour for drawing.
        Returns (x, top, bottom) arrays spanning [0, width].
        """
        x = np.linspace(0.0, self.width, n_points)
        top = np.array([self.top(xi) for xi in x])
        return x, top, self.height - top
