"""
terrain.py
Procedural 2D lunar surface for the lander game

Provides:
- Random height profile of N equal segments (heights as viewport fractions)
- One guaranteed-flat safe landing pad, never on the outer segments
- Piecewise-linear height sampling in viewport pixels (origin top-left)
- Pixel helpers for renderers (surface polyline, highlighted pad)

The random source is injectable so tests can pin the generated profile.
"""

import logging
from dataclasses import dataclass

import numpy as np

import lander_constants as LC

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SafeZone:
    """Flat landing pad: horizontal extent in range units, height as a viewport fraction."""
    start_range: float
    end_range: float
    height: float

    def contains(self, position):
        """Inclusive on both ends."""
        return self.start_range <= position <= self.end_range

    @property
    def center(self):
        return 0.5 * (self.start_range + self.end_range)


@dataclass(frozen=True, eq=False)
class Terrain:
    """
    Generated surface profile.

    Attributes:
        heights: (N+1,) read-only array of normalized heights
        safe_zone: SafeZone of the flat pad
        safe_index: index of the flat segment (heights[i] == heights[i+1])
        max_range: horizontal span the profile covers (m)
    """
    heights: np.ndarray
    safe_zone: SafeZone
    safe_index: int
    max_range: float

    @property
    def num_segments(self):
        return max(len(self.heights) - 1, 0)

    @property
    def segment_range(self):
        return self.max_range / self.num_segments

    @classmethod
    def empty(cls, max_range=LC.MAX_RANGE):
        """Placeholder used before the first attempt starts."""
        return cls(
            heights=_freeze(np.zeros(0)),
            safe_zone=SafeZone(0.0, 0.0, 0.0),
            safe_index=-1,
            max_range=float(max_range),
        )


def _freeze(values):
    arr = np.array(values, dtype=float)
    arr.flags.writeable = False
    return arr


def _as_rng(rng):
    """Accept None, an int seed, a numpy Generator or any object with uniform()/integers()."""
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    return rng


def generate_terrain(num_segments=LC.TERRAIN_SEGMENTS, max_range=LC.MAX_RANGE, rng=None,
                     min_height=LC.TERRAIN_MIN_HEIGHT, max_height=LC.TERRAIN_MAX_HEIGHT,
                     pad_max_height=LC.SAFE_PAD_MAX_HEIGHT):
    """
    Generate a random surface profile with one flat landing pad.

    The pad occupies one segment chosen uniformly among the interior ones
    (never the first or last). Both of its endpoints are lowered to
    min(left, right, pad_max_height) so the pad is exactly flat.

    Args:
        num_segments: Number of equal segments (>= 3)
        max_range: Horizontal span in range units (m)
        rng: Random source (None, seed, numpy Generator or compatible stub)
        min_height: Lowest sample, fraction of viewport height
        max_height: Highest sample, fraction of viewport height
        pad_max_height: Cap on the pad height

    Returns:
        Terrain
    """
    if num_segments < 3:
        raise ValueError(f"Need at least 3 segments for an interior landing pad, got {num_segments}")
    if max_range <= 0:
        raise ValueError(f"max_range must be positive, got {max_range}")

    rng = _as_rng(rng)

    heights = np.asarray(rng.uniform(min_height, max_height, size=num_segments + 1), dtype=float)
    if heights.shape != (num_segments + 1,):
        raise ValueError(f"Random source returned {heights.shape[0]} heights, "
                         f"expected {num_segments + 1}")
    heights = heights.copy()

    # integers() excludes the upper bound: index in [1, num_segments - 2]
    safe_index = int(rng.integers(1, num_segments - 1))

    flat_height = min(heights[safe_index], heights[safe_index + 1], pad_max_height)
    heights[safe_index] = flat_height
    heights[safe_index + 1] = flat_height

    segment_range = max_range / num_segments
    safe_zone = SafeZone(
        start_range=safe_index * segment_range,
        end_range=(safe_index + 1) * segment_range,
        height=float(flat_height),
    )

    LOGGER.debug("Generated terrain: %d segments, pad at segment %d [%.1f, %.1f] height %.3f",
                 num_segments, safe_index, safe_zone.start_range, safe_zone.end_range,
                 safe_zone.height)

    return Terrain(
        heights=_freeze(heights),
        safe_zone=safe_zone,
        safe_index=safe_index,
        max_range=float(max_range),
    )


class TerrainSampler:
    """Surface height lookup in viewport pixels."""

    def __init__(self, terrain, width=LC.VIEWPORT_WIDTH, height=LC.VIEWPORT_HEIGHT):
        """
        Args:
            terrain: Terrain to sample
            width: Viewport width (px)
            height: Viewport height (px)
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must have positive size, got {width}x{height}")
        self.terrain = terrain
        self.width = width
        self.height = height

    @property
    def segment_width(self):
        return self.width / self.terrain.num_segments

    def interpolate(self, segment, t):
        """Normalized height inside one segment at local offset t in [0, 1]."""
        h0 = self.terrain.heights[segment]
        h1 = self.terrain.heights[segment + 1]
        return float(h0 * (1 - t) + h1 * t)

    def height_at(self, x_pix):
        """
        Surface Y coordinate (px, origin top-left) at horizontal pixel x_pix.

        x_pix at the right edge falls in the last segment. Returns the full
        viewport height when no terrain has been generated.
        """
        if len(self.terrain.heights) == 0:
            return float(self.height)

        num_segments = self.terrain.num_segments
        segment_width = self.segment_width
        i = int(np.floor(x_pix / segment_width))
        i = min(max(i, 0), num_segments - 1)
        t = (x_pix - i * segment_width) / segment_width

        height_norm = self.interpolate(i, t)
        return self.height - height_norm * self.height

    def surface_points(self):
        """Pixel polyline of the surface, one point per height sample."""
        if len(self.terrain.heights) == 0:
            return []
        segment_width = self.segment_width
        return [
            (i * segment_width, self.height - h * self.height)
            for i, h in enumerate(self.terrain.heights)
        ]

    def safe_pad_pixels(self):
        """
        Pad extent in pixels.

        Returns:
            tuple: (x_start, x_end, y)
        """
        zone = self.terrain.safe_zone
        scale = self.width / self.terrain.max_range
        return (
            zone.start_range * scale,
            zone.end_range * scale,
            self.height - zone.height * self.height,
        )
