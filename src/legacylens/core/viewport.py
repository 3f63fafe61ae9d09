"""
Viewport fitting.

After every snapshot replacement the renderer is told where to center the
camera and how far to zoom so the whole drawing fits the canvas. The only
state kept is the last bounding box, so an unchanged drawing produces no
refit.
"""

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

from ..config import ViewportConfig
from .types import Position

logger = logging.getLogger(__name__)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Position:
        return Position(x=(self.min_x + self.max_x) / 2, y=(self.min_y + self.max_y) / 2)


class FitInstruction(BaseModel):
    """Camera center (in layout coordinates) and zoom factor."""

    model_config = ConfigDict(frozen=True)

    center_x: float
    center_y: float
    zoom: float
    bounds: BoundingBox


def bounding_box(
    positions: Mapping[str, Position],
    node_width: float,
    node_height: float,
) -> Optional[BoundingBox]:
    """Box enclosing every node's top-left position plus its box size."""
    if not positions:
        return None
    xs = [p.x for p in positions.values()]
    ys = [p.y for p in positions.values()]
    return BoundingBox(
        min_x=min(xs),
        min_y=min(ys),
        max_x=max(xs) + node_width,
        max_y=max(ys) + node_height,
    )


class ViewportSync:
    """
    Emits a FitInstruction whenever the laid-out bounding box changes.
    """

    def __init__(self, config: Optional[ViewportConfig] = None):
        self.config = config or ViewportConfig()
        self._last_bounds: Optional[BoundingBox] = None

    @property
    def last_bounds(self) -> Optional[BoundingBox]:
        return self._last_bounds

    def sync(
        self,
        positions: Mapping[str, Position],
        node_width: float,
        node_height: float,
    ) -> Optional[FitInstruction]:
        """
        Compute the fit for a new layout.

        Returns:
            FitInstruction, or None when the bounding box is unchanged (or
            there is nothing to fit).
        """
        bounds = bounding_box(positions, node_width, node_height)
        if bounds is None:
            return None
        if bounds == self._last_bounds:
            logger.debug("Bounding box unchanged, skipping refit")
            return None

        self._last_bounds = bounds
        return self.fit(bounds)

    def fit(self, bounds: BoundingBox) -> FitInstruction:
        cfg = self.config
        padded_w = bounds.width * (1 + 2 * cfg.padding)
        padded_h = bounds.height * (1 + 2 * cfg.padding)

        zoom = min(cfg.width / padded_w, cfg.height / padded_h)
        zoom = max(cfg.min_zoom, min(cfg.max_zoom, zoom))

        center = bounds.center
        return FitInstruction(center_x=center.x, center_y=center.y, zoom=zoom, bounds=bounds)

    def reset(self) -> None:
        self._last_bounds = None
