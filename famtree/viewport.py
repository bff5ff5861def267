"""Pan/zoom transforms computed from layout geometry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .layout import BoundingBox, TreeLayout

DEFAULT_DURATION = 500
FIT_MARGIN = 0.95


@dataclass(frozen=True)
class ViewTransform:
    """Zoom transform: a point ``p`` is drawn at ``k * p + (x, y)``.

    ``duration`` is a hint for the animation layer and takes no part in the
    arithmetic.
    """

    x: float
    y: float
    k: float
    duration: int = DEFAULT_DURATION

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        return self.k * px + self.x, self.k * py + self.y

    def invert(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "k": self.k, "duration": self.duration}


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float
    margin_top: float = 0.0

    def reset_view(self, layout: Optional[TreeLayout] = None, duration: int = DEFAULT_DURATION) -> ViewTransform:
        """Put the root at the horizontal centre, ``margin_top`` from the top, zoom 1."""
        root_x = root_y = 0.0
        if layout is not None and layout.root is not None:
            root_x, root_y = layout.root.center_x, layout.root.center_y
        return ViewTransform(x=self.width / 2 - root_x, y=self.margin_top - root_y, k=1.0, duration=duration)

    def zoom_to_point(self, x: float, y: float, zoom: float = 1.0, duration: int = DEFAULT_DURATION) -> ViewTransform:
        return ViewTransform(
            x=self.width / 2 - zoom * x,
            y=self.height / 2 - zoom * y,
            k=zoom,
            duration=duration,
        )

    def zoom_to_node(
        self,
        layout: TreeLayout,
        node_id: int,
        zoom: float = 2.0,
        duration: int = DEFAULT_DURATION,
    ) -> Optional[ViewTransform]:
        laid_out = layout.node(node_id)
        if laid_out is None:
            return None
        return self.zoom_to_point(laid_out.center_x, laid_out.center_y, zoom, duration)

    def zoom_to_person(
        self,
        layout: TreeLayout,
        person_id: str,
        zoom: float = 2.0,
        duration: int = DEFAULT_DURATION,
    ) -> Optional[ViewTransform]:
        laid_out = layout.node_for_person(person_id)
        if laid_out is None:
            return None
        return self.zoom_to_point(laid_out.center_x, laid_out.center_y, zoom, duration)

    def zoom_to_fit(self, box: BoundingBox, duration: int = DEFAULT_DURATION) -> ViewTransform:
        """Scale so the box fills 95% of the tighter viewport axis, centred."""
        ratio = max(box.width / self.width, box.height / self.height)
        scale = FIT_MARGIN / ratio if ratio > 0 else 1.0
        return ViewTransform(
            x=self.width / 2 - scale * (box.x + box.width / 2),
            y=self.height / 2 - scale * (box.y + box.height / 2),
            k=scale,
            duration=duration,
        )


__all__ = ["DEFAULT_DURATION", "FIT_MARGIN", "ViewTransform", "Viewport"]
