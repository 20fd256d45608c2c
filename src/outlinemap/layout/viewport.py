"""Pan/zoom transform applied on top of the layout.

The transform is independent of the physics: it changes where layout
coordinates land on screen, never the layout itself. Screen coordinates
are layout units measured from the centre of the canvas.
"""

from dataclasses import dataclass


@dataclass
class Viewport:
    """Affine zoom transform ``screen = world * k + (x, y)``.

    Attributes:
        k: Zoom factor, kept within [zoom_min, zoom_max]
        x: Horizontal translation in screen units
        y: Vertical translation in screen units
    """

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0
    zoom_min: float = 0.1
    zoom_max: float = 4.0

    def apply(self, wx: float, wy: float) -> tuple[float, float]:
        """Map a layout point to screen units."""
        return wx * self.k + self.x, wy * self.k + self.y

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        """Map a screen point back to layout units."""
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def scale_by(self, factor: float, anchor: tuple[float, float] = (0.0, 0.0)) -> None:
        """Zoom by ``factor`` keeping the layout point under ``anchor`` fixed.

        Args:
            factor: Multiplier for k (clamped to the zoom extent)
            anchor: Screen point that should not move
        """
        ax, ay = anchor
        wx, wy = self.invert(ax, ay)
        self.k = min(self.zoom_max, max(self.zoom_min, self.k * factor))
        self.x = ax - wx * self.k
        self.y = ay - wy * self.k

    def pan_by(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def reset(self) -> None:
        self.k = 1.0
        self.x = 0.0
        self.y = 0.0
