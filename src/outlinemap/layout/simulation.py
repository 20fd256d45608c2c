"""Force-directed layout simulation.

A small numpy port of the d3-force model the graph view is designed
around: an ``alpha`` "temperature" decays toward ``alpha_target`` every
tick, and four forces nudge node velocities (link springs, many-body
repulsion, centering, collision). The simulation is an owned object with
an explicit start/stop lifecycle; a rebuilt tree gets a new simulation.
"""

import math
from typing import Optional, Sequence

import numpy as np
import structlog

from outlinemap.layout.graph import GraphLink, GraphNode
from outlinemap.models.config import SimulationConfig

logger = structlog.get_logger()

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
DISTANCE_MIN_SQUARED = 1.0


def phyllotaxis(count: int) -> np.ndarray:
    """Deterministic starting positions on a sunflower spiral.

    Args:
        count: Number of nodes

    Returns:
        Array of shape (count, 2)
    """
    index = np.arange(count, dtype=float)
    radius = INITIAL_RADIUS * np.sqrt(0.5 + index)
    angle = index * INITIAL_ANGLE
    return np.column_stack((radius * np.cos(angle), radius * np.sin(angle)))


class ForceSimulation:
    """Live force layout for one flattened heading tree.

    Positions are in layout units around the origin. Velocity forces run
    in d3 order (link, charge, center, collide) and are then integrated
    with friction. Pinned nodes (``fx``/``fy`` in d3 terms) are held in
    place with zero velocity.

    Example:
        >>> nodes, links = flatten(outline.root)
        >>> sim = ForceSimulation(nodes, links)
        >>> sim.run()
        >>> x, y = sim.position(0)
    """

    def __init__(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        config: Optional[SimulationConfig] = None,
    ):
        self.nodes = list(nodes)
        self.links = list(links)
        self.config = config or SimulationConfig()

        count = len(self.nodes)
        self.positions = phyllotaxis(count)
        self.velocities = np.zeros((count, 2))
        self._fixed = np.full((count, 2), np.nan)
        self._rng = np.random.default_rng(self.config.seed)
        self._index_by_id = {node.id: node.index for node in self.nodes}

        self.alpha = 1.0
        self.alpha_target = 0.0
        self.ticks = 0
        self._running = False
        self._dragging: Optional[int] = None

        self._sources = np.array([link.source for link in self.links], dtype=int)
        self._targets = np.array([link.target for link in self.links], dtype=int)
        if self.links:
            degree = np.bincount(
                np.concatenate((self._sources, self._targets)), minlength=count
            ).astype(float)
            source_degree = degree[self._sources]
            target_degree = degree[self._targets]
            self._link_strength = 1.0 / np.minimum(source_degree, target_degree)
            self._link_bias = source_degree / (source_degree + target_degree)
        else:
            self._link_strength = np.zeros(0)
            self._link_bias = np.zeros(0)

        self._radii = np.full(count, self.config.collide_radius)

    # Lifecycle

    @property
    def running(self) -> bool:
        return self._running

    @property
    def settled(self) -> bool:
        return self.alpha < self.config.alpha_min

    @property
    def dragging(self) -> Optional[int]:
        return self._dragging

    def start(self) -> None:
        """Begin (or resume) ticking from the current alpha."""
        self._running = True
        logger.debug("simulation_started", nodes=len(self.nodes), alpha=self.alpha)

    def stop(self) -> None:
        """Stop ticking. Positions are kept."""
        if self._running:
            logger.debug("simulation_stopped", ticks=self.ticks, alpha=self.alpha)
        self._running = False

    def restart(self) -> None:
        """Resume ticking without resetting alpha (used when a drag begins)."""
        self._running = True

    def reheat(self, alpha: float = 1.0) -> None:
        """Raise alpha and resume so the whole layout re-settles."""
        self.alpha = alpha
        self._running = True

    # Queries

    def index_of(self, node_id: str) -> Optional[int]:
        return self._index_by_id.get(node_id)

    def position(self, index: int) -> tuple[float, float]:
        x, y = self.positions[index]
        return float(x), float(y)

    def is_pinned(self, index: int) -> bool:
        return not np.isnan(self._fixed[index, 0])

    def kinetic_energy(self) -> float:
        return float(0.5 * np.sum(self.velocities ** 2))

    # Stepping

    def tick(self) -> None:
        """Run exactly one force-resolution pass."""
        cfg = self.config
        self.alpha += (self.alpha_target - self.alpha) * cfg.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_center()
        self._apply_collide()

        self.velocities *= 1.0 - cfg.velocity_decay
        self.positions += self.velocities

        pinned = ~np.isnan(self._fixed[:, 0])
        if pinned.any():
            self.positions[pinned] = self._fixed[pinned]
            self.velocities[pinned] = 0.0

        self.ticks += 1

    def advance(self) -> bool:
        """Tick once if running; stop when alpha falls below alpha_min.

        Returns:
            True while the simulation is still running
        """
        if not self._running:
            return False
        self.tick()
        if self.settled:
            self.stop()
        return self._running

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Tick until settled, without a render loop.

        Args:
            max_ticks: Upper bound (defaults to config.max_headless_ticks)

        Returns:
            Number of ticks performed
        """
        limit = max_ticks if max_ticks is not None else self.config.max_headless_ticks
        first_tick = self.ticks
        self.start()
        while self.ticks - first_tick < limit and self.advance():
            pass
        self.stop()
        return self.ticks - first_tick

    # Dragging

    def drag_start(self, index: int) -> None:
        """Pin a node where it is and keep the layout warm while it moves."""
        if self._dragging is not None and self._dragging != index:
            self.drag_end(self._dragging)
        self._dragging = index
        self._fixed[index] = self.positions[index]
        self.alpha_target = self.config.alpha_target_drag
        self.restart()

    def drag_to(self, index: int, x: float, y: float) -> None:
        if self._dragging != index:
            return
        self._fixed[index] = (x, y)
        self.positions[index] = (x, y)

    def drag_end(self, index: int) -> None:
        """Release a dragged node; alpha then decays so neighbours resettle."""
        if self._dragging != index:
            return
        self._fixed[index] = np.nan
        self._dragging = None
        self.alpha_target = 0.0

    def cancel_drag(self) -> None:
        if self._dragging is not None:
            self.drag_end(self._dragging)

    # Forces

    def _jiggle(self, shape) -> np.ndarray:
        return (self._rng.random(shape) - 0.5) * 1e-6

    def _apply_links(self) -> None:
        if not self.links:
            return
        cfg = self.config
        predicted = self.positions + self.velocities
        delta = predicted[self._targets] - predicted[self._sources]

        zero = ~delta.any(axis=1)
        if zero.any():
            delta[zero] = self._jiggle((int(zero.sum()), 2))

        distance = np.hypot(delta[:, 0], delta[:, 1])
        scale = (distance - cfg.link_distance) / distance * self.alpha * self._link_strength
        delta *= scale[:, None]

        np.add.at(self.velocities, self._targets, -delta * self._link_bias[:, None])
        np.add.at(self.velocities, self._sources, delta * (1.0 - self._link_bias)[:, None])

    def _apply_charge(self) -> None:
        count = len(self.nodes)
        if count < 2 or self.config.charge_strength == 0:
            return

        # diff[i, j] points from node i to node j
        diff = self.positions[None, :, :] - self.positions[:, None, :]
        off_diagonal = ~np.eye(count, dtype=bool)
        coincident = off_diagonal & ~diff.any(axis=2)
        if coincident.any():
            diff[coincident] = self._jiggle((int(coincident.sum()), 2))

        distance_sq = np.sum(diff ** 2, axis=2)
        near = distance_sq < DISTANCE_MIN_SQUARED
        distance_sq[near] = np.sqrt(DISTANCE_MIN_SQUARED * distance_sq[near])
        np.fill_diagonal(distance_sq, np.inf)

        weight = self.config.charge_strength * self.alpha / distance_sq
        self.velocities += np.sum(diff * weight[:, :, None], axis=1)

    def _apply_center(self) -> None:
        if not self.nodes:
            return
        shift = self.positions.mean(axis=0) * self.config.center_strength
        self.positions -= shift

    def _apply_collide(self) -> None:
        count = len(self.nodes)
        if count < 2 or self.config.collide_radius <= 0:
            return

        first, second = np.triu_indices(count, k=1)
        predicted = self.positions + self.velocities
        delta = predicted[first] - predicted[second]
        reach = self._radii[first] + self._radii[second]

        distance_sq = np.sum(delta ** 2, axis=1)
        overlapping = distance_sq < reach ** 2
        if not overlapping.any():
            return

        first, second = first[overlapping], second[overlapping]
        delta, reach = delta[overlapping], reach[overlapping]

        zero = ~delta.any(axis=1)
        if zero.any():
            delta[zero] = self._jiggle((int(zero.sum()), 2))

        distance = np.hypot(delta[:, 0], delta[:, 1])
        push = delta * ((reach - distance) / distance)[:, None]

        r1 = self._radii[first] ** 2
        r2 = self._radii[second] ** 2
        share = (r2 / (r1 + r2))[:, None]

        np.add.at(self.velocities, first, push * share)
        np.add.at(self.velocities, second, -push * (1.0 - share))
