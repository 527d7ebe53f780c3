"""Velocity-Verlet force layout in the spirit of d3-force.

Only the pieces a beeswarm needs are here: positioning forces along x and y
and a collision force. Simulations never run on a timer; callers tick them
synchronously.
"""
import math
from typing import Any, NamedTuple

_INITIAL_RADIUS = 10.0
_INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


def _lcg(seed=1):
    # same linear congruential source as d3-force, so runs are reproducible
    a, c, m = 1664525, 1013904223, 4294967296
    state = [seed]

    def random():
        state[0] = (a * state[0] + c) % m
        return state[0] / m

    return random


def _jiggle(random):
    return (random() - 0.5) * 1e-6


def _phyllotaxis(i):
    radius = _INITIAL_RADIUS * math.sqrt(0.5 + i)
    angle = i * _INITIAL_ANGLE
    return radius * math.cos(angle), radius * math.sin(angle)


def _finite(*values):
    return all(math.isfinite(v) for v in values)


def _accessor(value):
    return value if callable(value) else (lambda node: value)


class SimulationNode:
    __slots__ = ("index", "datum", "x", "y", "vx", "vy", "fx", "fy")

    def __init__(self, datum=None, x=math.nan, y=math.nan):
        self.index = None
        self.datum = datum
        self.x = x
        self.y = y
        self.vx = math.nan
        self.vy = math.nan
        self.fx = None
        self.fy = None

    def __repr__(self):
        return f"SimulationNode(index={self.index}, x={self.x:.3f}, y={self.y:.3f})"


class PositionedPoint(NamedTuple):
    """A datum together with the coordinates a layout resolved for it."""

    datum: Any
    x: float
    y: float


class ForceSimulation:
    def __init__(self, nodes=None):
        self.alpha_value = 1.0
        self.alpha_min = 0.001
        self.alpha_decay = 1 - self.alpha_min ** (1 / 300)
        self.alpha_target = 0.0
        self.velocity_decay = 0.6
        self.random = _lcg()
        self._forces = {}
        self.nodes = []
        self.set_nodes(nodes or [])

    def set_nodes(self, nodes):
        self.nodes = list(nodes)
        for i, node in enumerate(self.nodes):
            node.index = i
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if math.isnan(node.x) or math.isnan(node.y):
                # phyllotaxis arrangement around the origin
                node.x, node.y = _phyllotaxis(i)
            if math.isnan(node.vx) or math.isnan(node.vy):
                node.vx = node.vy = 0.0
        for force in self._forces.values():
            force.initialize(self.nodes, self.random)
        return self

    def force(self, name, force=None):
        if force is None:
            return self._forces.get(name)
        force.initialize(self.nodes, self.random)
        self._forces[name] = force
        return self

    def alpha(self, value=None):
        if value is None:
            return self.alpha_value
        self.alpha_value = float(value)
        return self

    def stop(self):
        """Kept for parity with d3; there is no timer to stop."""
        return self

    def tick(self, iterations=1):
        for _ in range(iterations):
            self.alpha_value += (self.alpha_target - self.alpha_value) * self.alpha_decay
            for force in self._forces.values():
                force(self.alpha_value)
            for node in self.nodes:
                if node.fx is None:
                    node.vx *= self.velocity_decay
                    node.x += node.vx
                else:
                    node.x, node.vx = node.fx, 0.0
                if node.fy is None:
                    node.vy *= self.velocity_decay
                    node.y += node.vy
                else:
                    node.y, node.vy = node.fy, 0.0
        return self


class ForceX:
    """Pull each node's x towards a target with the given strength."""

    def __init__(self, x=0.0, strength=0.1):
        self._x = _accessor(x)
        self._strength = _accessor(strength)
        self._nodes = []
        self._targets = []
        self._strengths = []

    def initialize(self, nodes, random=None):
        self._nodes = nodes
        self._targets = [float(self._x(node)) for node in nodes]
        self._strengths = [float(self._strength(node)) for node in nodes]

    def _axis(self, node):
        return node.x

    def _push(self, node, delta):
        node.vx += delta

    def __call__(self, alpha):
        for node in self._nodes:
            target = self._targets[node.index]
            delta = (target - self._axis(node)) * self._strengths[node.index] * alpha
            self._push(node, delta)


class ForceY(ForceX):
    """Pull each node's y towards a target with the given strength."""

    def __init__(self, y=0.0, strength=0.1):
        super().__init__(y, strength)

    def _axis(self, node):
        return node.y

    def _push(self, node, delta):
        node.vy += delta


class _Grid:
    """Uniform bucket grid standing in for d3's quadtree."""

    def __init__(self, nodes, cell):
        self.cell = cell
        self.buckets = {}
        for node in nodes:
            if not _finite(node.x, node.y):
                continue
            key = (math.floor(node.x / cell), math.floor(node.y / cell))
            self.buckets.setdefault(key, []).append(node)

    def near(self, x, y, reach):
        cell = self.cell
        for gx in range(math.floor((x - reach) / cell), math.floor((x + reach) / cell) + 1):
            for gy in range(math.floor((y - reach) / cell), math.floor((y + reach) / cell) + 1):
                yield from self.buckets.get((gx, gy), ())


class ForceCollide:
    """Treat nodes as circles and push overlapping pairs apart."""

    def __init__(self, radius=1.0, strength=1.0, iterations=1):
        self._radius = _accessor(radius)
        self.strength = float(strength)
        self.iterations = int(iterations)
        self._nodes = []
        self._radii = []
        self._random = None

    def initialize(self, nodes, random=None):
        self._nodes = nodes
        self._radii = [float(self._radius(node)) for node in nodes]
        self._random = random or _lcg()

    def __call__(self, alpha):
        if not self._nodes:
            return
        max_radius = max(self._radii)
        cell = max(2 * max_radius, 1e-6)
        for _ in range(self.iterations):
            grid = _Grid(self._nodes, cell)
            for node in self._nodes:
                ri = self._radii[node.index]
                ri2 = ri * ri
                xi = node.x + node.vx
                yi = node.y + node.vy
                if not _finite(xi, yi):
                    continue
                for other in grid.near(xi, yi, ri + max_radius):
                    if other.index <= node.index:
                        continue
                    rj = self._radii[other.index]
                    r = ri + rj
                    x = xi - other.x - other.vx
                    y = yi - other.y - other.vy
                    dist2 = x * x + y * y
                    if dist2 >= r * r:
                        continue
                    if x == 0:
                        x = _jiggle(self._random)
                        dist2 += x * x
                    if y == 0:
                        y = _jiggle(self._random)
                        dist2 += y * y
                    dist = math.sqrt(dist2)
                    push = (r - dist) / dist * self.strength
                    x *= push
                    y *= push
                    rj2 = rj * rj
                    share = rj2 / (ri2 + rj2)
                    node.vx += x * share
                    node.vy += y * share
                    other.vx -= x * (1 - share)
                    other.vy -= y * (1 - share)


def resolve_collisions(
    points,
    targets,
    min_separation,
    y=0.0,
    x_strength=2.0,
    y_strength=0.1,
    ticks_per_round=10,
):
    """Lay points out near their target x without overlapping.

    Nodes start at their target x, fanned out vertically around ``y``.
    Runs one round of ``ticks_per_round`` ticks per point, so the amount of
    relaxation grows with the number of points. Every call starts from a fresh
    simulation, so identical inputs give identical positions.
    """
    points = list(points)
    targets = list(targets)
    if len(targets) != len(points):
        raise ValueError("resolve_collisions needs one target per point")
    nodes = []
    for i, (point, target) in enumerate(zip(points, targets)):
        _, dy = _phyllotaxis(i)
        nodes.append(SimulationNode(point, x=float(target), y=y + dy))
    simulation = (
        ForceSimulation(nodes)
        .force("x", ForceX(lambda node: targets[node.index], x_strength))
        .force("y", ForceY(y, y_strength))
        .force("collide", ForceCollide(min_separation))
        .stop()
    )
    for _ in range(len(nodes)):
        simulation.tick(ticks_per_round)
    return [PositionedPoint(node.datum, node.x, node.y) for node in nodes]
