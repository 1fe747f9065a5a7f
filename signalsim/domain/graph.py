import networkx as nx
from typing import Dict, List, Tuple

from signalsim.domain.models import Axis, Direction, Lane, Position
from signalsim.domain import config

# Unit vector of travel in screen coordinates
HEADINGS: Dict[Direction, Tuple[float, float]] = {
    Direction.NORTH: (0.0, -1.0),
    Direction.SOUTH: (0.0, 1.0),
    Direction.EAST: (1.0, 0.0),
    Direction.WEST: (-1.0, 0.0),
}

AXIS_OF: Dict[Direction, Axis] = {
    Direction.NORTH: Axis.NS,
    Direction.SOUTH: Axis.NS,
    Direction.EAST: Axis.EW,
    Direction.WEST: Axis.EW,
}

class IntersectionLayout:
    """Approaches of a single four-way intersection.

    Nodes are approach directions; an edge joins two approaches whose
    flows cross, so they may never hold right of way together.
    """

    def __init__(self, center_x: float = config.CENTER_X, center_y: float = config.CENTER_Y,
                 width: float = config.WORLD_WIDTH, height: float = config.WORLD_HEIGHT):
        self.center_x = center_x
        self.center_y = center_y
        self.width = width
        self.height = height
        self.graph = nx.Graph()
        for direction in Direction:
            self.graph.add_node(direction, axis=AXIS_OF[direction], heading=HEADINGS[direction])
        for a in Direction:
            for b in Direction:
                if AXIS_OF[a] != AXIS_OF[b]:
                    self.graph.add_edge(a, b)

    def axis_of(self, direction: Direction) -> Axis:
        return self.graph.nodes[direction]["axis"]

    def heading(self, direction: Direction) -> Tuple[float, float]:
        return self.graph.nodes[direction]["heading"]

    def conflicts(self, direction: Direction) -> List[Direction]:
        return list(self.graph.neighbors(direction))

    def in_conflict(self, a: Direction, b: Direction) -> bool:
        return self.graph.has_edge(a, b)

    def distance_to_center(self, position: Position) -> float:
        dx = position.x - self.center_x
        dy = position.y - self.center_y
        return (dx * dx + dy * dy) ** 0.5

    def distance_before_center(self, position: Position, direction: Direction) -> float:
        # Positive while approaching, negative once past the center
        hx, hy = self.heading(direction)
        return (self.center_x - position.x) * hx + (self.center_y - position.y) * hy

    def is_approaching(self, position: Position, direction: Direction) -> bool:
        return self.distance_before_center(position, direction) > 0

    def in_stop_band(self, position: Position, direction: Direction) -> bool:
        return config.STOP_LINE_NEAR <= self.distance_before_center(position, direction) <= config.STOP_LINE_FAR

    def in_box(self, position: Position) -> bool:
        return (abs(position.x - self.center_x) < config.INTERSECTION_HALF_SIZE and
                abs(position.y - self.center_y) < config.INTERSECTION_HALF_SIZE)

    def in_bounds(self, position: Position) -> bool:
        return 0.0 <= position.x <= self.width and 0.0 <= position.y <= self.height

    def spawn_position(self, direction: Direction, lane: Lane) -> Position:
        # Right-hand traffic; the left lane is the one next to the center line
        offset = config.INNER_LANE_OFFSET if lane == Lane.LEFT else config.OUTER_LANE_OFFSET
        if direction == Direction.NORTH:
            return Position(x=self.center_x + offset, y=self.height)
        if direction == Direction.SOUTH:
            return Position(x=self.center_x - offset, y=0.0)
        if direction == Direction.EAST:
            return Position(x=0.0, y=self.center_y + offset)
        return Position(x=self.width, y=self.center_y - offset)

DEFAULT_LAYOUT = IntersectionLayout()
