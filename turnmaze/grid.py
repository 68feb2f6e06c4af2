"""
Simple 2d grid representation: points, facing directions, and wall/empty cells.

The y axis points down (row index), so "up" decreases y.

Example usages:
>>> from turnmaze.grid import Grid, Point

>>> Point(1, 2).step("up")
Point(1, 1)

>>> Point(3, 3) - Point(1, 4)
Point(2, -1)

>>> (Point(3, 3) - Point(1, 4)).l1()
3

>>> direction_rotated_right("up"), direction_rotated_left("up")
('right', 'left')

>>> grid = Grid.from_rows(["###", "#.#", "###"])
>>> grid.get(Point(1, 1)), grid.get(Point(0, 0)), grid.get(Point(7, 7))
('empty', 'wall', None)

>>> print(grid.render(lambda point: "#" if grid.get(point) == "wall" else "."))
###
#.#
###
"""
from dataclasses import dataclass, field
from typing import Callable, Iterator, Literal, NamedTuple, TypeGuard

from frozendict import frozendict

Direction = Literal["up", "down", "left", "right"]


# Ordered by clockwise rotation.
directions: list[Direction] = ["up", "right", "down", "left"]


def is_direction(value: str) -> TypeGuard[Direction]:
    return value in directions


def direction_rotated_right(direction: Direction, quarter_turns: int = 1) -> Direction:
    """
    >>> direction_rotated_right("left", 2)
    'right'
    """
    return directions[(directions.index(direction) + quarter_turns) % 4]


def direction_rotated_left(direction: Direction, quarter_turns: int = 1) -> Direction:
    """
    >>> [direction_rotated_left("up", turns) for turns in range(4)]
    ['up', 'left', 'down', 'right']
    """
    return direction_rotated_right(direction, -quarter_turns)


class Point(NamedTuple):
    x: int
    y: int

    def __add__(self, other) -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other) -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def l1(self) -> int:
        return abs(self.x) + abs(self.y)

    def step(self, direction: Direction) -> "Point":
        return self + direction_unit_point[direction]

    @classmethod
    def elem_min(cls, *points: "Point") -> "Point":
        xs, ys = zip(*points)
        return cls(min(xs), min(ys))

    @classmethod
    def elem_max(cls, *points: "Point") -> "Point":
        xs, ys = zip(*points)
        return cls(max(xs), max(ys))

    def __str__(self) -> str:
        return f"Point({self.x}, {self.y})"

    def __repr__(self) -> str:
        return str(self)


direction_unit_point: dict[Direction, Point] = {
    "up": Point(0, -1),
    "down": Point(0, 1),
    "left": Point(-1, 0),
    "right": Point(1, 0),
}


Cell = Literal["wall", "empty"]

cell_chars: dict[str, Cell] = {
    "#": "wall",
    ".": "empty",
}


@dataclass(frozen=True)
class Grid:
    """
    Immutable mapping of points to cells.

    Points missing from the mapping have no cell, and can't be entered.
    Bounds are implicit: the smallest rectangle holding every recorded point.
    """

    cells: frozendict[Point, Cell] = field(default_factory=frozendict)

    @staticmethod
    def from_rows(rows: list[str]) -> "Grid":
        """
        Only wall (#) and empty (.) characters; see turnmaze.maze for full mazes.

        >>> Grid.from_rows(["#.", ".?"])
        Traceback (most recent call last):
          ...
        ValueError: Unknown cell character '?' at Point(1, 1).
        """
        cells: dict[Point, Cell] = {}
        for y, row in enumerate(rows):
            for x, cell_char in enumerate(row):
                if cell_char not in cell_chars:
                    raise ValueError(
                        f"Unknown cell character {cell_char!r} at {Point(x, y)}."
                    )
                cells[Point(x, y)] = cell_chars[cell_char]

        return Grid(frozendict(cells))

    def get(self, point: Point) -> Cell | None:
        return self.cells.get(point)

    def is_passable(self, point: Point) -> bool:
        return self.cells.get(point) == "empty"

    def points(self) -> frozenset[Point]:
        return frozenset(self.cells)

    def empty_points(self) -> frozenset[Point]:
        return frozenset(point for point, cell in self.cells.items() if cell == "empty")

    def min_point(self) -> Point:
        return Point.elem_min(*self.cells.keys())

    def max_point(self) -> Point:
        return Point.elem_max(*self.cells.keys())

    def render(self, point_char: Callable[[Point], str]) -> str:
        if len(self.cells) == 0:
            return ""

        min_point, max_point = self.min_point(), self.max_point()
        return "\n".join(
            "".join(
                point_char(Point(x, y)) for x in range(min_point.x, max_point.x + 1)
            )
            for y in range(min_point.y, max_point.y + 1)
        )

    def __contains__(self, point: object) -> bool:
        return point in self.cells

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.cells)

    def __str__(self) -> str:
        cell_symbols = {cell: cell_char for cell_char, cell in cell_chars.items()}
        return self.render(lambda point: cell_symbols.get(self.cells.get(point), " "))
