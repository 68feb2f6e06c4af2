"""
Mazes: text parsing, and rendering solutions as text or images.

Maze text uses one character per cell:
- '#': wall
- '.': empty
- 'S': the (empty) start cell
- 'E': the (empty) end cell

>>> maze = maze_from_str('''
... #####
... #S..#
... #.#E#
... #####
... '''.strip())

>>> maze.start, maze.end, maze.start_facing
(Point(1, 1), Point(3, 2), 'right')

>>> print(display_solution_str(maze, {Point(1, 1), Point(2, 1), Point(3, 1), Point(3, 2)}))
#####
#SOO#
#.#E#
#####
"""
from dataclasses import dataclass
from typing import AbstractSet

from frozendict import frozendict
from matplotlib.colors import to_rgb
import matplotlib.pyplot as plt
import numpy as np

from turnmaze.errors import MalformedMazeError
from turnmaze.grid import Cell, Direction, Grid, Point, cell_chars, is_direction

START_CHAR = "S"
END_CHAR = "E"

maze_cell_chars: dict[str, Cell] = {
    **cell_chars,
    START_CHAR: "empty",
    END_CHAR: "empty",
}


@dataclass(frozen=True)
class Maze:
    grid: Grid
    start: Point
    end: Point

    # The puzzle starts facing east.
    start_facing: Direction = "right"

    def __post_init__(self):
        for name, point in (("start", self.start), ("end", self.end)):
            if not self.grid.is_passable(point):
                raise MalformedMazeError(
                    f"Maze {name} {point} must be an empty cell, not {self.grid.get(point)}."
                )

        if not is_direction(self.start_facing):
            raise ValueError(f"Unknown start facing {self.start_facing!r}.")


def find_position(text: str, needle: str) -> Point | None:
    """
    >>> find_position("#..\\n#.E", "E")
    Point(2, 1)
    >>> find_position("#..", "E") is None
    True
    """
    for y, line in enumerate(text.splitlines()):
        if (x := line.find(needle)) != -1:
            return Point(x, y)

    return None


def maze_from_str(text: str, start_facing: Direction = "right") -> Maze:
    """
    Trailing whitespace (per line, and at the end of the text) is ignored.

    >>> maze_from_str("#S.#")
    Traceback (most recent call last):
      ...
    turnmaze.errors.MalformedMazeError: Maze has no end marker 'E'.

    >>> maze_from_str("#S.E.E#")
    Traceback (most recent call last):
      ...
    turnmaze.errors.MalformedMazeError: Maze has 2 end markers 'E'; expected one.

    >>> maze_from_str("#S.~E#")
    Traceback (most recent call last):
      ...
    turnmaze.errors.MalformedMazeError: Unknown maze character '~' at Point(3, 0).
    """
    rows = [line.rstrip() for line in text.rstrip().splitlines()]
    if len(rows) == 0:
        raise MalformedMazeError("Maze is empty.")

    for marker_name, marker_char in (("start", START_CHAR), ("end", END_CHAR)):
        marker_count = sum(row.count(marker_char) for row in rows)
        if marker_count == 0:
            raise MalformedMazeError(
                f"Maze has no {marker_name} marker {marker_char!r}."
            )
        elif marker_count > 1:
            raise MalformedMazeError(
                f"Maze has {marker_count} {marker_name} markers {marker_char!r}; expected one."
            )

    cells: dict[Point, Cell] = {}
    for y, row in enumerate(rows):
        for x, cell_char in enumerate(row):
            if cell_char not in maze_cell_chars:
                raise MalformedMazeError(
                    f"Unknown maze character {cell_char!r} at {Point(x, y)}."
                )
            cells[Point(x, y)] = maze_cell_chars[cell_char]

    normalized_text = "\n".join(rows)
    start = find_position(normalized_text, START_CHAR)
    end = find_position(normalized_text, END_CHAR)
    assert start is not None and end is not None  # For MyPy.

    return Maze(
        grid=Grid(frozendict(cells)),
        start=start,
        end=end,
        start_facing=start_facing,
    )


def maze_from_path(path: str, start_facing: Direction = "right") -> Maze:
    with open(path) as maze_file:
        return maze_from_str(maze_file.read(), start_facing=start_facing)


def display_solution_str(maze: Maze, cells: AbstractSet[Point]) -> str:
    def point_char(point: Point) -> str:
        cell = maze.grid.get(point)
        if cell is None:
            return " "
        elif cell == "wall":
            return "#"
        elif point == maze.start:
            return START_CHAR
        elif point == maze.end:
            return END_CHAR
        elif point in cells:
            return "O"
        else:
            return "."

    return maze.grid.render(point_char)


point_colors = {
    "wall": "navy",
    "empty": "white",
    "optimal": "crimson",
    "start": "green",
    "end": "gold",
    # Outside the maze.
    "missing": "lightgray",
}


def _point_color(maze: Maze, cells: AbstractSet[Point], point: Point) -> str:
    cell = maze.grid.get(point)
    if cell is None:
        return point_colors["missing"]
    elif cell == "wall":
        return point_colors["wall"]
    elif point == maze.start:
        return point_colors["start"]
    elif point == maze.end:
        return point_colors["end"]
    elif point in cells:
        return point_colors["optimal"]
    else:
        return point_colors["empty"]


def maze_image(maze: Maze, cells: AbstractSet[Point] = frozenset()) -> np.ndarray:
    """
    RGB image of the maze, indexed [y, x, channel].

    >>> maze_image(maze_from_str("#S.E#\\n#####")).shape
    (2, 5, 3)
    """
    min_point, max_point = maze.grid.min_point(), maze.grid.max_point()
    width, height = max_point - min_point + Point(1, 1)

    image = np.empty((height, width, 3))
    for y in range(height):
        for x in range(width):
            point = min_point + Point(x, y)
            image[y, x] = to_rgb(_point_color(maze, cells, point))

    return image


def display_maze(
    maze: Maze,
    cells: AbstractSet[Point] = frozenset(),
    desc: str | None = None,
) -> None:
    fig, ax = plt.subplots()
    ax.imshow(maze_image(maze, cells), interpolation="nearest")
    ax.set_axis_off()

    if desc:
        fig.text(0.0, 0.0, desc)

    plt.show()
