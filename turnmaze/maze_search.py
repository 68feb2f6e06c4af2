"""
Turning-maze pathfinding problem.

States are a position plus a facing direction. From each state, one may:
- Step forward (cost 1), if the cell ahead is empty.
- Turn right or left in place (cost 1000), if the cell ahead after turning is
  empty. Turning towards a wall never leads anywhere, so it isn't offered.

The goal is the destination cell, reached facing any direction.

Searching happens in two phases:
- find_minimum: the minimum cost of reaching the destination.
- find_all_optimal_cells: with that minimum as a bound, the union of the cells
  along every path reaching the destination at exactly that cost.

Examples:
>>> from turnmaze.maze import maze_from_str
>>> maze = maze_from_str(
...     "#####\\n"
...     "#S..#\\n"
...     "###.#\\n"
...     "###E#\\n"
...     "#####\\n"
... )
>>> start_state = MazeState(maze.start, maze.start_facing)

>>> find_minimum(maze.grid, start_state, maze.end)
1004

>>> sorted(find_all_optimal_cells(maze.grid, start_state, maze.end, bound=1004))
[Point(1, 1), Point(2, 1), Point(3, 1), Point(3, 2), Point(3, 3)]
"""
from dataclasses import dataclass
from logging import getLogger
from typing import NamedTuple

from turnmaze.grid import (
    Direction,
    Grid,
    Point,
    direction_rotated_left,
    direction_rotated_right,
)
from turnmaze.maze import Maze
from turnmaze.search.path_search import (
    PathSearchProblem,
    SearchHistory,
    admissible_transitions,
    bounded_dfs_min_cost,
    bounded_dfs_optimal_steps,
)

logger = getLogger(__name__)

STEP_COST = 1
TURN_COST = 1000


class MazeState(NamedTuple):
    position: Point
    facing: Direction


def min_cost(state: MazeState, destination: Point) -> int:
    """
    Manhattan distance, plus one turn if the destination isn't in line with us
    along either axis. One turn always suffices once in line, so this never
    overestimates.

    >>> min_cost(MazeState(Point(1, 1), "right"), Point(4, 1))
    3
    >>> min_cost(MazeState(Point(1, 1), "left"), Point(4, 1))
    3
    >>> min_cost(MazeState(Point(1, 1), "right"), Point(4, 3))
    1005
    """
    distance = (destination - state.position).l1()
    aligned = state.position.x == destination.x or state.position.y == destination.y

    return distance if aligned else distance + TURN_COST


@dataclass(frozen=True)
class MazeStateGraph(PathSearchProblem[MazeState]):
    """
    Transitions between (position, facing) states of a static grid.

    For example usages, see find_minimum() and find_all_optimal_cells().
    """

    grid: Grid
    start: MazeState
    destination: Point

    def initial_state(self) -> MazeState:
        return self.start

    def state_transitions(self, state: MazeState) -> list[tuple[MazeState, float]]:
        """
        Forward, then turn right, then turn left.

        >>> graph = MazeStateGraph(
        ...     grid=Grid.from_rows(["#.#", "...", "###"]),
        ...     start=MazeState(Point(1, 1), "right"),
        ...     destination=Point(2, 1),
        ... )
        >>> graph.state_transitions(MazeState(Point(1, 1), "right"))
        [(MazeState(position=Point(2, 1), facing='right'), 1), (MazeState(position=Point(1, 1), facing='up'), 1000)]
        """
        position, facing = state
        transitions: list[tuple[MazeState, float]] = []

        if self.grid.is_passable(ahead := position.step(facing)):
            transitions.append((MazeState(ahead, facing), STEP_COST))

        for turned in (direction_rotated_right(facing), direction_rotated_left(facing)):
            if self.grid.is_passable(position.step(turned)):
                transitions.append((MazeState(position, turned), TURN_COST))

        return transitions

    def successors(
        self,
        state: MazeState,
        cost: float,
        history: SearchHistory[MazeState],
        bound: float | None = None,
    ) -> list[tuple[MazeState, float]]:
        """
        Transitions that may still lie on a best path, given the cost a state was
        reached at, the costs recorded so far, and the optional bound.

        >>> graph = MazeStateGraph(
        ...     grid=Grid.from_rows(["#.#", "...", "###"]),
        ...     start=MazeState(Point(1, 1), "right"),
        ...     destination=Point(2, 1),
        ... )
        >>> graph.successors(MazeState(Point(1, 1), "right"), 0, history={}, bound=1)
        [(MazeState(position=Point(2, 1), facing='right'), 1)]
        """
        return admissible_transitions(self, state, cost, history, bound)

    def is_goal_state(self, state: MazeState) -> bool:
        return state.position == self.destination

    def min_cost(self, state: MazeState) -> float:
        return min_cost(state, self.destination)


def find_minimum(
    grid: Grid,
    start_state: MazeState,
    destination: Point,
    max_steps: int | None = None,
    show_progressbar: bool = False,
) -> int:
    """
    Minimum cost of moving from start_state to the destination cell.

    Raises NoSolutionError when the destination can't be reached.
    """
    graph = MazeStateGraph(grid=grid, start=start_state, destination=destination)

    return int(
        bounded_dfs_min_cost(
            graph,
            max_steps=max_steps,
            show_progressbar=show_progressbar,
        )
    )


def find_all_optimal_cells(
    grid: Grid,
    start_state: MazeState,
    destination: Point,
    bound: int,
    max_steps: int | None = None,
    show_progressbar: bool = False,
) -> frozenset[Point]:
    """
    Every cell on at least one path reaching the destination at cost == bound.

    The bound must be the minimum cost from find_minimum(). Raises
    NoSolutionError if no path meets the bound, and SearchBoundError if a path
    beats it.
    """
    graph = MazeStateGraph(grid=grid, start=start_state, destination=destination)

    optimal_steps = bounded_dfs_optimal_steps(
        graph,
        bound,
        max_steps=max_steps,
        show_progressbar=show_progressbar,
    )

    cells = frozenset(
        state.position
        for goal_step in optimal_steps
        for state in goal_step.path_states()
    )
    logger.info(
        "%d optimal paths of cost %d cover %d cells.",
        len(optimal_steps),
        bound,
        len(cells),
    )

    return cells


class MazeSolution(NamedTuple):
    min_cost: int
    cells: frozenset[Point]


def solve_maze(
    maze: Maze,
    max_steps: int | None = None,
    show_progressbar: bool = False,
) -> MazeSolution:
    """
    Find the minimum cost, then use it as the bound for collecting optimal cells.

    >>> from turnmaze.maze import maze_from_str
    >>> solution = solve_maze(maze_from_str("#####\\n#S.E#\\n#####"))
    >>> solution.min_cost, sorted(solution.cells)
    (2, [Point(1, 1), Point(2, 1), Point(3, 1)])
    """
    start_state = MazeState(maze.start, maze.start_facing)

    best_cost = find_minimum(
        maze.grid,
        start_state,
        maze.end,
        max_steps=max_steps,
        show_progressbar=show_progressbar,
    )

    cells = find_all_optimal_cells(
        maze.grid,
        start_state,
        maze.end,
        bound=best_cost,
        max_steps=max_steps,
        show_progressbar=show_progressbar,
    )

    return MazeSolution(min_cost=best_cost, cells=cells)
