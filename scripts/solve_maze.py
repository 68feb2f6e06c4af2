#!/usr/bin/env python

from argparse import ArgumentParser
from logging import basicConfig, getLogger
import sys
from time import time

from turnmaze.errors import MazeError
from turnmaze.grid import directions
from turnmaze.maze import (
    Maze,
    display_maze,
    display_solution_str,
    maze_from_path,
    maze_from_str,
)
from turnmaze.maze_search import solve_maze
from turnmaze.search.path_search import NoSolutionError, SearchTimeoutError

logger = getLogger(__name__)


def read_maze(path: str, start_facing: str) -> Maze:
    if path != "-":
        logger.debug("Reading maze from %s.", path)
        return maze_from_path(path, start_facing=start_facing)  # type: ignore

    logger.debug("Reading maze from stdin.")
    text = sys.stdin.read()
    logger.debug("Read %d bytes in %d lines.", len(text), len(text.splitlines()))

    return maze_from_str(text, start_facing=start_facing)  # type: ignore


def solve(
    maze: Maze,
    max_steps: int | None,
    show_progressbar: bool,
    show_path: bool,
    display: bool,
) -> int:
    start_time = time()
    try:
        solution = solve_maze(
            maze,
            max_steps=max_steps,
            show_progressbar=show_progressbar,
        )
    except NoSolutionError:
        print(f"No path from {maze.start} to {maze.end}.")
        return 1
    except SearchTimeoutError as e:
        print(f"Search gave up: {e}", file=sys.stderr)
        return 3
    logger.info("Search took %.3fs.", time() - start_time)

    print(f"Minimum cost: {solution.min_cost}")
    print(f"Cells on optimal paths: {len(solution.cells)}")

    if show_path:
        print(display_solution_str(maze, solution.cells))

    if display:
        display_maze(
            maze,
            solution.cells,
            desc=f"cost={solution.min_cost}, cells={len(solution.cells)}",
        )

    return 0


def arg_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Find the cheapest way through a maze, and every cell on it.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default="-",
        help="the maze text file; '-' (the default) reads stdin",
    )
    parser.add_argument(
        "--start-facing",
        choices=directions,
        default="right",
        help="the direction faced at the start",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="give up (exit status 3) after expanding this many search steps",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="show search progress bars",
    )
    parser.add_argument(
        "--show-path",
        action="store_true",
        help="print the maze with optimal cells marked",
    )
    parser.add_argument(
        "--display",
        action="store_true",
        help="plot the maze with optimal cells marked",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log more (-v for info, -vv for debug)",
    )
    return parser


def main() -> int:
    args = arg_parser().parse_args()

    basicConfig(
        level=["WARNING", "INFO", "DEBUG"][min(args.verbose, 2)],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        maze = read_maze(args.path, args.start_facing)
    except MazeError as e:
        print(f"Invalid maze: {e}", file=sys.stderr)
        return 2

    return solve(
        maze,
        max_steps=args.max_steps,
        show_progressbar=args.progress,
        show_path=args.show_path,
        display=args.display,
    )


if __name__ == "__main__":
    sys.exit(main())
