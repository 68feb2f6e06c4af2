"""Maze input error types."""


class MazeError(Exception):
    """Any maze-input-related problem."""


class MalformedMazeError(MazeError):
    """The maze text can't be turned into a grid with a start and an end."""
