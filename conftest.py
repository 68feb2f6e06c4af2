from pprint import pprint

from pytest import fixture

from turnmaze.grid import Grid, Point
from turnmaze.maze import maze_from_str


@fixture(autouse=True)
def add_doctest_imports(doctest_namespace):
    doctest_namespace["pprint"] = pprint
    doctest_namespace["Grid"] = Grid
    doctest_namespace["Point"] = Point
    doctest_namespace["maze_from_str"] = maze_from_str
