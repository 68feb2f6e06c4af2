from dataclasses import dataclass, field

from pytest import raises

from turnmaze.search import path_search
from turnmaze.search.path_search import (
    NoSolutionError,
    PathSearchProblem,
    SearchBoundError,
    SearchTimeoutError,
    Step,
    TracedPathSearchProblem,
    admissible_transitions,
    bounded_dfs_min_cost,
    bounded_dfs_optimal_steps,
)


@dataclass(frozen=True)
class GraphSearchProblem(PathSearchProblem[str]):
    edges: dict[str, list[tuple[str, float]]]
    start: str
    goal: str
    heuristic: dict[str, float] = field(default_factory=dict)

    def initial_state(self) -> str:
        return self.start

    def state_transitions(self, state: str) -> list[tuple[str, float]]:
        return list(self.edges.get(state, []))

    def is_goal_state(self, state: str) -> bool:
        return state == self.goal

    def min_cost(self, state: str) -> float:
        return self.heuristic.get(state, 0)


# Two equal-cost routes (via b, via c) merge at d before reaching e.
diamond_edges = {
    "a": [("e", 10), ("b", 1), ("c", 1)],
    "b": [("d", 1)],
    "c": [("d", 1)],
    "d": [("e", 2)],
}

diamond_problem = GraphSearchProblem(edges=diamond_edges, start="a", goal="e")


def test_min_cost():
    assert bounded_dfs_min_cost(diamond_problem) == 4


def test_min_cost_is_repeatable():
    assert bounded_dfs_min_cost(diamond_problem) == bounded_dfs_min_cost(
        diamond_problem
    )


def test_optimal_steps_keep_ties_through_shared_states():
    optimal_steps = bounded_dfs_optimal_steps(diamond_problem, bound=4)

    assert sorted(step.path_states() for step in optimal_steps) == [
        ["a", "b", "d", "e"],
        ["a", "c", "d", "e"],
    ]
    assert all(step.cost == 4 for step in optimal_steps)
    assert all(step.depth == 3 for step in optimal_steps)


def test_bound_above_optimum_is_a_logic_error():
    with raises(SearchBoundError):
        bounded_dfs_optimal_steps(diamond_problem, bound=5)


def test_bound_below_optimum_has_no_solution():
    with raises(NoSolutionError):
        bounded_dfs_optimal_steps(diamond_problem, bound=3)


def test_unreachable_goal():
    problem = GraphSearchProblem(edges=diamond_edges, start="a", goal="z")

    with raises(NoSolutionError):
        bounded_dfs_min_cost(problem)

    with raises(NoSolutionError):
        bounded_dfs_optimal_steps(problem, bound=100)


def test_initial_state_is_goal():
    problem = GraphSearchProblem(edges=diamond_edges, start="d", goal="d")

    assert bounded_dfs_min_cost(problem) == 0
    (only_step,) = bounded_dfs_optimal_steps(problem, bound=0)
    assert only_step.path_states() == ["d"]


def test_max_steps():
    with raises(SearchTimeoutError):
        bounded_dfs_min_cost(diamond_problem, max_steps=1)

    assert bounded_dfs_min_cost(diamond_problem, max_steps=100) == 4


def test_cycles_terminate():
    problem = GraphSearchProblem(
        edges={
            "a": [("b", 1)],
            "b": [("a", 1), ("g", 5)],
        },
        start="a",
        goal="g",
    )

    assert bounded_dfs_min_cost(problem) == 6
    (only_step,) = bounded_dfs_optimal_steps(problem, bound=6)
    assert only_step.path_states() == ["a", "b", "g"]


def test_cheaper_revisits_are_expanded_again():
    # Depth first reaches x expensively first, then finds the cheaper route.
    traced_problem = TracedPathSearchProblem(
        GraphSearchProblem(
            edges={
                "a": [("x", 5), ("b", 1)],
                "b": [("x", 1)],
                "x": [("g", 1)],
            },
            start="a",
            goal="g",
        )
    )

    assert bounded_dfs_min_cost(traced_problem) == 3
    assert traced_problem.expanded_states() == ["a", "x", "b", "x"]


def test_admissible_transitions():
    history = {"b": 1.0, "c": 0.5}

    # b ties its recorded cost; c was already reached more cheaply.
    assert admissible_transitions(diamond_problem, "a", 0, history, bound=None) == [
        ("e", 10),
        ("b", 1),
    ]

    # e can't be reached within the bound.
    assert admissible_transitions(diamond_problem, "a", 0, {}, bound=4) == [
        ("b", 1),
        ("c", 1),
    ]


def test_heuristic_prunes_with_bound():
    # An overestimate for b cuts its route; only the c route remains.
    problem = GraphSearchProblem(
        edges=diamond_edges,
        start="a",
        goal="e",
        heuristic={"b": 4},
    )

    (only_step,) = bounded_dfs_optimal_steps(problem, bound=4)
    assert only_step.path_states() == ["a", "c", "d", "e"]


@dataclass(frozen=True)
class LineSearchProblem(PathSearchProblem[int]):
    length: int

    def initial_state(self) -> int:
        return 0

    def state_transitions(self, state: int) -> list[tuple[int, float]]:
        return [(state + 1, 1)] if state < self.length else []

    def is_goal_state(self, state: int) -> bool:
        return state == self.length

    def min_cost(self, state: int) -> float:
        return self.length - state


def test_long_paths_do_not_recurse():
    problem = LineSearchProblem(length=20_000)

    assert bounded_dfs_min_cost(problem) == 20_000

    (only_step,) = bounded_dfs_optimal_steps(problem, bound=20_000)
    assert only_step.path_states() == list(range(20_001))


def test_show_progressbar():
    assert bounded_dfs_min_cost(diamond_problem, show_progressbar=True) == 4


def test_initial_step():
    step = Step.initial_step("a", min_cost=3)

    assert step.cost == 0
    assert step.min_cost == 3
    assert step.path_states() == ["a"]
    assert step.depth == 0


class RecordingProgress:
    instances: list["RecordingProgress"] = []

    def __init__(self, *args, **kwargs):
        self.updates = 0
        self.closed = False
        RecordingProgress.instances.append(self)

    def update(self):
        self.updates += 1

    def close(self):
        self.closed = True


def test_progressbar_closed_when_bound_is_wrong(monkeypatch):
    monkeypatch.setattr(path_search, "tqdm", RecordingProgress)
    monkeypatch.setattr(RecordingProgress, "instances", [])

    with raises(SearchBoundError):
        bounded_dfs_optimal_steps(diamond_problem, bound=5, show_progressbar=True)

    (progress,) = RecordingProgress.instances
    assert progress.updates > 0
    assert progress.closed


def test_progressbar_closed_after_min_cost(monkeypatch):
    monkeypatch.setattr(path_search, "tqdm", RecordingProgress)
    monkeypatch.setattr(RecordingProgress, "instances", [])

    assert bounded_dfs_min_cost(diamond_problem, show_progressbar=True) == 4

    (progress,) = RecordingProgress.instances
    assert progress.closed
