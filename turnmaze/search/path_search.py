"""
Path search: Use bounded depth-first search to find the cheapest solutions to
well defined problems, including every solution tied for the cheapest.

Problems are specified by subclassing (then instantiating) PathSearchProblems.

Once problems are specified, we provide two search methods for problems:
- bounded_dfs_min_cost
    Branch-and-bound depth-first search for the minimum goal cost.
    The cheapest goal found so far becomes the bound, and any branch whose
    A* heuristic min_cost exceeds it is cut. The bound only ever shrinks.

- bounded_dfs_optimal_steps
    Given the minimum goal cost as a bound, run the same search to completion
    and return every goal step that reaches the goal at exactly that cost.
    Tied solutions are all kept; the caller can walk their paths back through
    Step.parent_step.

Both methods keep a per-call history of the cheapest cost each state has been
reached at. A state reached again at a strictly higher cost is dropped. A state
reached again at an equal cost is expanded again, as the second route may be
part of a different tied solution.

The traversal runs on an explicit stack, so long paths never deepen the Python
call stack.

These methods raise the SearchErrors NoSolutionError and SearchTimeoutError on
failure. bounded_dfs_optimal_steps raises SearchBoundError when its bound turns
out not to be the optimum.
"""
from abc import ABCMeta, abstractmethod
from contextlib import closing
from dataclasses import dataclass, field
from logging import getLogger
from math import inf
from typing import Callable, Generic, Iterator, Literal, Optional, TypeVar

from tqdm import tqdm

State = TypeVar("State")

# Cheapest cost each state has been reached at, for a single search call.
SearchHistory = dict[State, float]

logger = getLogger(__name__)


class PathSearchProblem(Generic[State], metaclass=ABCMeta):
    @abstractmethod
    def initial_state(self) -> State:
        pass

    @abstractmethod
    def state_transitions(self, state: State) -> list[tuple[State, float]]:
        """Next states, and the (positive) cost of moving to each. Not yet pruned."""

    @abstractmethod
    def is_goal_state(self, state: State) -> bool:
        pass

    @abstractmethod
    def min_cost(self, state: State) -> float:
        """Remaining cost lower bound. Must never overestimate."""

    def expanding_step(self, step: "Step") -> None:
        pass


def admissible_transitions(
    problem: PathSearchProblem[State],
    state: State,
    cost: float,
    history: SearchHistory[State],
    bound: float | None,
) -> list[tuple[State, float]]:
    """
    Transitions from a state (reached at cost) that may still be on a best path.

    A transition is dropped if its next state was already reached more cheaply,
    or if even its heuristic best case would exceed the bound.
    Equal costs are kept on both counts.
    """
    return [
        (next_state, transition_cost)
        for next_state, transition_cost in problem.state_transitions(state)
        if cost + transition_cost <= history.get(next_state, inf)
        and (
            bound is None
            or cost + transition_cost + problem.min_cost(next_state) <= bound
        )
    ]


@dataclass(frozen=True, eq=False)
class Step(Generic[State]):
    parent_step: Optional["Step"]
    state: State
    cost: float
    min_cost: float

    def path_states(self) -> list[State]:
        sequence = []
        step: Step | None = self
        while step is not None:
            sequence.append(step.state)
            step = step.parent_step

        return list(reversed(sequence))

    def next_steps(
        self,
        problem: PathSearchProblem[State],
        history: SearchHistory[State],
        bound: float | None,
    ) -> list["Step"]:
        return [
            Step(
                parent_step=self,
                state=next_state,
                cost=(next_cost := self.cost + transition_cost),
                min_cost=next_cost + problem.min_cost(next_state),
            )
            for next_state, transition_cost in admissible_transitions(
                problem, self.state, self.cost, history, bound
            )
        ]

    @staticmethod
    def initial_step(state: State, min_cost: float = 0) -> "Step":
        return Step(
            parent_step=None,
            state=state,
            cost=0,
            min_cost=min_cost,
        )

    @property
    def depth(self) -> int:
        return len(self.path_states()) - 1


class SearchError(Exception):
    pass


class NoSolutionError(SearchError):
    pass


class SearchTimeoutError(SearchError):
    pass


class SearchBoundError(SearchError):
    """A goal was reached below the given bound; the bound was not the optimum."""


def _bounded_dfs_goal_steps(
    problem: PathSearchProblem[State],
    current_bound: Callable[[], float | None],
    max_steps: int | None = None,
    show_progressbar: bool = False,
) -> Iterator[Step[State]]:
    """
    Depth-first traversal yielding every goal step that survives pruning.

    The bound is re-read through current_bound() whenever a step is popped or
    expanded, so the consumer may tighten it between goals.
    """
    history: SearchHistory[State] = {}

    first_state = problem.initial_state()
    stack = [Step.initial_step(first_state, problem.min_cost(first_state))]

    progress = tqdm(desc="Expanding", unit="steps") if show_progressbar else None
    expanded_steps = 0
    try:
        while len(stack) > 0:
            step = stack.pop()

            # The bound or history may have improved since this step was pushed.
            bound = current_bound()
            if bound is not None and step.min_cost > bound:
                continue

            if problem.is_goal_state(step.state):
                yield step
                continue

            if step.cost > history.get(step.state, inf):
                continue

            history[step.state] = step.cost

            if max_steps is not None and expanded_steps >= max_steps:
                raise SearchTimeoutError(
                    f"Could not finish search in {max_steps} steps."
                )
            expanded_steps += 1
            if progress is not None:
                progress.update()

            problem.expanding_step(step)  # Just for debugging.

            # Reversed, so the first transition is the first one explored.
            stack.extend(reversed(step.next_steps(problem, history, bound)))

    finally:
        if progress is not None:
            progress.close()

    logger.debug(
        "Expanded %d steps over %d distinct states.", expanded_steps, len(history)
    )


def bounded_dfs_min_cost(
    problem: PathSearchProblem[State],
    max_steps: int | None = None,
    show_progressbar: bool = False,
) -> float:
    """Minimum cost of reaching any goal state from the initial state."""
    best_cost: float | None = None

    with closing(
        _bounded_dfs_goal_steps(
            problem,
            lambda: best_cost,
            max_steps=max_steps,
            show_progressbar=show_progressbar,
        )
    ) as goal_steps:
        for goal_step in goal_steps:
            if best_cost is None or goal_step.cost < best_cost:
                logger.debug(
                    "Bound tightened from %s to %s.", best_cost, goal_step.cost
                )
                best_cost = goal_step.cost

    if best_cost is None:
        raise NoSolutionError("Path search problem has no solutions.")

    logger.info("Minimum solution cost: %s.", best_cost)
    return best_cost


def bounded_dfs_optimal_steps(
    problem: PathSearchProblem[State],
    bound: float,
    max_steps: int | None = None,
    show_progressbar: bool = False,
) -> list[Step[State]]:
    """
    Every goal step reached at exactly the bound.

    The bound must be the true minimum cost (see bounded_dfs_min_cost); the
    heuristic cuts any branch that can't finish within it.
    """
    optimal_steps: list[Step[State]] = []

    # Closing also ends the progress bar when SearchBoundError escapes.
    with closing(
        _bounded_dfs_goal_steps(
            problem,
            lambda: bound,
            max_steps=max_steps,
            show_progressbar=show_progressbar,
        )
    ) as goal_steps:
        for goal_step in goal_steps:
            if goal_step.cost < bound:
                raise SearchBoundError(
                    f"Found a solution of cost {goal_step.cost}, below the bound {bound}."
                )

            if goal_step.cost == bound:
                logger.debug("Optimal solution #%d found.", len(optimal_steps) + 1)
                optimal_steps.append(goal_step)

    if len(optimal_steps) == 0:
        raise NoSolutionError(f"Path search problem has no solutions of cost {bound}.")

    logger.info("Found %d solutions of cost %s.", len(optimal_steps), bound)
    return optimal_steps


AlgoAction = Literal[
    "initial_state",
    "state_transitions",
    "is_goal_state",
    "min_cost",
    "expanding_step",
]


@dataclass
class AlgoTraceStep(Generic[State]):
    algo_action: AlgoAction
    state: State | None = None
    step: Step | None = None


@dataclass
class TracedPathSearchProblem(PathSearchProblem[State]):
    """
    Record the algorithmic steps taken by the path search algorithm for analysis.
    """

    problem: PathSearchProblem[State]
    algo_steps: list[AlgoTraceStep[State]] = field(default_factory=list)

    def initial_state(self) -> State:
        self.algo_steps.append(AlgoTraceStep("initial_state"))
        return self.problem.initial_state()

    def state_transitions(self, state: State) -> list[tuple[State, float]]:
        self.algo_steps.append(AlgoTraceStep("state_transitions", state))
        return self.problem.state_transitions(state)

    def is_goal_state(self, state: State) -> bool:
        self.algo_steps.append(AlgoTraceStep("is_goal_state", state))
        return self.problem.is_goal_state(state)

    def min_cost(self, state: State) -> float:
        self.algo_steps.append(AlgoTraceStep("min_cost", state))
        return self.problem.min_cost(state)

    def expanding_step(self, step: Step) -> None:
        self.algo_steps.append(AlgoTraceStep("expanding_step", step.state, step))
        self.problem.expanding_step(step)

    def expanded_states(self) -> list[State]:
        return [
            algo_step.state
            for algo_step in self.algo_steps
            if algo_step.algo_action == "expanding_step"
        ]
