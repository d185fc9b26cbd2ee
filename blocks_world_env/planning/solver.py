# solver.py

from dataclasses import dataclass
from typing import List, NamedTuple, Tuple

from blocks_world_env.world import queries
from blocks_world_env.world.errors import IllegalOperation, PlanNotFoundError, ReferenceNotFound
from blocks_world_env.world.operations import (
    Clear,
    Move,
    add_transit_operations,
    apply_operation,
    apply_unchecked,
)
from blocks_world_env.world.store import Snapshot
from blocks_world_env.utils.logging_utils import *

DEFAULT_INIT_LOG_LEVEL = logging.ERROR
logger = setup_logger(__name__, level=DEFAULT_INIT_LOG_LEVEL)

DEFAULT_MAX_STEPS = 100

# Score of a snapshot that satisfies the goal; support counts are never negative
DONE_SCORE = -1


class Goal(NamedTuple):
    """``subject`` must end up resting directly on ``supporter``."""

    subject: int
    supporter: int


@dataclass(frozen=True)
class PlanResult:
    """Outcome of a search: the operations found and whether they reach the goal."""

    operations: Tuple
    success: bool
    goal: Goal = None

    @property
    def failed(self) -> bool:
        return not self.success

    def raise_for_failure(self):
        if self.failed:
            raise PlanNotFoundError(self.goal, self.operations)
        return self


def done(goal, snapshot: Snapshot) -> bool:
    subject, supporter = goal
    return (supporter, subject) in snapshot.edges


def distance(goal, snapshot: Snapshot) -> int:
    """
    Heuristic distance to the goal, lower is better.

    Counts the blocks piled above the subject and above the supporter: each of
    them has to be moved away before the goal move becomes possible.
    """
    if done(goal, snapshot):
        return DONE_SCORE
    subject, supporter = goal
    return (queries.transitive_support_count(snapshot, subject)
            + queries.transitive_support_count(snapshot, supporter))


class Solver:
    """
    Greedy hill-climbing planner over Move/Clear operations.

    Each step tries every operation on the currently clear blocks, scores the
    resulting snapshot with ``distance`` and commits to the best one (first
    in enumeration order on ties). There is no backtracking; the search gives
    up after ``max_steps`` operations.
    """

    def __init__(self, max_steps=DEFAULT_MAX_STEPS):
        self.max_steps = max_steps

    def candidates(self, snapshot: Snapshot):
        """
        Operations worth trying from ``snapshot``: Clear for every clear block,
        then Move for every ordered pair of distinct clear blocks.

        A raised block is only offered for Clear while the ground has room for it.
        """
        clear_ids = sorted(queries.clear_blocks(snapshot))
        ops = []
        for block_id in clear_ids:
            block = snapshot.block(block_id)
            if block.y == 0 or queries.find_ground_space(snapshot, block.side) is not None:
                ops.append(Clear(block_id))
        ops += [Move(moved, target) for moved in clear_ids for target in clear_ids if moved != target]
        return ops

    def expand(self, snapshot: Snapshot, goal):
        """
        Scores every candidate operation from ``snapshot``.

        Candidates only involve clear blocks, so their preconditions hold and
        they are applied without a legality check.

        Returns:
            list[tuple]: (operation, resulting snapshot, score) in enumeration order
        """
        goal = Goal(*goal)
        expanded = []
        for op in self.candidates(snapshot):
            next_snapshot = apply_unchecked(snapshot, op)
            expanded.append((op, next_snapshot, distance(goal, next_snapshot)))
        return expanded

    def best_step(self, snapshot: Snapshot, goal):
        """Returns the lowest scoring entry of ``expand``, the first one on ties."""
        best = None
        for step in self.expand(snapshot, goal):
            if best is None or step[2] < best[2]:
                best = step
        return best

    def solve(self, snapshot: Snapshot, goal) -> PlanResult:
        """
        Runs the greedy search from ``snapshot`` towards ``goal``.

        Args:
            snapshot (Snapshot): Initial state
            goal (Goal | tuple): (subject, supporter) pair

        Returns:
            PlanResult: successful plan, or the partial plan with ``success=False``
        """
        goal = Goal(*goal)
        for block_id in goal:
            if block_id not in snapshot:
                raise ReferenceNotFound(block_id)

        path: List = []
        state = snapshot

        while not done(goal, state):
            if len(path) >= self.max_steps:
                logger.warning(f"No plan for {goal} within {self.max_steps} steps; "
                               f"{goal.subject} rests on {queries.support_chain(state, goal.subject)}, "
                               f"{goal.supporter} rests on {queries.support_chain(state, goal.supporter)}")
                return PlanResult(tuple(path), success=False, goal=goal)

            step = self.best_step(state, goal)
            if step is None:
                logger.warning(f"No candidate operations left for {goal}")
                return PlanResult(tuple(path), success=False, goal=goal)

            op, state, score = step
            path.append(op)
            logger.debug(f"Step {len(path)}: {op.describe()} (distance {score})")

        return PlanResult(tuple(path), success=True, goal=goal)


def plan(goal, snapshot: Snapshot, max_steps=DEFAULT_MAX_STEPS) -> PlanResult:
    return Solver(max_steps=max_steps).solve(snapshot, goal)


def replay(snapshot: Snapshot, operations) -> List[Snapshot]:
    """
    Applies the operations one by one with legality checks.

    Returns:
        list[Snapshot]: every visited snapshot, starting with ``snapshot``

    Raises:
        IllegalOperation: at the first operation that is not legal
    """
    states = [snapshot]
    for op in operations:
        states.append(apply_operation(states[-1], op))
    return states


def is_valid_plan(snapshot: Snapshot, operations) -> bool:
    """True if every operation of the plan is legal when replayed from ``snapshot``."""
    try:
        replay(snapshot, operations)
    except (IllegalOperation, ReferenceNotFound) as e:
        logger.info(f"Plan rejected: {e}")
        return False
    return True


def goal_to_moves(snapshot: Snapshot, goal, max_steps=DEFAULT_MAX_STEPS) -> list:
    """
    Plans for ``goal`` and returns the validated plan with claw transits added.

    An empty list comes back when the goal names the same block twice, when
    the search fails or when the plan does not survive validation.
    """
    goal = Goal(*goal)
    if goal.subject == goal.supporter:
        return []

    result = plan(goal, snapshot, max_steps=max_steps)
    if result.failed:
        logger.warning(f"Planner failed for {goal}; partial plan discarded: {list(result.operations)}")
        return []
    if not is_valid_plan(snapshot, result.operations):
        logger.warning(f"Plan for {goal} is not valid: {list(result.operations)}")
        return []
    return add_transit_operations(list(result.operations))
