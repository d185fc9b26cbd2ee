# tests/test_solver.py
"""
Tests for the greedy planner and the independent plan validation.

Covers:
- goal completion and the heuristic
- the buried-supporter scenario (clear, clear, move)
- failure reporting when the step budget runs out
- scoring of the root expansion
- replay / validation of plans
"""

import pytest

from blocks_world_env.planning.solver import (
    DONE_SCORE,
    Goal,
    PlanResult,
    Solver,
    distance,
    done,
    goal_to_moves,
    is_valid_plan,
    plan,
    replay,
)
from blocks_world_env.world import queries
from blocks_world_env.world.errors import PlanNotFoundError, ReferenceNotFound
from blocks_world_env.world.initializer import stack_blocks
from blocks_world_env.world.operations import Clear, Move, Transit
from blocks_world_env.world.store import Snapshot


class TestGoalAndHeuristic:

    def test_done(self, buried_world):
        assert done(Goal(2, 1), buried_world)
        assert done((3, 2), buried_world)
        assert not done(Goal(1, 2), buried_world)
        assert not done(Goal(3, 1), buried_world)

    def test_distance_counts_blocks_above_both(self, buried_world):
        assert distance(Goal(4, 1), buried_world) == 2
        assert distance(Goal(1, 7), buried_world) == 3

    def test_done_beats_everything(self, buried_world):
        assert distance(Goal(2, 1), buried_world) == DONE_SCORE
        assert DONE_SCORE < 0


class TestSolver:

    def test_already_done_gives_empty_plan(self, buried_world):
        result = plan(Goal(2, 1), buried_world)
        assert result.success
        assert result.operations == ()

    def test_buried_supporter(self, buried_world):
        result = plan(Goal(4, 1), buried_world)

        assert result.success
        assert result.operations == (Clear(3), Clear(2), Move(4, 1))
        assert is_valid_plan(buried_world, result.operations)

        final = replay(buried_world, result.operations)[-1]
        assert done(Goal(4, 1), final)

    def test_single_move_when_both_are_clear(self, buried_world):
        result = plan(Goal(4, 3), buried_world)
        assert result.operations == (Move(4, 3),)

    def test_subject_under_supporter(self, two_towers):
        result = plan(Goal(1, 2), two_towers)
        assert result.success
        assert result.operations[-1] == Move(1, 2)
        assert is_valid_plan(two_towers, result.operations)

    def test_candidates_only_use_clear_blocks(self, buried_world):
        clear = queries.clear_blocks(buried_world)
        ops = Solver().candidates(buried_world)
        assert all(op.moved in clear for op in ops)
        assert all(op.target in clear and op.target != op.moved
                   for op in ops if isinstance(op, Move))
        # Clears come first, then every ordered pair of distinct clear blocks
        assert ops[:len(clear)] == [Clear(i) for i in sorted(clear)]
        assert len(ops) == len(clear) + len(clear) * (len(clear) - 1)

    def test_no_clear_candidate_without_ground_space(self, full_ground):
        ops = Solver().candidates(full_ground)
        assert Clear(13) not in ops
        assert Clear(2) in ops
        assert Move(13, 2) in ops

    def test_full_ground_goal(self, full_ground):
        result = plan(Goal(1, 2), full_ground)
        assert result.success
        # No room on the ground, so the blocker goes onto the first other tower that keeps 2 clear
        assert result.operations == (Move(13, 3), Move(1, 2))
        assert is_valid_plan(full_ground, result.operations)

    def test_step_budget_exhausted(self, buried_world):
        result = Solver(max_steps=1).solve(buried_world, Goal(4, 1))
        assert result.failed
        assert result.operations == (Clear(3),)
        with pytest.raises(PlanNotFoundError) as exc_info:
            result.raise_for_failure()
        assert exc_info.value.partial_plan == [Clear(3)]

    def test_successful_result_passes_through_raise_for_failure(self, buried_world):
        result = plan(Goal(4, 3), buried_world)
        assert result.raise_for_failure() is result

    def test_unknown_goal_block(self, buried_world):
        with pytest.raises(ReferenceNotFound):
            plan(Goal(4, 99), buried_world)

    def test_search_does_not_touch_input(self, buried_world):
        before = buried_world
        plan(Goal(4, 1), buried_world)
        assert buried_world == before

    def test_seeded_world_buried_supporter(self):
        snapshot = stack_blocks(10, rng=0)
        assert snapshot.block(5).y == 0
        assert queries.is_clear(snapshot, 5)
        assert queries.is_clear(snapshot, 10)
        assert queries.transitive_support_count(snapshot, 1) == 2
        assert set(queries.support_chain(snapshot, 10)) >= {8, 1}

        result = plan(Goal(5, 1), snapshot)
        assert result.success
        assert result.operations == (Clear(10), Clear(8), Move(5, 1))
        assert done(Goal(5, 1), replay(snapshot, result.operations)[-1])

    @pytest.mark.parametrize("seed", range(8))
    def test_successful_plans_replay(self, seed):
        snapshot = stack_blocks(10, rng=seed)
        for goal in [Goal(1, 2), Goal(10, 1), Goal(5, 6)]:
            result = plan(goal, snapshot)
            if result.success:
                assert is_valid_plan(snapshot, result.operations)
                assert done(goal, replay(snapshot, result.operations)[-1])


class TestExpand:

    def test_scores_every_candidate_in_order(self, buried_world):
        solver = Solver()
        expanded = solver.expand(buried_world, Goal(4, 1))
        assert [op for op, _, _ in expanded] == solver.candidates(buried_world)
        # Clears for 3, 4, 5, 6, 8, 9, 10 and every ordered pair of them
        assert len(expanded) == 7 + 7 * 6

    def test_root_scores(self, buried_world):
        expanded = Solver().expand(buried_world, (4, 1))
        op, next_snapshot, score = expanded[0]
        assert op == Clear(3)
        assert score == 1
        assert next_snapshot.block(3).y == 0
        # Clearing a ground block changes nothing
        assert expanded[1][0] == Clear(4)
        assert expanded[1][2] == 2

    def test_best_step_is_first_minimum(self, buried_world):
        solver = Solver()
        expanded = solver.expand(buried_world, Goal(4, 1))
        best = min(expanded, key=lambda step: step[2])
        assert solver.best_step(buried_world, Goal(4, 1)) == best

    def test_no_clear_blocks_left(self):
        assert Solver().expand(Snapshot.empty(), Goal(1, 2)) == []


class TestValidation:

    def test_empty_plan_is_valid(self, buried_world):
        assert is_valid_plan(buried_world, [])

    def test_illegal_step_invalidates_plan(self, buried_world):
        assert not is_valid_plan(buried_world, [Move(4, 1)])
        assert not is_valid_plan(buried_world, [Clear(3), Move(4, 1)])

    def test_unknown_block_invalidates_plan(self, buried_world):
        assert not is_valid_plan(buried_world, [Move(4, 99)])

    def test_transits_are_accepted(self, buried_world):
        assert is_valid_plan(buried_world, [Clear(3), Transit(3, 2), Clear(2), Transit(2, 4), Move(4, 1)])

    def test_replay_returns_every_state(self, buried_world):
        states = replay(buried_world, [Clear(3), Clear(2)])
        assert len(states) == 3
        assert states[0] is buried_world
        assert states[1].block(3).y == 0
        assert states[2].block(2).y == 0


class TestGoalToMoves:

    def test_full_pipeline_adds_transits(self, buried_world):
        assert goal_to_moves(buried_world, (4, 1)) == [
            Clear(3), Transit(3, 2), Clear(2), Transit(2, 4), Move(4, 1),
        ]

    def test_same_block_goal(self, buried_world):
        assert goal_to_moves(buried_world, (4, 4)) == []

    def test_failed_search_returns_nothing(self, buried_world):
        assert goal_to_moves(buried_world, (4, 1), max_steps=1) == []

    def test_already_done(self, buried_world):
        assert goal_to_moves(buried_world, (2, 1)) == []


class TestPlanResult:

    def test_failed_flag(self):
        assert PlanResult((), success=False).failed
        assert not PlanResult((), success=True).failed
