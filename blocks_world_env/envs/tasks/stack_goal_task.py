# blocks_world_env/envs/tasks/stack_goal_task.py
from ..task_interface import BaseTask
from blocks_world_env.planning.solver import Goal, done
from blocks_world_env.utils.logging_utils import *

DEFAULT_INIT_LOG_LEVEL = logging.ERROR
logger = setup_logger(__name__, level=DEFAULT_INIT_LOG_LEVEL)


class StackGoalTask(BaseTask):
    """
    Task: put one block directly on top of another.

    The goal (subject, supporter) comes from the reset options, from the
    ``goal`` entry of the task config, or is drawn at random from the blocks
    of the freshly built world.
    """

    def _load_task_params(self):
        self.num_blocks = self.config.get("num_blocks", 10)
        self.fixed_goal = self.config.get("goal")
        self.avoid_solved_goals = self.config.get("avoid_solved_goals", True)
        self.max_goal_draws = self.config.get("max_goal_draws", 20)

    def reset_task_scenario(self, options=None):
        options = options or {}
        snapshot = self.env.snapshot

        goal = options.get("goal", self.fixed_goal)
        if goal is not None:
            goal = Goal(*goal)
            for block_id in goal:
                if block_id not in snapshot:
                    raise ValueError(f"Goal {goal} refers to unknown block {block_id}")
            if goal.subject == goal.supporter:
                raise ValueError(f"Goal {goal} puts a block on itself")
        else:
            goal = self._draw_goal()

        self.env.goal = goal
        logger.info(f"Task Scenario Reset: put {goal.subject} on {goal.supporter}")
        return {"task_type": "StackGoal", "goal": tuple(goal)}

    def _draw_goal(self) -> Goal:
        """Pick two distinct blocks at random, preferring a goal that does not already hold."""
        ids = self.env.snapshot.block_ids()
        if len(ids) < 2:
            raise ValueError("StackGoalTask needs at least two blocks")

        goal = None
        for _ in range(self.max_goal_draws):
            subject, supporter = self.env.np_random.choice(ids, size=2, replace=False)
            goal = Goal(int(subject), int(supporter))
            if not (self.avoid_solved_goals and done(goal, self.env.snapshot)):
                break
        return goal

    def check_goal(self) -> bool:
        return done(self.env.goal, self.env.snapshot)
