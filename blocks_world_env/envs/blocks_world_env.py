import re
from pathlib import Path

import gymnasium as gym
from gymnasium import spaces
import numpy as np
import yaml

from blocks_world_env.utils.logging_utils import *
from blocks_world_env.envs.task_interface import BaseTask
from blocks_world_env.envs import tasks
from blocks_world_env.planning.solver import Goal, done, goal_to_moves
from blocks_world_env.world import queries
from blocks_world_env.world.errors import IllegalOperation
from blocks_world_env.world.initializer import stack_blocks
from blocks_world_env.world.operations import Clear, Move, Transit, apply_operation

DEFAULT_INIT_LOG_LEVEL = logging.ERROR
logger = setup_logger(__name__, level=DEFAULT_INIT_LOG_LEVEL)

# Action kinds of the first MultiDiscrete component
ACTION_MOVE = 0
ACTION_CLEAR = 1
ACTION_TRANSIT = 2


class BlocksWorldEnv(gym.Env):
    """
    Gymnasium environment around the blocks world snapshot model.

    The world is a stack of square blocks on a 1-D ground. An action is one
    claw operation (Move, Clear or Transit) addressed by block index; it is
    legality-checked and applied to the current snapshot.
    """

    metadata = {"render_modes": []}

    def __init__(self, render_mode=None,
                 task_config_file="stack_goal.yaml",
                 base_config_file="base_config.yaml"):
        super().__init__()

        self.render_mode = render_mode

        # --- Load configuration files ---
        self._load_and_merge_configs(base_config_file, task_config_file)
        self.config = self.config or {}
        self._configure_logging()

        # --- World, planner and reward settings ---
        self._load_world_settings()

        # --- Load task logic ---
        self._load_and_instantiate_task(tasks, BaseTask)

        # --- Setup Gym RL interface ---
        self._setup_action_space()
        self._setup_observation_space()

        # --- Internal runtime state ---
        self.current_steps = 0
        self.snapshot = None
        self.initial_snapshot = None
        self.goal = None

        logger.info("Environment initialized.")

    # region CONFIGURATION LOADING + LOGGING

    def _load_and_merge_configs(self, base_config_file, task_config_file):
        """
        Loads and merges two YAML config files: base + task-specific.
        Result is stored in self.config.
        """
        config_dir = Path(__file__).parent.parent / "configs"
        base_path = config_dir / base_config_file
        task_path = config_dir / "tasks" / task_config_file

        base_config = {}
        task_config = {}

        if base_path.exists():
            with open(base_path, 'r') as f:
                base_config = yaml.safe_load(f) or {}
        else:
            logger.warning(f"Base config {base_path} not found, using defaults")

        if task_path.exists():
            with open(task_path, 'r') as f:
                task_config = yaml.safe_load(f) or {}
        else:
            # Fall back to a task config next to the base config
            alt_path = config_dir / task_config_file
            if alt_path.exists():
                with open(alt_path, 'r') as f:
                    task_config = yaml.safe_load(f) or {}
            else:
                logger.warning(f"Task config {task_config_file} not found, using defaults")

        def deep_merge(a, b):
            # Recursive dict merge: values in b overwrite those in a
            for k, v in b.items():
                if isinstance(v, dict):
                    a[k] = deep_merge(a.get(k, {}), v)
                else:
                    a[k] = v
            return a

        self.config = deep_merge(base_config.copy(), task_config)

    def _configure_logging(self):
        """
        Applies the logging level from the config.
        """
        log_cfg = self.config.get("logging", {})
        level_str = log_cfg.get("level", "INFO").upper()
        set_logger_level(logger, get_level_from_string(level_str))
        logger.info(f"Log level set to {level_str}")

    # endregion

    # region WORLD + TASK SETUP

    def _load_world_settings(self):
        """
        Loads world geometry, planner budget, episode limits and rewards.
        """
        world_cfg = self.config.get("world", {})
        planner_cfg = self.config.get("planner", {})
        sim_cfg = self.config.get("simulation", {})
        reward_cfg = self.config.get("reward", {})

        self.num_blocks = world_cfg.get("num_blocks", 10)
        self.block_side = world_cfg.get("block_side", 50)
        self.ground_width = world_cfg.get("ground_width", 600)

        self.planner_max_steps = planner_cfg.get("max_steps", 100)
        self.max_steps = sim_cfg.get("max_episode_steps", 100)

        self.goal_reward = reward_cfg.get("goal_reward", 1.0)
        self.step_penalty = reward_cfg.get("step_penalty", -0.01)
        self.illegal_action_penalty = reward_cfg.get("illegal_action_penalty", -0.05)

    def _load_and_instantiate_task(self, task_package, base_class):
        """
        Dynamically loads the task class and instantiates it.
        """
        task_cfg = dict(self.config.get("task", {}))
        task_cfg.setdefault("num_blocks", self.num_blocks)
        class_name = task_cfg.get("task_class_name", "StackGoalTask")

        if not task_cfg.get("task_class_name"):
            logger.warning(f"task_class_name missing in config, defaulting to {class_name}")

        # Infer module name (e.g., StackGoalTask → stack_goal_task)
        module_name = re.sub(r'(?<!^)(?=[A-Z])', '_', class_name).lower()
        if not module_name.endswith("_task"):
            module_name += "_task"

        task_class = None
        task_module = getattr(task_package, module_name, None)
        if task_module:
            task_class = getattr(task_module, class_name, None)

        if not isinstance(task_class, type) or not issubclass(task_class, base_class):
            raise ValueError(f"Invalid task class '{class_name}' or not subclass of {base_class.__name__}.")

        self.task = task_class(self, task_cfg)
        logger.info(f"Loaded task class: {self.task.__class__.__name__}")

        self.num_blocks = self.task.num_blocks

    # endregion

    # region RL INTERFACE SETUP

    def _setup_action_space(self):
        """(kind, moved block index, target block index); the target is ignored by Clear."""
        self.action_space = spaces.MultiDiscrete([3, self.num_blocks, self.num_blocks])
        logger.info(f"Action space = MultiDiscrete([3, {self.num_blocks}, {self.num_blocks}])")

    def _setup_observation_space(self):
        """One row per block: x, y, side, index of its supporter (-1 on the ground)."""
        high = max(self.ground_width, self.block_side * (self.num_blocks + 1))
        self.observation_space = spaces.Box(
            low=-1, high=high,
            shape=(self.num_blocks, 4),
            dtype=np.int64
        )
        logger.info(f"Observation space = Box({self.num_blocks}, 4)")

    # endregion

    # region RESET / STEP

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)

        self.current_steps = 0
        self.snapshot = stack_blocks(self.num_blocks, rng=self.np_random,
                                     side=self.block_side, ground_width=self.ground_width)
        self.initial_snapshot = self.snapshot

        if self.task is None:
            raise RuntimeError("Task was not initialized before reset.")
        task_info = self.task.reset_task_scenario(options)

        obs = self._get_obs()
        info = self._get_info()
        if isinstance(task_info, dict):
            info.update(task_info)

        return obs, info

    def restore_initial_world(self):
        """Puts the world back to the layout drawn by the last reset, keeping the goal."""
        if self.initial_snapshot is None:
            raise RuntimeError("Call reset() before restore_initial_world().")
        self.snapshot = self.initial_snapshot
        self.current_steps = 0
        logger.info("World restored to the initial layout")
        return self._get_obs(), self._get_info()

    def step(self, action):
        """Applies one operation; illegal ones leave the world unchanged."""
        if self.snapshot is None:
            raise RuntimeError("Call reset() before step().")

        self.current_steps += 1
        op = self.operation_for(action)

        info = {"operation": op}
        reward = self.step_penalty
        try:
            self.snapshot = apply_operation(self.snapshot, op)
            info["primitive_success"] = True
        except IllegalOperation as e:
            logger.warning(f"Step {self.current_steps}: {e}")
            info["primitive_success"] = False
            info["error"] = "illegal_operation"
            reward += self.illegal_action_penalty

        terminated = self.task.check_goal()
        truncated = not terminated and self.current_steps >= self.max_steps
        if terminated:
            reward = self.goal_reward

        info.update(self._get_info())
        return self._get_obs(), reward, terminated, truncated, info

    # endregion

    # region ACTION <-> OPERATION

    def _block_ids(self):
        return self.snapshot.block_ids()

    def operation_for(self, action):
        """Translates a MultiDiscrete action into an operation on block ids."""
        kind, moved_idx, target_idx = (int(a) for a in action)
        ids = self._block_ids()
        if not (0 <= moved_idx < len(ids) and 0 <= target_idx < len(ids)):
            raise ValueError(f"Action {tuple(action)} addresses a block outside 0..{len(ids) - 1}")

        moved, target = ids[moved_idx], ids[target_idx]
        if kind == ACTION_MOVE:
            return Move(moved, target)
        if kind == ACTION_CLEAR:
            return Clear(moved)
        if kind == ACTION_TRANSIT:
            return Transit(moved, target)
        raise ValueError(f"Unknown action kind {kind}")

    def action_for(self, op):
        """Inverse of operation_for."""
        index = {block_id: i for i, block_id in enumerate(self._block_ids())}
        if isinstance(op, Move):
            return np.array([ACTION_MOVE, index[op.moved], index[op.target]])
        if isinstance(op, Clear):
            return np.array([ACTION_CLEAR, index[op.moved], index[op.moved]])
        if isinstance(op, Transit):
            return np.array([ACTION_TRANSIT, index[op.origin], index[op.destination]])
        raise ValueError(f"No action for {op!r}")

    # endregion

    # region PLANNING HELPERS

    def plan_to_goal(self):
        """Validated plan (with claw transits) from the current snapshot to the task goal."""
        return goal_to_moves(self.snapshot, self.goal, max_steps=self.planner_max_steps)

    def is_goal_reached(self) -> bool:
        return self.goal is not None and done(Goal(*self.goal), self.snapshot)

    # endregion

    # region RL HELPER

    def get_state(self) -> dict:
        """Returns a mapping from block id to the id of its supporter (None on the ground)."""
        state = {}
        for block_id in self._block_ids():
            below = sorted(queries.supporters(self.snapshot, block_id))
            state[block_id] = below[0] if below else None
        return state

    def _get_obs(self):
        ids = self._block_ids()
        index = {block_id: i for i, block_id in enumerate(ids)}
        obs = np.full((self.num_blocks, 4), -1, dtype=np.int64)
        for i, block_id in enumerate(ids):
            block = self.snapshot.block(block_id)
            below = sorted(queries.supporters(self.snapshot, block_id))
            obs[i] = (block.x, block.y, block.side, index[below[0]] if below else -1)
        return obs

    def _get_info(self):
        goal_ids = [block_id for block_id in (self.goal or ()) if block_id in self.snapshot]
        return {
            "goal": tuple(self.goal) if self.goal is not None else None,
            "clear_blocks": sorted(queries.clear_blocks(self.snapshot)),
            "goal_support_chains": {block_id: queries.support_chain(self.snapshot, block_id)
                                    for block_id in goal_ids},
            "steps": self.current_steps,
        }

    # endregion
