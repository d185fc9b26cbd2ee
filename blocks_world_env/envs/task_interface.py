# blocks_world_env/envs/task_interface.py
from abc import ABC, abstractmethod


class BaseTask(ABC):
    """Abstract Base Class for defining tasks within the blocks world environment."""

    def __init__(self, env_instance, task_config: dict):
        """
        Initializes the Task.

        Args:
            env_instance: A reference to the main BlocksWorldEnv instance.
            task_config (dict): Parameters specific to this task, taken from the
                                ``task`` section of the merged configuration.
        """
        self.env = env_instance
        self.config = task_config
        self.num_blocks = 0
        self._load_task_params()

    @abstractmethod
    def _load_task_params(self):
        """Load task-specific parameters from self.config into instance variables."""
        raise NotImplementedError

    @abstractmethod
    def reset_task_scenario(self, options=None):
        """
        Set up the task for a new episode during env.reset().

        The world itself is already built when this is called (self.env.snapshot).
        This method should define the episode goal and store it in self.env.goal.

        Returns:
            dict: Initial task-specific info to be added to the env's info dict.
        """
        raise NotImplementedError

    @abstractmethod
    def check_goal(self) -> bool:
        """
        Check if the current snapshot (self.env.snapshot) meets this task's goal.

        Returns:
            bool: True if the goal is met, False otherwise.
        """
        raise NotImplementedError
