from blocks_world_env.envs.tasks import stack_goal_task
