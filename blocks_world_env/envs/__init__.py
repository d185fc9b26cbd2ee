from blocks_world_env.envs.blocks_world_env import BlocksWorldEnv
