from blocks_world_env.planning.solver import (
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
