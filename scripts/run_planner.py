# scripts/run_planner.py

import argparse

import gymnasium as gym
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

# Import the environment package to register it
import blocks_world_env
from blocks_world_env.planning.solver import replay
from blocks_world_env.world import queries
from blocks_world_env.world.operations import operation_to_sentence

ENV_ID = "BlocksWorld-v0"
RENDER_DELAY_SEC = 0.8  # Pause between drawn steps


def draw_snapshot(ax, snapshot, title, goal=None):
    """Draws every block as a colored square with its id in the middle."""
    ax.clear()
    width = snapshot.ground_width or 600
    for block in sorted(queries.all_blocks(snapshot), key=lambda b: b.id):
        rgb = [c / 255 for c in block.color]
        edge = "black"
        if goal is not None and block.id in goal:
            edge = "red"
        ax.add_patch(Rectangle((block.x, block.y), block.side, block.side,
                               facecolor=rgb, edgecolor=edge, linewidth=1.5))
        ax.text(block.x + block.side / 2, block.y + block.side / 2, str(block.id),
                ha="center", va="center", fontsize=9)
    ax.set_xlim(0, width)
    ax.set_ylim(0, width)
    ax.set_aspect("equal")
    ax.set_title(title)


def main():
    parser = argparse.ArgumentParser(description="Plan and show a blocks world goal.")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--goal", type=int, nargs=2, metavar=("SUBJECT", "SUPPORTER"),
                        help="put SUBJECT directly on SUPPORTER (random if omitted)")
    parser.add_argument("--no-plot", action="store_true", help="only print the plan")
    args = parser.parse_args()

    env = gym.make(ENV_ID)
    options = {"goal": args.goal} if args.goal else None
    _, info = env.reset(seed=args.seed, options=options)
    world = env.unwrapped

    print(f"Goal: put {world.goal.subject} on {world.goal.supporter}")
    plan = world.plan_to_goal()
    if not plan:
        print("No valid plan found.")
        env.close()
        return

    for i, op in enumerate(plan, 1):
        print(f"{i:3d}. {operation_to_sentence(op)}")

    if args.no_plot:
        env.close()
        return

    states = replay(world.snapshot, plan)
    plt.ion()
    fig, ax = plt.subplots()
    draw_snapshot(ax, states[0], "Initial", goal=world.goal)
    plt.pause(RENDER_DELAY_SEC)
    for op, state in zip(plan, states[1:]):
        draw_snapshot(ax, state, operation_to_sentence(op), goal=world.goal)
        plt.pause(RENDER_DELAY_SEC)
    plt.ioff()
    plt.show()
    env.close()


if __name__ == "__main__":
    main()
