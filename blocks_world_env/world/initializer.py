# blocks_world_env/world/initializer.py

import numpy as np

from blocks_world_env.world import queries
from blocks_world_env.world.store import AddBlock, AddEdge, Block, Snapshot
from blocks_world_env.utils.color_gen import random_color
from blocks_world_env.utils.logging_utils import *

DEFAULT_INIT_LOG_LEVEL = logging.ERROR
logger = setup_logger(__name__, level=DEFAULT_INIT_LOG_LEVEL)

DEFAULT_BLOCK_SIDE = 50
DEFAULT_GROUND_WIDTH = 600


def stack_blocks(count, rng=None, side=DEFAULT_BLOCK_SIDE, ground_width=DEFAULT_GROUND_WIDTH) -> Snapshot:
    """
    Drops ``count`` blocks one by one at random horizontal positions.

    Each new block lands on the highest block it overlaps, snapped to that
    block's x, or on the ground at its random x when it overlaps nothing.
    Placement is direct: no operation legality is involved.

    Args:
        count (int): Number of blocks; ids run from 1 to ``count``.
        rng (np.random.Generator | int | None): Source of randomness or a seed.
        side (int): Edge length shared by all blocks.
        ground_width (int): Width of the ground; blocks are dropped inside it.

    Returns:
        Snapshot: The initial world.
    """
    if side <= 0 or side > ground_width:
        raise ValueError(f"Block side {side} does not fit a ground of width {ground_width}")
    if not isinstance(rng, np.random.Generator):
        rng = np.random.default_rng(rng)

    snapshot = Snapshot.empty(ground_width=ground_width)
    for block_id in range(1, count + 1):
        x = int(rng.integers(0, ground_width - side + 1))
        snapshot = place_block(snapshot, Block(id=block_id, x=x, y=0, side=side, color=random_color(rng)))

    logger.debug(f"Stacked {count} blocks, {len(queries.clear_blocks(snapshot))} of them clear")
    return snapshot


def place_block(snapshot: Snapshot, block: Block) -> Snapshot:
    """Drops a new block into the world at its x position."""
    support_id = queries.find_support(snapshot, block)
    if support_id is None:
        return snapshot.with_transaction([AddBlock(Block(block.id, block.x, 0, block.side, block.color))])

    support = snapshot.block(support_id)
    placed = Block(block.id, support.x, support.top, block.side, block.color)
    return snapshot.with_transaction([AddBlock(placed), AddEdge(support_id, block.id)])
