# tests/conftest.py
"""Hand-built worlds shared by the test modules."""

import pytest

from blocks_world_env.world.store import AddBlock, AddEdge, Block, Snapshot

SIDE = 50
GROUND_WIDTH = 600


def build_world(placements, ground_width=GROUND_WIDTH, side=SIDE):
    """
    Builds a snapshot from ``{block_id: (x, supporter_id_or_None)}``.

    Supporters must be listed before the blocks they carry. Stacked blocks
    take the supporter's x; the given x is only used for ground blocks.
    """
    snapshot = Snapshot.empty(ground_width=ground_width)
    for block_id, (x, supporter) in placements.items():
        if supporter is None:
            snapshot = snapshot.with_transaction([AddBlock(Block(block_id, x, 0, side))])
        else:
            below = snapshot.block(supporter)
            snapshot = snapshot.with_transaction([
                AddBlock(Block(block_id, below.x, below.top, side)),
                AddEdge(supporter, block_id),
            ])
    return snapshot


@pytest.fixture
def buried_world():
    """
    Ten blocks. Block 1 carries 2, which carries 3; block 4 stands alone on
    the ground; 8 rests on 7; the rest stand on the ground.
    """
    return build_world({
        1: (0, None),
        2: (0, 1),
        3: (0, 2),
        4: (100, None),
        5: (200, None),
        6: (250, None),
        7: (300, None),
        8: (300, 7),
        9: (400, None),
        10: (450, None),
    })


@pytest.fixture
def two_towers():
    """Block 1 carries 2; block 3 carries 4."""
    return build_world({
        1: (0, None),
        2: (0, 1),
        3: (100, None),
        4: (100, 3),
    })


@pytest.fixture
def full_ground():
    """Twelve ground blocks covering the whole 600 wide ground, plus one on top."""
    placements = {i + 1: (i * SIDE, None) for i in range(GROUND_WIDTH // SIDE)}
    placements[13] = (0, 1)
    return build_world(placements)
