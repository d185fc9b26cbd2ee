# blocks_world_env/world/queries.py
"""Read-only derivations over a snapshot."""

from typing import FrozenSet, List, Optional

from blocks_world_env.world.errors import ReferenceNotFound
from blocks_world_env.world.store import Block, Snapshot


def all_blocks(snapshot: Snapshot) -> FrozenSet[Block]:
    return frozenset(snapshot.blocks.values())


def get_block(snapshot: Snapshot, block_id) -> Block:
    return snapshot.block(block_id)


def _require(snapshot: Snapshot, block_id):
    if block_id not in snapshot:
        raise ReferenceNotFound(block_id)


def supporters(snapshot: Snapshot, block_id) -> FrozenSet[int]:
    """Ids of the blocks holding ``block_id`` up (normally zero or one)."""
    _require(snapshot, block_id)
    return frozenset(src for src, dst in snapshot.edges if dst == block_id)


def supported_by(snapshot: Snapshot, block_id) -> FrozenSet[int]:
    """Ids of the blocks resting directly on ``block_id``."""
    _require(snapshot, block_id)
    return frozenset(dst for src, dst in snapshot.edges if src == block_id)


def is_clear(snapshot: Snapshot, block_id) -> bool:
    """True if nothing rests on top of the block."""
    _require(snapshot, block_id)
    return not any(src == block_id for src, _ in snapshot.edges)


def clear_blocks(snapshot: Snapshot) -> FrozenSet[int]:
    """Every block id minus the ids that support something."""
    sources = {src for src, _ in snapshot.edges}
    return frozenset(snapshot.blocks.keys() - sources)


def transitive_support_count(snapshot: Snapshot, block_id) -> int:
    """Number of blocks stacked (directly or indirectly) on top of ``block_id``."""
    _require(snapshot, block_id)

    children = {}
    for src, dst in snapshot.edges:
        children.setdefault(src, []).append(dst)

    above = set()
    frontier = [block_id]
    while frontier:
        current = frontier.pop()
        for child in children.get(current, ()):
            # Malformed edge sets may loop back; never count a block twice
            if child in above or child == block_id:
                continue
            above.add(child)
            frontier.append(child)
    return len(above)


def find_support(snapshot: Snapshot, candidate: Block) -> Optional[int]:
    """
    Returns the id of the block a candidate would land on if dropped straight down.

    Among the blocks that overlap the candidate horizontally, the one with the
    highest top wins (lowest id on ties). None means the candidate reaches the ground.
    """
    best = None
    for block_id in snapshot.block_ids():
        block = snapshot.blocks[block_id]
        if block_id == candidate.id or not block.overlaps(candidate):
            continue
        if best is None or block.top > best.top:
            best = block
    return best.id if best is not None else None


def find_ground_space(snapshot: Snapshot, width: int) -> Optional[int]:
    """
    Finds the leftmost x >= 0 where a block of ``width`` fits on the ground.

    Only ``0`` and the right edges of ground blocks can be leftmost free
    positions, so those are the scan candidates. When the snapshot has a
    ground width the block must also fit inside it.
    """
    ground = [b for b in snapshot.blocks.values() if b.y == 0]
    candidates = sorted({0} | {b.right for b in ground})

    for x in candidates:
        if snapshot.ground_width is not None and x + width > snapshot.ground_width:
            break
        if not any(x < b.right and b.x < x + width for b in ground):
            return x
    return None


def block_at(snapshot: Snapshot, x, y) -> Optional[int]:
    """Id of the block whose square contains the point (x, y), if any."""
    for block_id in snapshot.block_ids():
        block = snapshot.blocks[block_id]
        if block.x <= x < block.right and block.y <= y < block.top:
            return block_id
    return None


def support_chain(snapshot: Snapshot, block_id) -> List[int]:
    """Supporters from the block downwards, ending at the block that rests on the ground."""
    chain = []
    seen = {block_id}
    current = block_id
    while True:
        below = sorted(supporters(snapshot, current))
        if not below or below[0] in seen:
            return chain
        current = below[0]
        seen.add(current)
        chain.append(current)
