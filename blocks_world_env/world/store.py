# blocks_world_env/world/store.py
"""
Immutable fact store for the blocks world.

A ``Snapshot`` holds every block (indexed by id), the directed "supports"
edges and the optional ground width. Snapshots are never modified: applying a
transaction (a sequence of mutations) returns a new snapshot and leaves the
old one untouched, so the planner can branch freely from any state.

Edges are ``(supporter_id, supported_id)`` pairs: ``(A, B)`` means A holds B up.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from blocks_world_env.world.errors import ReferenceNotFound

Edge = Tuple[int, int]


@dataclass(frozen=True)
class Block:
    """A square block. ``y`` is the height of its bottom edge above the ground."""

    id: int
    x: int
    y: int
    side: int
    color: Tuple[int, int, int] = (128, 128, 128)

    @property
    def top(self) -> int:
        return self.y + self.side

    @property
    def right(self) -> int:
        return self.x + self.side

    def overlaps(self, other: "Block") -> bool:
        """True if the horizontal intervals [x, x+side) intersect."""
        return self.x < other.right and other.x < self.right


# region MUTATIONS

@dataclass(frozen=True)
class AddBlock:
    block: Block


@dataclass(frozen=True)
class SetAttribute:
    block_id: int
    name: str
    value: object


@dataclass(frozen=True)
class AddEdge:
    supporter: int
    supported: int


@dataclass(frozen=True)
class RetractEdge:
    supporter: int
    supported: int

# endregion


# Attributes a transaction may change on an existing block
MUTABLE_ATTRIBUTES = ("x", "y", "color")


@dataclass(frozen=True)
class Snapshot:
    """One immutable state of the world."""

    blocks: Mapping[int, Block] = field(default_factory=dict)
    edges: frozenset = frozenset()
    ground_width: Optional[int] = None

    def __post_init__(self):
        # Freeze the mapping so callers cannot mutate a snapshot through it
        object.__setattr__(self, "blocks", MappingProxyType(dict(self.blocks)))
        object.__setattr__(self, "edges", frozenset(self.edges))

    @classmethod
    def empty(cls, ground_width: Optional[int] = None) -> "Snapshot":
        return cls(blocks={}, edges=frozenset(), ground_width=ground_width)

    def __contains__(self, block_id) -> bool:
        return block_id in self.blocks

    def __eq__(self, other):
        if not isinstance(other, Snapshot):
            return NotImplemented
        return (dict(self.blocks) == dict(other.blocks)
                and self.edges == other.edges
                and self.ground_width == other.ground_width)

    def __hash__(self):
        return hash((frozenset(self.blocks.items()), self.edges, self.ground_width))

    def block(self, block_id) -> Block:
        try:
            return self.blocks[block_id]
        except KeyError:
            raise ReferenceNotFound(block_id) from None

    def block_ids(self):
        """All block ids in ascending order."""
        return sorted(self.blocks)

    def with_transaction(self, transaction: Iterable) -> "Snapshot":
        """Returns a new snapshot with every mutation of ``transaction`` applied in order."""
        blocks = dict(self.blocks)
        edges = set(self.edges)

        for mutation in transaction:
            if isinstance(mutation, AddBlock):
                blocks[mutation.block.id] = mutation.block
            elif isinstance(mutation, SetAttribute):
                if mutation.block_id not in blocks:
                    raise ReferenceNotFound(mutation.block_id)
                if mutation.name not in MUTABLE_ATTRIBUTES:
                    raise ValueError(f"Attribute '{mutation.name}' cannot be changed")
                blocks[mutation.block_id] = replace(blocks[mutation.block_id],
                                                    **{mutation.name: mutation.value})
            elif isinstance(mutation, AddEdge):
                for block_id in (mutation.supporter, mutation.supported):
                    if block_id not in blocks:
                        raise ReferenceNotFound(block_id)
                edges.add((mutation.supporter, mutation.supported))
            elif isinstance(mutation, RetractEdge):
                for block_id in (mutation.supporter, mutation.supported):
                    if block_id not in blocks:
                        raise ReferenceNotFound(block_id)
                edges.discard((mutation.supporter, mutation.supported))
            else:
                raise TypeError(f"Unknown mutation type: {type(mutation).__name__}")

        return Snapshot(blocks=blocks, edges=frozenset(edges), ground_width=self.ground_width)


def apply(snapshot: Snapshot, transaction: Iterable) -> Snapshot:
    """Pure transaction application. No physical validation happens here."""
    return snapshot.with_transaction(transaction)
