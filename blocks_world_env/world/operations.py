# blocks_world_env/world/operations.py
"""
Operations the claw can perform on a snapshot.

Every operation offers a legality predicate and a transaction (the list of
store mutations it produces). Transactions can be computed for illegal
operations too; callers that care about legality go through
``apply_operation``, which refuses illegal ones.
"""

from dataclasses import dataclass
from typing import List, Sequence

from blocks_world_env.world import queries
from blocks_world_env.world.errors import IllegalOperation, ReferenceNotFound
from blocks_world_env.world.store import AddEdge, RetractEdge, SetAttribute, Snapshot
from blocks_world_env.utils.logging_utils import *

DEFAULT_INIT_LOG_LEVEL = logging.ERROR
logger = setup_logger(__name__, level=DEFAULT_INIT_LOG_LEVEL)


def _detach(snapshot: Snapshot, block_id) -> List[RetractEdge]:
    """Retractions for every edge that currently holds ``block_id`` up."""
    return [RetractEdge(src, block_id) for src in sorted(queries.supporters(snapshot, block_id))]


@dataclass(frozen=True)
class Move:
    """Put block ``moved`` on top of block ``target``."""

    moved: int
    target: int

    def is_legal(self, snapshot: Snapshot) -> bool:
        if self.moved == self.target:
            return False
        try:
            return queries.is_clear(snapshot, self.moved) and queries.is_clear(snapshot, self.target)
        except ReferenceNotFound:
            return False

    def transaction(self, snapshot: Snapshot) -> list:
        target = snapshot.block(self.target)
        return _detach(snapshot, self.moved) + [
            AddEdge(self.target, self.moved),
            SetAttribute(self.moved, "y", target.top),
            SetAttribute(self.moved, "x", target.x),
        ]

    def describe(self) -> str:
        return f"Move {self.moved} onto {self.target}"


@dataclass(frozen=True)
class Clear:
    """Put block ``moved`` down on free ground."""

    moved: int

    def is_legal(self, snapshot: Snapshot) -> bool:
        try:
            block = snapshot.block(self.moved)
            if block.y == 0:
                return True
            return (queries.is_clear(snapshot, self.moved)
                    and queries.find_ground_space(snapshot, block.side) is not None)
        except ReferenceNotFound:
            return False

    def transaction(self, snapshot: Snapshot) -> list:
        block = snapshot.block(self.moved)
        if block.y == 0:
            return []
        x = queries.find_ground_space(snapshot, block.side)
        mutations = _detach(snapshot, self.moved) + [SetAttribute(self.moved, "y", 0)]
        if x is not None:
            mutations.append(SetAttribute(self.moved, "x", x))
        return mutations

    def describe(self) -> str:
        return f"Clear {self.moved} to the ground"


@dataclass(frozen=True)
class Transit:
    """Claw travel between two grips. Only meaningful to a renderer; never changes the world."""

    origin: int
    destination: int

    def is_legal(self, snapshot: Snapshot) -> bool:
        return True

    def transaction(self, snapshot: Snapshot) -> list:
        return []

    def describe(self) -> str:
        return f"Claw travels from {self.origin} to {self.destination}"


OPERATION_TYPES = (Move, Clear, Transit)


def is_legal(snapshot: Snapshot, op) -> bool:
    return op.is_legal(snapshot)


def transaction(snapshot: Snapshot, op) -> list:
    return op.transaction(snapshot)


def apply_unchecked(snapshot: Snapshot, op) -> Snapshot:
    """Applies an operation without checking legality (used while searching)."""
    return snapshot.with_transaction(op.transaction(snapshot))


def apply_operation(snapshot: Snapshot, op) -> Snapshot:
    """
    Applies one operation after checking it is legal.

    Raises:
        IllegalOperation: if ``op`` is not legal in ``snapshot``; the snapshot is untouched.
    """
    if not isinstance(op, OPERATION_TYPES):
        raise IllegalOperation(op, "unknown operation type")
    if not op.is_legal(snapshot):
        logger.debug(f"Rejected {op}")
        raise IllegalOperation(op)
    return apply_unchecked(snapshot, op)


def add_transit_operations(plan: Sequence) -> list:
    """
    Inserts a Transit between consecutive operations that grip different blocks.

    Transits already in the plan are kept as they are and count as the claw
    travel towards the next grip.
    """
    augmented = []
    previous = None
    for op in plan:
        if isinstance(op, Transit):
            augmented.append(op)
            previous = None
            continue
        if previous is not None and previous.moved != op.moved:
            augmented.append(Transit(previous.moved, op.moved))
        augmented.append(op)
        previous = op
    return augmented


def operation_to_sentence(op) -> str:
    return op.describe()
