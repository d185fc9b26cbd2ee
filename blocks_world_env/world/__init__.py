from blocks_world_env.world.errors import (
    BlocksWorldError,
    IllegalOperation,
    PlanNotFoundError,
    ReferenceNotFound,
)
from blocks_world_env.world.store import (
    AddBlock,
    AddEdge,
    Block,
    RetractEdge,
    SetAttribute,
    Snapshot,
    apply,
)
from blocks_world_env.world.operations import (
    Clear,
    Move,
    Transit,
    add_transit_operations,
    apply_operation,
    apply_unchecked,
    is_legal,
    operation_to_sentence,
    transaction,
)
from blocks_world_env.world.initializer import place_block, stack_blocks
