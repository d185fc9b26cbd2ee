# blocks_world_env/world/errors.py


class BlocksWorldError(Exception):
    """Base class for errors raised by the blocks world core."""


class ReferenceNotFound(BlocksWorldError, KeyError):
    """A query or transaction referenced a block id that is not in the snapshot."""

    def __init__(self, block_id):
        super().__init__(block_id)
        self.block_id = block_id

    def __str__(self):
        return f"No block with id {self.block_id!r} in snapshot"


class IllegalOperation(BlocksWorldError):
    """An operation was applied although its legality check failed."""

    def __init__(self, operation, reason=None):
        self.operation = operation
        self.reason = reason
        message = f"Illegal operation: {operation}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class PlanNotFoundError(BlocksWorldError):
    """The planner exhausted its step budget without reaching the goal."""

    def __init__(self, goal, partial_plan):
        self.goal = goal
        self.partial_plan = list(partial_plan)
        super().__init__(f"No plan found for goal {goal} "
                         f"(gave up after {len(self.partial_plan)} steps)")
