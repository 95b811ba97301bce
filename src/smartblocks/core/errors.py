"""Exception taxonomy for marker parsing, document mutation, and AI operations.

Validation problems are not exceptions: validate_block returns them.
"""


class SmartBlockError(Exception):
    """Base class for smart block errors."""

    pass


class MalformedMarkerError(SmartBlockError, ValueError):
    """A marker line is missing id/type or names an unsupported block type.

    Aborts the parse call that encountered it.
    """

    pass


class BlockNotFoundError(SmartBlockError, LookupError):
    """A mutation targeted a block id that is absent from the document."""

    def __init__(self, block_id: str):
        super().__init__(f"Block with id {block_id} not found in content")
        self.block_id = block_id


class OperationError(SmartBlockError, RuntimeError):
    """A single-item AI operation failed at the collaborator boundary."""

    pass
