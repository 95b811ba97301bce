"""Structural validation rules for Block records"""

from smartblocks.core.models import BLOCK_TYPES, Block, ValidationResult


def _blank(value) -> bool:
    return not value or not str(value).strip()


def validate_block(block: Block) -> ValidationResult:
    """Check a block's required fields and confidence range; never raises."""
    errors: list[str] = []

    if _blank(block.id):
        errors.append('Block ID is required')

    block_type = getattr(block.type, 'value', block.type)
    if block_type not in BLOCK_TYPES:
        errors.append(f"Block type must be one of: {', '.join(BLOCK_TYPES)}")

    if _blank(block.content):
        errors.append('Block content is required')

    if block.metadata is None:
        errors.append('Block metadata is required')

    if block.confidence is not None and not 0 <= block.confidence <= 1:
        errors.append('Confidence must be between 0 and 1')

    return ValidationResult(is_valid=not errors, errors=errors)
