"""Classification of extracted properties."""

from .types import DefinitionInfo, PropertyDescriptor, Schema


def classify(properties: list[PropertyDescriptor], definition: DefinitionInfo) -> Schema:
    """Build the schema of a definition from its ordered properties."""
    has_persisted = any(p.persisted for p in properties)
    has_input = any(p.input_only for p in properties)
    return Schema(
        definition=definition,
        properties=list(properties),
        has_persisted=has_persisted,
        has_input=has_input,
        any_persistence=has_persisted or has_input,
    )
