"""Property extraction from state definitions."""

import dataclasses
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Protocol

from stategen.runtime.markers import STATE_METADATA_KEY, FieldMarkers, state_options

from .signature import CLOSE_BRACKETS, OPEN_BRACKETS, parse
from .types import DefinitionInfo, PropertyDescriptor, TypeDescriptor


class MetadataError(RuntimeError):
    """Raised when a definition's metadata cannot be turned into properties."""


@dataclass(frozen=True)
class ConstructorParameter:
    """A primary constructor parameter as reported by a metadata provider.

    Providers supply either a structured type or a serialized type_signature.
    """

    name: str
    type_signature: str | None = None
    type: TypeDescriptor | None = None
    nullable: bool = False
    has_default: bool = True


class MetadataProvider(Protocol):
    """Source of compiled metadata for state definitions."""

    def describe_definition(self, definition: Any) -> DefinitionInfo: ...

    def get_declared_fields(self, definition: Any) -> list[str]: ...

    def get_primary_constructor_parameters(
        self, definition: Any
    ) -> list[ConstructorParameter] | None: ...

    def get_field_markers(self, definition: Any, field_name: str) -> FieldMarkers | None: ...


def _declared_type(param: ConstructorParameter) -> TypeDescriptor:
    if param.type is not None:
        descriptor = param.type
    elif param.type_signature is not None:
        descriptor = parse(param.type_signature)
    else:
        raise MetadataError(f"No type information for parameter '{param.name}'")
    return descriptor.as_nullable(param.nullable or descriptor.nullable)


def extract(definition: Any, provider: MetadataProvider) -> list[PropertyDescriptor]:
    """Extract one PropertyDescriptor per constructor parameter, in order.

    Raises:
        MetadataError: If the definition has no primary constructor, its
            parameters do not line up with its declared fields, a marker
            cannot be resolved, or a non-input field lacks a default.
        ParseError: If a serialized type signature is malformed.
    """
    info = provider.describe_definition(definition)
    params = provider.get_primary_constructor_parameters(definition)
    if params is None:
        raise MetadataError(f"{info.name} has no primary constructor")

    declared = provider.get_declared_fields(definition)
    if len(params) != len(declared):
        raise MetadataError(
            f"{info.name} constructor has {len(params)} parameters "
            f"but {len(declared)} declared fields"
        )

    properties: list[PropertyDescriptor] = []
    for param, field_name in zip(params, declared):
        if param.name != field_name:
            raise MetadataError(
                f"{info.name} parameter '{param.name}' does not match field '{field_name}'"
            )

        markers = provider.get_field_markers(definition, field_name)
        if markers is None:
            raise MetadataError(f"Cannot resolve markers of {info.name}.{field_name}")

        if not (param.has_default or markers.input):
            raise MetadataError(
                f"{info.name}.{field_name} needs a default value or an input marker"
            )

        properties.append(
            PropertyDescriptor(
                name=param.name,
                declared_type=_declared_type(param),
                single_read=markers.single,
                persisted=markers.persist,
                input_only=markers.input,
                has_default=param.has_default,
            )
        )

    return properties


def _qualified_name(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if qualname is None:
        return repr(obj)
    return f"{module}.{qualname}" if module else qualname


def describe_type(hint: Any) -> TypeDescriptor:
    """Describe an evaluated annotation as a TypeDescriptor.

    Unions containing None become nullable; Callable and Literal arguments
    are dropped since they are not types.
    """
    if hint is None or hint is type(None):
        return TypeDescriptor("None")
    if hint is Any:
        return TypeDescriptor("typing.Any")
    if isinstance(hint, str):
        return parse(hint)
    if isinstance(hint, typing.TypeVar):
        return TypeDescriptor(hint.__name__)

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        nullable = len(members) != len(args)
        if len(members) == 1:
            return describe_type(members[0]).as_nullable(nullable)
        return TypeDescriptor("typing.Union", nullable, [describe_type(m) for m in members])

    if origin is None:
        return TypeDescriptor(_qualified_name(hint))

    descriptor = TypeDescriptor(_qualified_name(origin))
    if origin in (typing.Literal, typing.Annotated) or _qualified_name(origin).endswith(
        "Callable"
    ):
        return descriptor
    return descriptor.with_arguments([describe_type(a) for a in args if a is not Ellipsis])


def _split_optional(signature: str) -> tuple[str, bool]:
    """Strip a top-level None member from a union signature."""
    text = signature.strip()
    for prefix in ("Optional[", "typing.Optional["):
        if text.startswith(prefix) and text.endswith("]"):
            return text[len(prefix) : -1].strip(), True

    parts: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char in OPEN_BRACKETS:
            depth += 1
        elif char in CLOSE_BRACKETS:
            depth -= 1
        if char == "|" and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    parts.append(current.strip())

    members = [p for p in parts if p != "None"]
    return " | ".join(members), len(members) != len(parts)


class DataclassMetadataProvider:
    """Metadata provider for @state dataclasses.

    Annotations that evaluate are described structurally; annotations that
    cannot be evaluated (unresolvable forward references) are passed on as
    signature strings.
    """

    def describe_definition(self, definition: type) -> DefinitionInfo:
        view_model = None
        options = state_options(definition)
        if options is not None and options.view_model is not None:
            if isinstance(options.view_model, str):
                view_model = options.view_model
                if "." not in view_model:
                    view_model = f"{definition.__module__}.{view_model}"
            else:
                view_model = _qualified_name(options.view_model)
        return DefinitionInfo(
            name=definition.__name__, module=definition.__module__, view_model=view_model
        )

    def get_declared_fields(self, definition: type) -> list[str]:
        if dataclasses.is_dataclass(definition):
            return [f.name for f in dataclasses.fields(definition)]
        return list(inspect.get_annotations(definition))

    def get_primary_constructor_parameters(
        self, definition: type
    ) -> list[ConstructorParameter] | None:
        if not dataclasses.is_dataclass(definition):
            return None

        try:
            hints = typing.get_type_hints(definition)
        except NameError:
            hints = {}

        params: list[ConstructorParameter] = []
        for name, param in inspect.signature(definition).parameters.items():
            has_default = param.default is not inspect.Parameter.empty
            hint = hints.get(name, param.annotation)
            if hint is inspect.Parameter.empty:
                hint = Any

            if isinstance(hint, str):
                signature, nullable = _split_optional(hint)
                params.append(
                    ConstructorParameter(
                        name=name,
                        type_signature=signature,
                        nullable=nullable,
                        has_default=has_default,
                    )
                )
            else:
                descriptor = describe_type(hint)
                params.append(
                    ConstructorParameter(
                        name=name,
                        type=descriptor,
                        nullable=descriptor.nullable,
                        has_default=has_default,
                    )
                )
        return params

    def get_field_markers(self, definition: type, field_name: str) -> FieldMarkers | None:
        fields = {f.name: f for f in dataclasses.fields(definition)}
        if field_name not in fields:
            return None
        markers = fields[field_name].metadata.get(STATE_METADATA_KEY, FieldMarkers())
        return markers if isinstance(markers, FieldMarkers) else None
