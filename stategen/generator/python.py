"""Python code generator for state definitions."""

from importlib import resources

from jinja2 import Environment, PackageLoader

from stategen.runtime.snapshot import snapshot_key

from .types import (
    ArtifactKind,
    GeneratedArtifactSet,
    GeneratedMember,
    GeneratedType,
    InitialStatePlan,
    MemberKind,
    PropertyDescriptor,
    Schema,
    TypeDescriptor,
)
from .util import to_snake_case

RUNTIME_FILES = [
    "__init__.py",
    "channel.py",
    "events.py",
    "factory.py",
    "markers.py",
    "snapshot.py",
]

env = Environment(
    loader=PackageLoader("stategen.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map names reported by JVM-style metadata to Python annotations
TYPE_MAP = {
    "String": "str",
    "Int": "int",
    "Long": "int",
    "Short": "int",
    "Byte": "int",
    "Float": "float",
    "Double": "float",
    "Boolean": "bool",
    "Any": "object",
    "Unit": "None",
    "List": "list",
    "MutableList": "list",
    "Set": "set",
    "MutableSet": "set",
    "Map": "dict",
    "MutableMap": "dict",
    "Pair": "tuple",
    "Triple": "tuple",
}

# Packages whose types are mapped by simple name
JVM_PACKAGES = ("kotlin.", "kotlin.collections.", "java.lang.", "java.util.")

SNAPSHOT_SOURCE = "snapshot_source"
STATE_INPUT = "state_input"


def _map_name(qualified_name: str) -> str:
    if qualified_name in TYPE_MAP:
        return TYPE_MAP[qualified_name]
    for package in JVM_PACKAGES:
        simple = qualified_name.removeprefix(package)
        if simple != qualified_name and simple in TYPE_MAP:
            return TYPE_MAP[simple]
    return qualified_name.removeprefix("builtins.")


def annotation(t: TypeDescriptor) -> str:
    """Map a TypeDescriptor to a Python type annotation."""
    if t.qualified_name == "typing.Union":
        text = " | ".join(annotation(a) for a in t.type_arguments)
    elif t.type_arguments:
        arguments = ", ".join(annotation(a) for a in t.type_arguments)
        text = f"{_map_name(t.qualified_name)}[{arguments}]"
    else:
        text = _map_name(t.qualified_name)

    if t.nullable and text != "None":
        text += " | None"
    return text


def split_qualified_name(qualified_name: str) -> tuple[str, str] | None:
    """Split a qualified name into (module, attribute path).

    Trailing CapWords segments are taken to be classes: a.b.Outer.Inner
    splits into ("a.b", "Outer.Inner").
    """
    parts = qualified_name.split(".")
    if len(parts) < 2 or not all(p.isidentifier() for p in parts):
        return None
    module = parts[:-1]
    while module and module[-1][:1].isupper():
        module.pop()
    if not module:
        return None
    return ".".join(module), ".".join(parts[len(module) :])


def _collect_modules(t: TypeDescriptor, modules: set[str]) -> None:
    if t.qualified_name != "typing.Union" and _map_name(t.qualified_name) == t.qualified_name:
        split = split_qualified_name(t.qualified_name)
        if split is not None and split[0] != "builtins":
            modules.add(split[0])
    for argument in t.type_arguments:
        _collect_modules(argument, modules)


def _event_type(p: PropertyDescriptor) -> str:
    return "SingleEvent" if p.single_read else "MultiEvent"


def _accessor(p: PropertyDescriptor) -> GeneratedMember:
    return GeneratedMember(
        name=f"observe_{p.name}",
        kind=MemberKind.ACCESSOR,
        annotation=f"Observable[Event[{annotation(p.declared_type)}]]",
        property=p.name,
        event_type=_event_type(p),
    )


def _save_snapshot() -> GeneratedMember:
    return GeneratedMember(name="save_snapshot", kind=MemberKind.SAVE_SNAPSHOT, annotation="None")


def _fields(properties: list[PropertyDescriptor]) -> list[GeneratedMember]:
    return [
        GeneratedMember(
            name=p.name,
            kind=MemberKind.FIELD,
            annotation=annotation(p.declared_type),
            property=p.name,
        )
        for p in properties
    ]


def synthesize(schema: Schema) -> GeneratedArtifactSet:
    """Derive the generated types of a state definition.

    The result depends only on the schema: member order follows the
    declaration order of the properties.
    """
    name = schema.definition.name
    properties = schema.properties

    accessors = [_accessor(p) for p in properties]
    interface_members = list(accessors)
    if schema.has_persisted:
        interface_members.append(_save_snapshot())
    interface = GeneratedType(f"{name}Client", ArtifactKind.INTERFACE, interface_members)

    snapshot = None
    if schema.has_persisted:
        snapshot = GeneratedType(
            f"{name}Snapshot", ArtifactKind.SNAPSHOT, _fields(schema.persisted)
        )

    input_type = None
    if schema.has_input:
        input_type = GeneratedType(f"{name}Input", ArtifactKind.INPUT, _fields(schema.inputs))

    channels = [
        GeneratedMember(
            name=f"_{p.name}_channel",
            kind=MemberKind.CHANNEL,
            annotation=f"StateChannel[Event[{annotation(p.declared_type)}]]",
            property=p.name,
            event_type=_event_type(p),
        )
        for p in properties
    ]
    mutators = [
        GeneratedMember(
            name=f"push_{p.name}",
            kind=MemberKind.MUTATOR,
            annotation=annotation(p.declared_type),
            property=p.name,
            event_type=_event_type(p),
        )
        for p in properties
    ]
    delegate_members = [
        *channels,
        GeneratedMember(name="get_initial_state", kind=MemberKind.INITIAL_STATE, annotation=name),
        *accessors,
        *mutators,
        GeneratedMember(name="current_state", kind=MemberKind.CURRENT_STATE, annotation=name),
    ]
    if schema.has_persisted:
        delegate_members.append(_save_snapshot())
    delegate = GeneratedType(f"{name}Delegate", ArtifactKind.DELEGATE, delegate_members)

    factory = GeneratedType(
        f"{name}Factory",
        ArtifactKind.FACTORY,
        [GeneratedMember(name="create", kind=MemberKind.CREATE, annotation=delegate.name)],
    )

    parameters = []
    if schema.has_persisted:
        parameters.append(SNAPSHOT_SOURCE)
    if schema.has_input:
        parameters.append(STATE_INPUT)
    plan = InitialStatePlan(
        parameters=parameters,
        input_fields=[p.name for p in schema.inputs],
        restored_fields=[p.name for p in schema.persisted],
    )

    modules: set[str] = set()
    for p in properties:
        _collect_modules(p.declared_type, modules)

    return GeneratedArtifactSet(
        state_schema=schema,
        module_name=f"{to_snake_case(name)}_gen",
        interface=interface,
        delegate=delegate,
        snapshot=snapshot,
        input=input_type,
        factory=factory,
        initial_state=plan,
        snapshot_key=snapshot_key(name) if schema.has_persisted else None,
        type_imports=sorted(modules),
    )


def _runtime_names(artifacts: GeneratedArtifactSet) -> list[str]:
    schema = artifacts.state_schema
    names = {"Event", "Observable", "SnapshotStore", "StateChannel", "StateFactory"}
    if schema.single_read:
        names.add("SingleEvent")
    if schema.multi_read:
        names.add("MultiEvent")
    if schema.has_persisted:
        names.update(("Snapshot", "restore_snapshot"))
    return sorted(names)


def _parameters(artifacts: GeneratedArtifactSet) -> str:
    """Constructor parameter list shared by the delegate and get_initial_state."""
    params = []
    if SNAPSHOT_SOURCE in artifacts.initial_state.parameters:
        params.append(f"{SNAPSHOT_SOURCE}: SnapshotStore | None = None")
    if artifacts.input is not None:
        params.append(f"{STATE_INPUT}: {artifacts.input.name} | None = None")
    return "".join(f", {p}" for p in params)


def render(artifacts: GeneratedArtifactSet, runtime_import: str = "stategen.runtime") -> str:
    """Render a generated artifact set to Python source code."""
    view_model = None
    if artifacts.state_schema.definition.view_model:
        split = split_qualified_name(artifacts.state_schema.definition.view_model)
        if split is not None:
            view_model = (split[0], split[1].partition(".")[0], split[1])

    return template.render(
        schema=artifacts.state_schema,
        artifacts=artifacts,
        kinds=MemberKind,
        runtime_import=runtime_import,
        runtime_names=_runtime_names(artifacts),
        parameters=_parameters(artifacts),
        input_annotation=f"{artifacts.input.name} | None" if artifacts.input else "object",
        view_model=view_model,
        BLANK_LINE="",
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("stategen.runtime").joinpath(filename).read_text()
        result[filename] = content
    return result
