"""Type definitions for state definition analysis and code generation."""

from dataclasses import dataclass, field, replace
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


@dataclass(frozen=True)
class TypeDescriptor(DataClassJsonMixin):
    """A declared type as a tree of names and type arguments.

    Example: Map<String, List<Int>?> is
    TypeDescriptor("Map", False, [TypeDescriptor("String"),
    TypeDescriptor("List", True, [TypeDescriptor("Int")])])
    """

    qualified_name: str
    nullable: bool = False
    type_arguments: list["TypeDescriptor"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.qualified_name:
            raise ValueError("TypeDescriptor requires a non-empty qualified_name")

    def with_arguments(self, arguments: list["TypeDescriptor"]) -> "TypeDescriptor":
        return replace(self, type_arguments=list(arguments))

    def as_nullable(self, nullable: bool = True) -> "TypeDescriptor":
        return replace(self, nullable=nullable)

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rpartition(".")[2]


@dataclass(frozen=True)
class PropertyDescriptor(DataClassJsonMixin):
    """One constructor parameter of a state definition and its markers."""

    name: str
    declared_type: TypeDescriptor
    single_read: bool = False
    persisted: bool = False
    input_only: bool = False
    has_default: bool = True


@dataclass(frozen=True)
class DefinitionInfo(DataClassJsonMixin):
    """Identifies a processed state definition."""

    name: str
    module: str
    view_model: str | None = None  # qualified name of the consumer type

    @property
    def package(self) -> str:
        return self.module.rpartition(".")[0]


@dataclass(frozen=True)
class Schema(DataClassJsonMixin):
    """Classified properties of one state definition."""

    definition: DefinitionInfo
    properties: list[PropertyDescriptor]
    has_persisted: bool
    has_input: bool
    any_persistence: bool

    @property
    def single_read(self) -> list[PropertyDescriptor]:
        return [p for p in self.properties if p.single_read]

    @property
    def multi_read(self) -> list[PropertyDescriptor]:
        return [p for p in self.properties if not p.single_read]

    @property
    def persisted(self) -> list[PropertyDescriptor]:
        return [p for p in self.properties if p.persisted]

    @property
    def inputs(self) -> list[PropertyDescriptor]:
        return [p for p in self.properties if p.input_only]

    @property
    def plain(self) -> list[PropertyDescriptor]:
        return [p for p in self.properties if not (p.persisted or p.input_only)]


class ArtifactKind(StrEnum):
    """The generated types of one state definition."""

    INTERFACE = auto()
    DELEGATE = auto()
    SNAPSHOT = auto()
    INPUT = auto()
    FACTORY = auto()


class MemberKind(StrEnum):
    """Members of generated types."""

    ACCESSOR = auto()  # observe_<field>()
    MUTATOR = auto()  # push_<field>(value)
    CHANNEL = auto()  # backing StateChannel attribute
    SAVE_SNAPSHOT = auto()
    INITIAL_STATE = auto()
    CURRENT_STATE = auto()
    FIELD = auto()  # dataclass field of snapshot/input types
    CREATE = auto()


@dataclass(frozen=True)
class GeneratedMember(DataClassJsonMixin):
    """A member of a generated type.

    annotation is the Python annotation of the member: the return type for
    methods, the value type for mutators and the field type for fields.
    """

    name: str
    kind: MemberKind
    annotation: str
    property: str | None = None
    event_type: str | None = None  # SingleEvent or MultiEvent


@dataclass(frozen=True)
class GeneratedType(DataClassJsonMixin):
    """Shape of one generated type."""

    name: str
    kind: ArtifactKind
    members: list[GeneratedMember]

    def of_kind(self, kind: MemberKind) -> list[GeneratedMember]:
        return [m for m in self.members if m.kind == kind]

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in self.members]


@dataclass(frozen=True)
class InitialStatePlan(DataClassJsonMixin):
    """How get_initial_state merges defaults, input and snapshot."""

    parameters: list[str]  # subset of snapshot_source, state_input, in order
    input_fields: list[str]
    restored_fields: list[str]


@dataclass(frozen=True)
class GeneratedArtifactSet(DataClassJsonMixin):
    """Everything generated for one state definition."""

    state_schema: Schema
    module_name: str
    interface: GeneratedType
    delegate: GeneratedType
    snapshot: GeneratedType | None
    input: GeneratedType | None
    factory: GeneratedType
    initial_state: InitialStatePlan
    snapshot_key: str | None
    type_imports: list[str]

    @property
    def types(self) -> list[GeneratedType]:
        """Generated types in emission order."""
        candidates = [self.interface, self.snapshot, self.input, self.delegate, self.factory]
        return [t for t in candidates if t is not None]
