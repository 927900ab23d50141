"""Base class for generated factories."""

from typing import Any, ClassVar, Generic, TypeVar

from .snapshot import SnapshotStore

D = TypeVar("D")


class StateFactory(Generic[D]):
    """Builds delegates from an optional snapshot source and input object.

    Generated subclasses implement create() and may set view_model_type to
    the consumer type that wraps the delegate.

    Example:
        factory = MainStateFactory(store, MainStateInput(name="Sasha"))
        view_model = factory.create_view_model()
    """

    view_model_type: ClassVar[type | None] = None

    def __init__(
        self, snapshot_source: SnapshotStore | None = None, state_input: Any = None
    ) -> None:
        self.snapshot_source = snapshot_source
        self.state_input = state_input

    def create(self, snapshot_source: SnapshotStore | None = None, state_input: Any = None) -> D:
        """Build a fully initialized delegate. Generated code overrides this."""
        raise NotImplementedError("create() must be implemented by generated code")

    def create_view_model(self, model_class: type | None = None) -> Any:
        """Instantiate a consumer type.

        The declared view model type (or a subclass of it) receives a new
        delegate; any other type is built with its no-argument constructor.
        """
        if model_class is None:
            model_class = self.view_model_type
        if model_class is None:
            raise TypeError(f"{type(self).__name__} has no view model type")
        if self.view_model_type is not None and issubclass(model_class, self.view_model_type):
            return model_class(self.create())
        return model_class()
