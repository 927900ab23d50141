"""End-to-end tests of generated state containers."""

import dataclasses

import pytest

from stategen.runtime import MemorySnapshotStore, StateFactory
from stategen.tests import definitions


@pytest.fixture
def main(generate):
    return generate(definitions.MainState)


def observe(observable):
    """Subscribe and collect what each delivered event yields."""
    seen = []
    observable.subscribe(lambda event: seen.append(event.get()))
    return seen


def describe_generated_types():
    def restricts_snapshot_fields(expect, main):
        expect([f.name for f in dataclasses.fields(main.MainStateSnapshot)]) == ["city", "toast"]
        expect([f.name for f in dataclasses.fields(main.MainStateInput)]) == ["name"]

    def implements_observation_interface(expect, main):
        expect(main.MainStateClient in main.MainStateDelegate.__mro__) == True
        expect(issubclass(main.MainStateFactory, StateFactory)) == True
        expect(main.MainStateDelegate.SNAPSHOT_KEY) == "MAINSTATE_BUNDLE_KEY"


def describe_initial_state():
    def starts_from_defaults_and_input(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        expect(delegate.current_state()) == definitions.MainState(
            city="Moscow", name="Sasha", other="", toast=None
        )

    def restores_persisted_fields(expect, main):
        store = MemorySnapshotStore()
        store.save_snapshot("MAINSTATE_BUNDLE_KEY", main.MainStateSnapshot(city="Paris", toast=None))

        delegate = main.MainStateDelegate(store, main.MainStateInput(name="Sasha"))
        state = delegate.current_state()
        expect(state.city) == "Paris"
        expect(state.name) == "Sasha"

    def ignores_undecodable_snapshots(expect, main):
        store = MemorySnapshotStore({"MAINSTATE_BUNDLE_KEY": "not a snapshot"})
        delegate = main.MainStateDelegate(store, main.MainStateInput(name="Sasha"))
        expect(delegate.current_state().city) == "Moscow"

    def ignores_snapshots_with_wrongly_typed_values(expect, main):
        store = MemorySnapshotStore({"MAINSTATE_BUNDLE_KEY": '{"city": 5, "toast": null}'})
        delegate = main.MainStateDelegate(store, main.MainStateInput(name="Sasha"))
        expect(delegate.current_state().city) == "Moscow"

    def ignores_snapshots_stored_under_other_keys(expect, main):
        store = MemorySnapshotStore()
        store.save_snapshot("OTHER_BUNDLE_KEY", main.MainStateSnapshot(city="Paris", toast=None))
        delegate = main.MainStateDelegate(store, main.MainStateInput(name="Sasha"))
        expect(delegate.current_state().city) == "Moscow"

    def requires_input_for_fields_without_defaults(expect, main):
        with pytest.raises(TypeError):
            main.MainStateDelegate()

    def lets_snapshot_override_input(expect, generate):
        schedule = generate(definitions.ScheduleState)
        store = MemorySnapshotStore()
        store.save_snapshot(
            "SCHEDULESTATE_BUNDLE_KEY",
            schedule.ScheduleStateSnapshot(due=None, tags={}, label="saved"),
        )

        fresh = schedule.ScheduleStateDelegate(None, schedule.ScheduleStateInput(label="draft"))
        restored = schedule.ScheduleStateDelegate(store, schedule.ScheduleStateInput(label="draft"))
        expect(fresh.current_state().label) == "draft"
        expect(restored.current_state().label) == "saved"


def describe_delivery():
    def replays_multi_read_values_to_every_observer(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        first = observe(delegate.observe_city())
        second = observe(delegate.observe_city())
        delegate.push_city("Paris")

        expect(first) == ["Moscow", "Paris"]
        expect(second) == ["Moscow", "Paris"]

    def hands_single_read_values_to_first_reader(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        first = observe(delegate.observe_toast())
        delegate.push_toast("Saved")
        late = observe(delegate.observe_toast())

        expect(first) == [None, "Saved"]
        expect(late) == [None]

    def wraps_every_push_freshly(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        delegate.push_toast("Saved")
        expect(delegate.observe_toast().value.get()) == "Saved"
        expect(delegate.observe_toast().value.get()) == None
        delegate.push_toast("Saved")
        expect(observe(delegate.observe_toast())) == ["Saved"]

    def reads_current_state_without_consuming(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        delegate.push_toast("Saved")
        expect(delegate.current_state().toast) == "Saved"
        expect(observe(delegate.observe_toast())) == ["Saved"]

    def exposes_read_only_views(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        expect(hasattr(delegate.observe_city(), "push")) == False


def describe_save_snapshot():
    def saves_persisted_fields_for_next_construction(expect, main):
        store = MemorySnapshotStore()
        delegate = main.MainStateDelegate(store, main.MainStateInput(name="Sasha"))
        delegate.push_city("Paris")
        delegate.push_other("not persisted")
        delegate.push_toast("Saved")
        observe(delegate.observe_toast())

        delegate.save_snapshot(store)

        expect("MAINSTATE_BUNDLE_KEY" in store) == True
        restored = main.MainStateDelegate(store, main.MainStateInput(name="Dima")).current_state()
        expect(restored) == definitions.MainState(
            city="Paris", name="Dima", other="", toast="Saved"
        )

    def ignores_missing_target(expect, main):
        delegate = main.MainStateDelegate(state_input=main.MainStateInput(name="Sasha"))
        delegate.save_snapshot(None)

    def round_trips_collections(expect, generate):
        schedule = generate(definitions.ScheduleState)
        store = MemorySnapshotStore()
        delegate = schedule.ScheduleStateDelegate()
        delegate.push_tags({"work": [1, 2]})
        delegate.save_snapshot(store)

        restored = schedule.ScheduleStateDelegate(store).current_state()
        expect(restored.tags) == {"work": [1, 2]}
        expect(restored.due) == None
        expect(restored.label) == "untitled"

    def is_absent_without_persisted_fields(expect, generate):
        counter = generate(definitions.CounterState)
        expect(hasattr(counter.CounterStateDelegate, "save_snapshot")) == False
        expect(hasattr(counter, "CounterStateSnapshot")) == False


def describe_factory():
    def creates_initialized_delegates(expect, main):
        store = MemorySnapshotStore()
        store.save_snapshot("MAINSTATE_BUNDLE_KEY", main.MainStateSnapshot(city="Paris", toast=None))
        factory = main.MainStateFactory(store, main.MainStateInput(name="Sasha"))

        delegate = factory.create()
        expect(type(delegate)) == main.MainStateDelegate
        expect(delegate.current_state().city) == "Paris"

    def overrides_stored_arguments(expect, main):
        factory = main.MainStateFactory(None, main.MainStateInput(name="Sasha"))
        delegate = factory.create(state_input=main.MainStateInput(name="Dima"))
        expect(delegate.current_state().name) == "Dima"

    def builds_declared_view_model(expect, main):
        factory = main.MainStateFactory(state_input=main.MainStateInput(name="Sasha"))
        model = factory.create_view_model()

        expect(type(model)) == definitions.MainViewModel
        model.apply_name("Dima")
        expect(model.delegate.current_state().name) == "Dima"

    def falls_back_for_unrelated_types(expect, main):
        factory = main.MainStateFactory(state_input=main.MainStateInput(name="Sasha"))
        model = factory.create_view_model(definitions.UnrelatedModel)
        expect(model.created) == True

    def creates_containers_without_external_state(expect, generate):
        counter = generate(definitions.CounterState)
        delegate = counter.CounterStateFactory().create()
        delegate.push_count(3)
        expect(delegate.current_state()) == definitions.CounterState(count=3, history=[])

    def handles_definitions_without_fields(expect, generate):
        empty = generate(definitions.EmptyState)
        expect(empty.EmptyStateFactory().create().current_state()) == definitions.EmptyState()
