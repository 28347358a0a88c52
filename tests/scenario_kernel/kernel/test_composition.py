from __future__ import annotations

import pytest

from harness.recording import NestedScenario, PairStep, StepA, StepB, StepX
from scenario_kernel.kernel import (
    ComposeUsing,
    CompositeStep,
    CompositionRegistry,
    ConfigurationError,
    DeclarationError,
    child_step_id,
    compose_using,
    descriptor_for,
    register_composition,
)


def test_descriptor_sorts_entries_by_order() -> None:
    # Declaration order on the class does not matter; order values do.
    @compose_using(5, "late", StepB)
    @compose_using(1, "early", StepA)
    class Unsorted(CompositeStep):
        pass

    assert descriptor_for(Unsorted).step_ids == ("early", "late")


def test_descriptor_is_cached_per_type() -> None:
    # Discovery happens once; instances share the descriptor.
    assert descriptor_for(NestedScenario) is descriptor_for(NestedScenario)
    assert descriptor_for(NestedScenario).step_ids == ("A", "B", "R")
    assert len(descriptor_for(PairStep)) == 2


def test_duplicate_order_raises_on_first_use() -> None:
    # Two children with the same order are never silently resolved.
    @compose_using(0, "first", StepA)
    @compose_using(0, "second", StepB)
    class Clashing(CompositeStep):
        pass

    with pytest.raises(DeclarationError, match="same order: 0"):
        descriptor_for(Clashing)
    # Still invalid on the next attempt.
    with pytest.raises(DeclarationError):
        descriptor_for(Clashing)


def test_duplicate_step_id_raises() -> None:
    # Child ids must be unique within one declaration.
    @compose_using(0, "same", StepA)
    @compose_using(1, "same", StepB)
    class Repeated(CompositeStep):
        pass

    with pytest.raises(DeclarationError, match="Duplicate step ids"):
        descriptor_for(Repeated)


def test_malformed_entries_are_rejected() -> None:
    # Entries must name a Step subclass, a non-empty id and an integer order.
    with pytest.raises(DeclarationError):
        compose_using(0, "x", int)  # type: ignore[arg-type]
    with pytest.raises(DeclarationError):
        compose_using(0, "", StepA)
    with pytest.raises(DeclarationError):
        compose_using(True, "x", StepA)


def test_constructor_args_are_kept_as_tuple() -> None:
    # Constructor args are normalized to a tuple.
    entry = ComposeUsing(order=0, step_id="x", step_type=StepA, constructor_args=["a", 1])  # type: ignore[arg-type]
    assert entry.constructor_args == ("a", 1)


def test_unknown_entry_raises_configuration_error() -> None:
    # Lookups by id fail loudly at configuration time.
    descriptor = descriptor_for(PairStep)
    assert descriptor.entry("X").step_type is StepX
    assert "X" in descriptor
    with pytest.raises(ConfigurationError, match="PairStep is not composed of a step with id 'Z'"):
        descriptor.entry("Z")


def test_subclass_does_not_inherit_declaration() -> None:
    # Declarations belong to the decorated class only.
    class DerivedPair(PairStep):
        pass

    assert descriptor_for(DerivedPair).step_ids == ()


def test_explicit_registration() -> None:
    # Types can be registered without the decorator, but only once.
    class Manual(CompositeStep):
        pass

    descriptor = register_composition(Manual, [ComposeUsing(1, "b", StepB), ComposeUsing(0, "a", StepA)])
    assert descriptor.step_ids == ("a", "b")
    assert descriptor_for(Manual) is descriptor
    with pytest.raises(DeclarationError, match="already registered"):
        register_composition(Manual, [])


def test_separate_registries_are_independent() -> None:
    # A registry only knows what was discovered or registered through it.
    registry = CompositionRegistry()
    assert PairStep not in registry
    registry.descriptor_for(PairStep)
    assert PairStep in registry


def test_child_step_id_joins_with_separator() -> None:
    # Nested ids are parent and child joined by an underscore.
    assert child_step_id("R", "X") == "R_X"
    assert child_step_id("R_X", "Y") == "R_X_Y"
