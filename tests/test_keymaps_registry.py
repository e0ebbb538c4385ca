import pytest

from tutor_engine.keymaps import (
    WILDCARD,
    ActionRef,
    Binding,
    KeySequence,
    KeymapConflictError,
    KeymapRegistry,
    normalize_token,
)
from tutor_engine.keymaps.defaults import DEFAULT_BINDINGS, load_default_keymaps


def make_action(action_id: str = "core.test", description: str = "") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None, description=description)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "normal",
    sequence: KeySequence | None = None,
    action_id: str = "core.test",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("g", "g"),
        action_id=action_id,
    )


def bindings_by_id(registry: KeymapRegistry) -> dict[str, Binding]:
    return {binding.id: binding for binding in registry.iter_bindings()}


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    action = make_action()
    registry.register_action(action)
    binding = make_binding(binding_id="normal.gg")

    registry.register_binding(binding)

    assert list(registry.iter_bindings()) == [binding]
    assert list(registry.iter_bindings(mode="normal")) == [binding]
    assert list(registry.iter_bindings(mode="insert")) == []


def test_register_binding_unknown_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="normal.gg"))


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding = make_binding(binding_id="normal.gg")
    registry.register_binding(binding)

    with pytest.raises(KeymapConflictError) as excinfo:
        registry.register_binding(make_binding(binding_id="normal.gg.duplicate"))

    assert excinfo.value.existing == binding
    assert list(registry.iter_bindings()) == [binding]


def test_same_keys_in_other_mode_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_binding(binding_id="normal.gg"))
    registry.register_binding(make_binding(binding_id="visual.gg", mode="visual"))

    assert set(bindings_by_id(registry)) == {"normal.gg", "visual.gg"}


def test_register_binding_duplicate_id_rejected() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="binding"))

    with pytest.raises(ValueError):
        registry.register_binding(
            make_binding(binding_id="binding", sequence=make_sequence("z", "z"))
        )


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    before = registry.revision()
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]
    assert registry.revision() == before + 1


def test_replace_drops_binding_holding_the_keys() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="old"))

    new = make_binding(binding_id="new")
    registry.register_binding(new, replace=True)

    assert list(registry.iter_bindings(mode="normal")) == [new]


def test_replace_moves_binding_to_new_keys() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="binding"))

    moved = make_binding(binding_id="binding", sequence=make_sequence("z"))
    registry.register_binding(moved, replace=True)

    assert registry.help_entries("normal") == [("z", "")]


def test_help_entries_fall_back_to_action_description() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action("edit.delete_line", "Delete line"))
    registry.register_binding(
        make_binding(binding_id="normal.dd", sequence=make_sequence("d", "d"), action_id="edit.delete_line")
    )

    assert registry.help_entries("normal") == [("d d", "Delete line")]


def test_load_default_keymaps_registers_every_binding() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    loaded = bindings_by_id(registry)
    assert len(loaded) == len(DEFAULT_BINDINGS)
    assert {binding.mode for binding in loaded.values()} == {"normal", "insert", "visual", "command"}
    assert loaded["normal.dd"].action_id == "edit.delete_line"
    assert loaded[f"normal.r{WILDCARD}"].sequence.tokens == ("r", WILDCARD)


def test_load_default_keymaps_extra_bindings() -> None:
    registry = KeymapRegistry()
    extra = Binding(
        id="normal.Z",
        mode="normal",
        sequence=KeySequence.from_strings("Z"),
        action_id="core.enter_insert",
    )

    load_default_keymaps(registry, extra_bindings=(extra,))

    assert bindings_by_id(registry)["normal.Z"] == extra


def test_load_default_keymaps_extra_binding_conflict() -> None:
    registry = KeymapRegistry()
    clash = Binding(
        id="normal.custom_x",
        mode="normal",
        sequence=KeySequence.from_strings("x"),
        action_id="core.enter_insert",
    )

    with pytest.raises(KeymapConflictError):
        load_default_keymaps(registry, extra_bindings=(clash,))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("x", "x"),
        ("X", "X"),
        ("ENTER", "ENTER"),
        ("Ctrl+R", "ctrl+r"),
        ("shift+ctrl+x", "ctrl+shift+x"),
        (WILDCARD, WILDCARD),
        ("+", "+"),
    ],
)
def test_normalize_token(raw: str, expected: str) -> None:
    assert normalize_token(raw) == expected


def test_key_sequence_normalizes_tokens() -> None:
    sequence = KeySequence.from_strings("Ctrl+R", "", "w")

    assert sequence.tokens == ("ctrl+r", "w")
    assert len(sequence) == 2


def test_malformed_tokens_rejected() -> None:
    with pytest.raises(ValueError):
        normalize_token("ctrl+")
    with pytest.raises(ValueError):
        KeySequence.from_strings("")

