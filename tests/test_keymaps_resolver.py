from __future__ import annotations

from tutor_engine.keymaps import (
    WILDCARD,
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "normal",
    keys: tuple[str, ...] = ("g", "g"),
    action_id: str = "core.test",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    action_ids = {binding.action_id for binding in bindings}
    for action_id in action_ids:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "g"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id
    assert result.match.tokens == ("g", "g")


def test_resolver_reports_pending_for_prefix() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.match is None
    assert result.consumed == 1


def test_resolver_misses_unknown_key() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "x"))

    assert result.status == "miss"
    assert result.consumed == 1


def test_resolver_keeps_modes_apart() -> None:
    normal = make_binding("normal.gg", action_id="core.normal")
    visual = make_binding("visual.gg", mode="visual", action_id="core.visual")
    resolver = KeymapResolver(build_registry([normal, visual]))

    result = resolver.resolve("visual", ("g", "g"))

    assert result.match is not None
    assert result.match.binding.id == "visual.gg"
    assert result.match.action.id == "core.visual"
    assert resolver.resolve("insert", ("g", "g")).status == "miss"


def test_wildcard_captures_printable_key() -> None:
    binding = make_binding("normal.r", keys=("r", WILDCARD), action_id="edit.replace")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    pending = resolver.resolve("normal", ("r",))
    assert pending.status == "pending"

    result = resolver.resolve("normal", ("r", "z"))
    assert result.status == "match"
    assert result.match is not None
    assert result.match.last_token == "z"
    assert result.match.tokens == ("r", "z")
    assert result.match.captured == ("z",)


def test_wildcard_skips_named_keys() -> None:
    binding = make_binding("normal.r", keys=("r", WILDCARD), action_id="edit.replace")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("r", "ESC"))

    assert result.status == "miss"


def test_exact_edge_wins_over_wildcard() -> None:
    typed = make_binding("insert.any", mode="insert", keys=(WILDCARD,), action_id="insert.type")
    tab = make_binding("insert.q", mode="insert", keys=("q",), action_id="insert.q")
    registry = build_registry([typed, tab])
    resolver = KeymapResolver(registry)

    exact = resolver.resolve("insert", ("q",))
    other = resolver.resolve("insert", ("w",))

    assert exact.match is not None and exact.match.binding.id == "insert.q"
    assert other.match is not None and other.match.binding.id == "insert.any"


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("normal", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("normal.x", keys=("x",), action_id="core.x")
    registry.register_action(make_action("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("normal", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id


def test_exact_edge_match_captures_nothing() -> None:
    typed = make_binding("insert.any", mode="insert", keys=(WILDCARD,), action_id="insert.type")
    tab = make_binding("insert.q", mode="insert", keys=("q",), action_id="insert.q")
    resolver = KeymapResolver(build_registry([typed, tab]))

    exact = resolver.resolve("insert", ("q",))
    wild = resolver.resolve("insert", ("w",))

    assert exact.match is not None and exact.match.captured == ()
    assert wild.match is not None and wild.match.captured == ("w",)


def test_pending_reports_wildcard_step() -> None:
    binding = make_binding("normal.r", keys=("r", WILDCARD), action_id="edit.replace")
    resolver = KeymapResolver(build_registry([binding]))

    pending = resolver.resolve("normal", ("r",))

    assert pending.status == "pending"
    assert pending.consumed == 1
