from __future__ import annotations

from esquire.types import ModuleRecord, PendingCallback, normalize_names


def test_resolve_without_finalizer_keeps_value():
    record = ModuleRecord(name="config", value={"debug": True}, dependencies=("env",))

    record.resolve("ignored")

    assert record.resolved is True
    assert record.value == {"debug": True}


def test_resolve_invokes_finalizer_once():
    calls: list[tuple[int, int]] = []

    def finalizer(a: int, b: int) -> int:
        calls.append((a, b))
        return a + b

    record = ModuleRecord(name="sum", dependencies=("a", "b"), finalizer=finalizer)

    record.resolve(1, 2)
    record.resolve(10, 20)

    assert record.value == 3
    assert calls == [(1, 2)]


def test_pending_callback_starts_waiting():
    entry = PendingCallback(dependencies=("a",), action=print)

    assert entry.waiting is True


def test_normalize_names_accepts_single_name_and_sequences():
    assert normalize_names("a") == ("a",)
    assert normalize_names(["a", "b"]) == ("a", "b")
    assert normalize_names(("a",)) == ("a",)
    assert normalize_names(None) == ()
    assert normalize_names([]) == ()
