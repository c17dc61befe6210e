import pytest

from paintmate.document import Document
from paintmate.services.history import HistoryManager


def _doc(marker: int) -> Document:
    doc = Document.new(2, 2)
    doc.draw_pixel(0, 0, (marker, 0, 0, 255))
    return doc


def _marker(doc: Document) -> int:
    return int(doc.layers[0].pixels[0, 0, 0])


def test_fresh_history_has_nothing_to_do():
    h = HistoryManager()
    assert h.capacity == 50
    assert len(h) == 0 and h.cursor == 0
    assert not h.can_undo()
    assert not h.can_redo()
    assert h.undo() is None
    assert h.redo() is None


def test_can_undo_needs_two_states():
    h = HistoryManager()
    h.push_state(_doc(1))
    assert not h.can_undo()
    h.push_state(_doc(2))
    assert h.can_undo()
    h.clear()
    assert not h.can_undo()
    assert len(h) == 0 and h.cursor == 0


def test_undo_then_redo_returns_same_document():
    h = HistoryManager()
    h.push_state(_doc(1))
    current = _doc(2)
    h.push_state(current)

    prev = h.undo()
    assert _marker(prev) == 1
    assert h.cursor == 1
    assert h.can_redo()

    again = h.redo()
    assert again == current
    assert h.cursor == 2
    assert not h.can_redo()


def test_push_discards_redo_branch():
    h = HistoryManager()
    for i in (1, 2, 3):
        h.push_state(_doc(i))
    h.undo()
    h.undo()
    assert h.cursor == 1
    h.push_state(_doc(9))
    assert len(h) == 2
    assert h.cursor == 2
    assert not h.can_redo()
    assert _marker(h.undo()) == 1


def test_capacity_evicts_oldest_states():
    h = HistoryManager(capacity=50)
    for i in range(55):
        h.push_state(_doc(i))
    assert len(h) == 50
    assert h.cursor == 50

    seen = []
    while h.can_undo():
        seen.append(_marker(h.undo()))
    # states 0..4 are gone, 5 is now the oldest
    assert seen[-1] == 5
    assert seen == list(range(53, 4, -1))
    assert h.cursor == 1


def test_eviction_after_undo_keeps_cursor_in_range():
    h = HistoryManager(capacity=3)
    for i in range(3):
        h.push_state(_doc(i))
    h.undo()
    h.push_state(_doc(7))
    h.push_state(_doc(8))
    assert len(h) == 3
    assert h.cursor == 3
    assert [_marker(h.undo()), _marker(h.undo())] == [7, 1]
    assert not h.can_undo()


def test_snapshots_do_not_alias_live_document():
    h = HistoryManager()
    live = _doc(1)
    h.push_state(live)
    h.push_state(_doc(2))

    live.draw_pixel(0, 0, (99, 0, 0, 255))
    restored = h.undo()
    assert _marker(restored) == 1

    restored.draw_pixel(0, 0, (42, 0, 0, 255))
    h.redo()
    assert _marker(h.undo()) == 1


def test_invalid_capacity_is_rejected():
    with pytest.raises(ValueError):
        HistoryManager(capacity=0)


def test_stats():
    h = HistoryManager(capacity=2)
    h.push_state(_doc(1))
    h.push_state(_doc(2))
    h.undo()
    assert h.stats() == {"undo_count": 0, "redo_count": 1, "capacity": 2, "full": True}
