"""Tests for the SQLite relational store."""

import pytest


OLD_TIMESTAMP = "2020-01-01T00:00:00Z"


def _item(item_id, title="Task", **fields):
    from work_core import WorkItem

    item = WorkItem(id=item_id, title=title, created=OLD_TIMESTAMP, updated=OLD_TIMESTAMP)
    for key, value in fields.items():
        setattr(item, key, value)
    return item


def test_insert_and_get_item(db_connection):
    """Should store every field and read it back unchanged."""
    from work_core import LogEntry, get_item, insert_item

    item = _item(
        "001",
        description="Details",
        blocked_by=["002"],
        labels=["urgent"],
        log=[LogEntry(time=OLD_TIMESTAMP, text="note", agent="bot")],
        author="me",
        assignee="you",
        extra={"beads_id": "bd-1"},
    )
    insert_item(db_connection, item)

    assert get_item(db_connection, "001") == item


def test_get_item_normalizes_id(db_connection):
    """'1' and '001' should find the same item."""
    from work_core import get_item, insert_item

    insert_item(db_connection, _item("001"))

    assert get_item(db_connection, "1").id == "001"
    assert get_item(db_connection, "001").id == "001"


def test_get_item_returns_none_when_missing(db_connection):
    from work_core import get_item

    assert get_item(db_connection, "999") is None


def test_insert_duplicate_id_raises(db_connection):
    from work_core import DuplicateIdError, insert_item

    insert_item(db_connection, _item("001"))

    with pytest.raises(DuplicateIdError, match="001"):
        insert_item(db_connection, _item("001", title="Again"))


def test_insert_rejects_invalid_item(db_connection):
    from work_core import ValidationError, insert_item, list_items

    with pytest.raises(ValidationError):
        insert_item(db_connection, _item("001", priority=9))

    assert list_items(db_connection, status="any") == []


def test_update_item_refreshes_updated(db_connection):
    """Every successful mutation should bump the updated timestamp."""
    from work_core import get_item, insert_item, update_item

    insert_item(db_connection, _item("001"))

    def rename(item):
        item.title = "Renamed"

    updated = update_item(db_connection, "1", rename)

    assert updated.title == "Renamed"
    assert updated.updated != OLD_TIMESTAMP
    assert updated.created == OLD_TIMESTAMP
    assert get_item(db_connection, "001") == updated


def test_update_item_missing_raises(db_connection):
    from work_core import NotFoundError, update_item

    with pytest.raises(NotFoundError, match="999"):
        update_item(db_connection, "999", lambda item: None)


def test_update_item_invalid_mutation_leaves_row(db_connection):
    """A mutation that breaks a rule should not be written."""
    from work_core import ValidationError, get_item, insert_item, update_item

    insert_item(db_connection, _item("001"))

    def break_it(item):
        item.title = ""

    with pytest.raises(ValidationError):
        update_item(db_connection, "001", break_it)

    stored = get_item(db_connection, "001")
    assert stored.title == "Task"
    assert stored.updated == OLD_TIMESTAMP


def test_update_item_cannot_change_id(db_connection):
    from work_core import ValidationError, get_item, insert_item, update_item

    insert_item(db_connection, _item("001"))

    def change_id(item):
        item.id = "002"

    with pytest.raises(ValidationError, match="immutable"):
        update_item(db_connection, "001", change_id)

    assert get_item(db_connection, "002") is None


def test_list_items_excludes_closed_by_default(db_connection):
    from work_core import insert_item, list_items

    insert_item(db_connection, _item("001"))
    insert_item(db_connection, _item("002", status="closed"))
    insert_item(db_connection, _item("003", status="in_progress"))

    ids = [i.id for i in list_items(db_connection)]

    assert ids == ["001", "003"]


def test_list_items_status_filter(db_connection):
    from work_core import insert_item, list_items

    insert_item(db_connection, _item("001"))
    insert_item(db_connection, _item("002", status="closed"))

    assert [i.id for i in list_items(db_connection, status="closed")] == ["002"]
    assert [i.id for i in list_items(db_connection, status="any")] == ["001", "002"]


def test_list_items_orders_by_priority_then_numeric_id(db_connection):
    """Priority ascending, ties broken by numeric (not lexical) ID."""
    from work_core import insert_item, list_items

    insert_item(db_connection, _item("1000", priority=1))
    insert_item(db_connection, _item("010", priority=2))
    insert_item(db_connection, _item("002", priority=2))
    insert_item(db_connection, _item("999", priority=1))
    insert_item(db_connection, _item("005", priority=0))

    ids = [i.id for i in list_items(db_connection)]

    assert ids == ["005", "999", "1000", "002", "010"]


def test_list_items_filters_are_conjunctive(db_connection):
    from work_core import insert_item, list_items

    insert_item(db_connection, _item("001", type="feature", author="a1"))
    insert_item(db_connection, _item("002", type="feature", author="a2"))
    insert_item(db_connection, _item("003", type="bug", author="a1"))

    result = list_items(db_connection, item_type="feature", author="a1")

    assert [i.id for i in result] == ["001"]


def test_list_items_assignee_filter(db_connection):
    from work_core import insert_item, list_items

    insert_item(db_connection, _item("001", assignee="worker"))
    insert_item(db_connection, _item("002"))

    assert [i.id for i in list_items(db_connection, assignee="worker")] == ["001"]


def test_list_items_label_filter(db_connection):
    """Should match exact label membership, not substrings."""
    from work_core import insert_item, list_items

    insert_item(db_connection, _item("001", labels=["urgent", "backend"]))
    insert_item(db_connection, _item("002", labels=["urgent-ish"]))
    insert_item(db_connection, _item("003"))

    assert [i.id for i in list_items(db_connection, label="urgent")] == ["001"]


def test_all_items_includes_closed_in_id_order(db_connection):
    from work_core import all_items, insert_item

    insert_item(db_connection, _item("003", priority=0))
    insert_item(db_connection, _item("001", status="closed"))
    insert_item(db_connection, _item("002", priority=4))

    assert [i.id for i in all_items(db_connection)] == ["001", "002", "003"]


def test_replace_all_swaps_contents(db_connection):
    from work_core import all_items, insert_item, replace_all

    insert_item(db_connection, _item("001", title="Old"))

    count = replace_all(db_connection, [_item("005", title="New"), _item("002")])

    assert count == 2
    assert [i.id for i in all_items(db_connection)] == ["002", "005"]


def test_replace_all_is_atomic_on_duplicate(db_connection):
    """A failing replacement should keep the previous contents."""
    from work_core import DuplicateIdError, all_items, insert_item, replace_all

    insert_item(db_connection, _item("001", title="Keep me"))

    with pytest.raises(DuplicateIdError):
        replace_all(db_connection, [_item("002"), _item("002", title="Dup")])

    items = all_items(db_connection)
    assert [i.title for i in items] == ["Keep me"]


def test_replace_all_with_nothing_empties_store(db_connection):
    from work_core import all_items, insert_item, replace_all

    insert_item(db_connection, _item("001"))

    assert replace_all(db_connection, []) == 0
    assert all_items(db_connection) == []


def test_max_numeric_id(db_connection):
    from work_core import insert_item, max_numeric_id

    assert max_numeric_id(db_connection) == 0

    insert_item(db_connection, _item("002"))
    insert_item(db_connection, _item("010"))

    assert max_numeric_id(db_connection) == 10


def test_distinct_labels(db_connection):
    from work_core import get_all_labels, insert_item

    insert_item(db_connection, _item("001", labels=["urgent", "backend"]))
    insert_item(db_connection, _item("002", labels=["backend"]))
    insert_item(db_connection, _item("003"))

    assert get_all_labels(db_connection) == ["backend", "urgent"]


def test_insert_items_commits_together(db_connection):
    from work_core import all_items, insert_item, insert_items

    insert_item(db_connection, _item("001"))

    assert insert_items(db_connection, [_item("002"), _item("003")]) == 2
    assert [i.id for i in all_items(db_connection)] == ["001", "002", "003"]


def test_insert_items_is_atomic_on_clash(db_connection):
    """A clash with an existing ID keeps none of the batch."""
    from work_core import DuplicateIdError, all_items, insert_item, insert_items

    insert_item(db_connection, _item("001"))

    with pytest.raises(DuplicateIdError, match="001"):
        insert_items(db_connection, [_item("002"), _item("001", title="Clash")])

    assert [i.id for i in all_items(db_connection)] == ["001"]


def test_insert_items_validates_before_writing(db_connection):
    from work_core import ValidationError, insert_items, list_items

    with pytest.raises(ValidationError):
        insert_items(db_connection, [_item("001"), _item("002", title=" ")])

    assert list_items(db_connection, status="any") == []
