import pytest

from app.models.notification import NotificationType, Priority
from app.schemas.notification import NotificationCreate
from app.services.errors import NotFound
from app.services.notification_service import (
    create_notification,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
)


def _note(branch_id, title="Low stock", type=NotificationType.LOW_STOCK):
    return NotificationCreate(branch_id=branch_id, type=type, title=title, message="Check the walk-in")


def test_unread_first_and_unread_count(db, run, catalog):
    a = run(create_notification, _note(catalog.b1, "first"))
    run(create_notification, _note(catalog.b1, "second", NotificationType.SYSTEM))
    run(create_notification, _note(catalog.b2, "other branch"))
    run(mark_read, a.id)

    rows, total, unread = list_notifications(db, catalog.b1)
    assert total == 2
    assert unread == 1
    assert [n.title for n in rows] == ["second", "first"]
    assert rows[0].priority == Priority.NORMAL

    rows, total, _ = list_notifications(db, catalog.b1, type=NotificationType.SYSTEM)
    assert [n.title for n in rows] == ["second"]


def test_mark_all_read_counts_only_unread(db, run, catalog):
    for i in range(3):
        run(create_notification, _note(catalog.b1, f"n{i}"))
    run(create_notification, _note(catalog.b2))

    assert run(mark_all_read, catalog.b1) == 3
    assert run(mark_all_read, catalog.b1) == 0
    assert list_notifications(db, catalog.b2)[2] == 1


def test_delete_and_missing(run, catalog):
    n = run(create_notification, _note(catalog.b1))
    run(delete_notification, n.id)
    with pytest.raises(NotFound):
        run(mark_read, n.id)


def test_create_for_unknown_branch(run, catalog):
    with pytest.raises(NotFound):
        run(create_notification, _note(9999))
