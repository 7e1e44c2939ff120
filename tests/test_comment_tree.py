"""
Comment Tree Manager tests: parent linkage, subtree cascade and reply assembly.
"""

import pytest

from todo_api.core.exceptions import (
    CommentNotFoundError,
    ParentCommentNotFoundError,
    ParentInDifferentTaskError,
    TaskNotFoundError,
)
from todo_api.models import Comment, Task
from todo_api.services.comments import CommentTreeManager, subtree_ids, thread_comments


@pytest.fixture()
def manager(db_session):
    return CommentTreeManager(db_session)


@pytest.fixture()
def task(db_session):
    task = Task(title="Buy milk", description="", is_completed=False)
    db_session.add(task)
    db_session.commit()
    return task


@pytest.fixture()
def other_task(db_session):
    task = Task(title="Walk dog", description="twice", is_completed=False)
    db_session.add(task)
    db_session.commit()
    return task


class TestCreate:
    """Test comment creation."""

    @pytest.mark.parametrize("parent", [None, 0])
    def test_root_comment(self, manager, task, parent):
        comment = manager.create(task.id, "nice", parent)

        assert comment.id is not None
        assert comment.task_id == task.id
        assert comment.parent_comment_id is None
        assert comment.is_updated is False

    def test_reply(self, manager, task):
        root = manager.create(task.id, "nice")
        reply = manager.create(task.id, "thanks", root.id)

        assert reply.parent_comment_id == root.id

    def test_missing_task(self, manager):
        with pytest.raises(TaskNotFoundError):
            manager.create(999, "orphan")

    def test_missing_parent(self, manager, task, db_session):
        with pytest.raises(ParentCommentNotFoundError):
            manager.create(task.id, "reply to nothing", 4242)
        assert db_session.query(Comment).count() == 0

    def test_parent_in_different_task(self, manager, task, other_task, db_session):
        foreign = manager.create(other_task.id, "elsewhere")

        with pytest.raises(ParentInDifferentTaskError):
            manager.create(task.id, "cross-task reply", foreign.id)

        assert db_session.query(Comment).filter(Comment.task_id == task.id).count() == 0
        assert db_session.query(Comment).count() == 1

    def test_task_checked_before_parent(self, manager, task):
        root = manager.create(task.id, "nice")

        with pytest.raises(TaskNotFoundError):
            manager.create(999, "reply", root.id)


class TestUpdate:
    """Test comment edits."""

    def test_update_sets_flag(self, manager, task):
        comment = manager.create(task.id, "nice")

        updated = manager.update(comment.id, "very nice")
        assert updated.text == "very nice"
        assert updated.is_updated is True

    def test_same_text_still_marks_updated(self, manager, task):
        comment = manager.create(task.id, "nice")

        updated = manager.update(comment.id, "nice")
        assert updated.text == "nice"
        assert updated.is_updated is True

    def test_flag_never_resets(self, manager, task):
        comment = manager.create(task.id, "nice")
        manager.update(comment.id, "a")
        updated = manager.update(comment.id, "b")

        assert updated.is_updated is True

    def test_missing_comment(self, manager):
        with pytest.raises(CommentNotFoundError):
            manager.update(12345, "text")

    def test_comment_in_other_task(self, manager, task, other_task):
        comment = manager.create(other_task.id, "elsewhere")

        with pytest.raises(CommentNotFoundError):
            manager.update(comment.id, "text", task_id=task.id)


class TestDelete:
    """Test comment deletion and subtree cascade."""

    def test_delete_leaf_keeps_parent(self, manager, task):
        root = manager.create(task.id, "root")
        leaf = manager.create(task.id, "leaf", root.id)

        assert manager.delete(leaf.id) == [leaf.id]
        assert [c.id for c in manager.list_for_task(task.id)] == [root.id]

    def test_delete_cascades_to_whole_subtree(self, manager, task):
        root = manager.create(task.id, "root")
        child_a = manager.create(task.id, "a", root.id)
        child_b = manager.create(task.id, "b", root.id)
        grandchild = manager.create(task.id, "a.1", child_a.id)
        great = manager.create(task.id, "a.1.1", grandchild.id)
        unrelated = manager.create(task.id, "other root")

        deleted = manager.delete(root.id)

        assert set(deleted) == {root.id, child_a.id, child_b.id, grandchild.id, great.id}
        remaining = [c.id for c in manager.list_for_task(task.id)]
        assert remaining == [unrelated.id]

    def test_delete_middle_node(self, manager, task):
        root = manager.create(task.id, "root")
        middle = manager.create(task.id, "middle", root.id)
        manager.create(task.id, "leaf", middle.id)

        manager.delete(middle.id)

        assert [c.id for c in manager.list_for_task(task.id)] == [root.id]

    def test_missing_comment(self, manager):
        with pytest.raises(CommentNotFoundError):
            manager.delete(12345)

    def test_scoped_to_task(self, manager, task, other_task):
        comment = manager.create(other_task.id, "elsewhere")

        with pytest.raises(CommentNotFoundError):
            manager.delete(comment.id, task_id=task.id)
        assert len(manager.list_for_task(other_task.id)) == 1

    def test_delete_for_task(self, manager, task, other_task, db_session):
        root = manager.create(task.id, "root")
        reply = manager.create(task.id, "reply", root.id)
        manager.create(task.id, "reply 2", reply.id)
        manager.create(other_task.id, "kept")

        assert manager.delete_for_task(task.id) == 3
        db_session.commit()

        assert manager.list_for_task(task.id) == []
        assert len(manager.list_for_task(other_task.id)) == 1


class TestList:
    def test_missing_task(self, manager):
        with pytest.raises(TaskNotFoundError):
            manager.list_for_task(999)

    def test_only_task_comments_in_id_order(self, manager, task, other_task):
        first = manager.create(task.id, "first")
        manager.create(other_task.id, "elsewhere")
        second = manager.create(task.id, "second", first.id)

        assert [c.id for c in manager.list_for_task(task.id)] == [first.id, second.id]

    def test_get_scoped_to_task(self, manager, task, other_task):
        comment = manager.create(task.id, "mine")

        assert manager.get(task.id, comment.id).id == comment.id
        with pytest.raises(CommentNotFoundError):
            manager.get(other_task.id, comment.id)


class TestThreading:
    """Test reply assembly from the flat comment set."""

    def _comment(self, id, parent=None, task_id=1):
        return Comment(id=id, text=f"c{id}", is_updated=False, task_id=task_id, parent_comment_id=parent)

    def test_every_comment_listed_with_direct_replies(self):
        flat = [self._comment(1), self._comment(2, 1), self._comment(3, 2), self._comment(4)]

        views = thread_comments(flat)

        assert [v["id"] for v in views] == [1, 2, 3, 4]
        assert [r["id"] for r in views[0]["replies"]] == [2]
        assert "replies" not in views[0]["replies"][0]
        assert [r["id"] for r in views[1]["replies"]] == [3]
        assert views[3]["replies"] == []

    def test_deep_chain_stays_flat(self):
        flat = [self._comment(1)] + [self._comment(i, i - 1) for i in range(2, 1001)]

        views = thread_comments(flat)

        assert len(views) == 1000
        assert all(len(v["replies"]) == 1 for v in views[:-1])
        assert views[-1]["replies"] == []
        assert views[499]["replies"][0]["parent_comment_id"] == 500

    def test_input_order_does_not_matter(self):
        flat = [self._comment(3, 1), self._comment(1), self._comment(2, 1)]

        views = thread_comments(flat)
        assert [r["id"] for r in views[0]["replies"]] == [2, 3]

    def test_subtree_ids_breadth_first(self):
        flat = [
            self._comment(1),
            self._comment(2, 1),
            self._comment(3, 1),
            self._comment(4, 2),
            self._comment(5),
        ]
        assert subtree_ids(1, flat) == [1, 2, 3, 4]
        assert subtree_ids(5, flat) == [5]
