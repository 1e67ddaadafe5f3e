import os
import sys

import pytest
import yaml

import git_file_utils


REPO_ROOT = git_file_utils.get_repo_root()
PIPELINE_DIR = os.path.join(REPO_ROOT, "pipeline")
if PIPELINE_DIR not in sys.path:
	sys.path.insert(0, PIPELINE_DIR)

from podlib import task_queue


#============================================
def _write_queue(path, tasks: list[dict]) -> None:
	path.write_text(yaml.safe_dump({"tasks": tasks}), encoding="utf-8")


#============================================
def test_list_pending_filters_and_limits(tmp_path) -> None:
	"""
	Only New tasks are pending, in file order, capped by limit.
	"""
	queue_path = tmp_path / "queue.yaml"
	_write_queue(queue_path, [
		{"id": "a", "url": "https://example.com/a", "status": "New"},
		{"id": "b", "url": "https://example.com/b", "status": "Complete"},
		{"id": "c", "url": "https://example.com/c", "title": "Cee"},
		{"id": "d", "url": "https://example.com/d", "status": "Error"},
	])
	tracker = task_queue.QueueFileTracker(str(queue_path))
	pending = tracker.list_pending()
	assert [task.id for task in pending] == ["a", "c"]
	assert pending[1].title == "Cee"
	assert [task.id for task in tracker.list_pending(limit=1)] == ["a"]


#============================================
def test_missing_queue_file_has_no_tasks(tmp_path) -> None:
	tracker = task_queue.QueueFileTracker(str(tmp_path / "none.yaml"))
	assert tracker.list_pending() == []


#============================================
def test_status_transitions_persist(tmp_path) -> None:
	queue_path = tmp_path / "queue.yaml"
	tracker = task_queue.QueueFileTracker(str(queue_path))
	tracker.add_task("a", "https://example.com/a")
	tracker.add_task("b", "https://example.com/b")
	tracker.set_status("a", task_queue.STATUS_PROCESSING)
	assert tracker.get_task("a")["status"] == "Processing"
	tracker.set_complete("a", "/out/a.txt", "Science", "Article A")
	tracker.set_error("b", "HTTP 404")

	reread = task_queue.QueueFileTracker(str(queue_path))
	task_a = reread.get_task("a")
	assert task_a["status"] == "Complete"
	assert task_a["podcast_url"] == "/out/a.txt"
	assert task_a["category"] == "Science"
	assert task_a["title"] == "Article A"
	assert "processed_at" in task_a
	task_b = reread.get_task("b")
	assert task_b["status"] == "Error"
	assert task_b["error"] == "HTTP 404"
	assert reread.list_pending() == []


#============================================
def test_invalid_updates_raise(tmp_path) -> None:
	tracker = task_queue.QueueFileTracker(str(tmp_path / "queue.yaml"))
	tracker.add_task("a", "https://example.com/a")
	with pytest.raises(ValueError):
		tracker.set_status("a", "Done")
	with pytest.raises(KeyError):
		tracker.set_status("zzz", task_queue.STATUS_NEW)
	with pytest.raises(ValueError):
		tracker.add_task("a", "https://example.com/again")


#============================================
def test_malformed_queue_raises(tmp_path) -> None:
	queue_path = tmp_path / "queue.yaml"
	queue_path.write_text("tasks: not-a-list\n", encoding="utf-8")
	with pytest.raises(RuntimeError):
		task_queue.QueueFileTracker(str(queue_path)).list_pending()
