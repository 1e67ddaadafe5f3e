"""
Task-tracking collaborators.

TaskTracker is the interface the batch runner drives. QueueFileTracker
keeps the queue in a YAML file:

	tasks:
	  - id: a1
	    url: https://example.com/post
	    title: Optional title
	    status: New
"""

# Standard Library
import abc
import os
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone

import yaml


STATUS_NEW = "New"
STATUS_PROCESSING = "Processing"
STATUS_COMPLETE = "Complete"
STATUS_ERROR = "Error"
VALID_STATUSES = (STATUS_NEW, STATUS_PROCESSING, STATUS_COMPLETE, STATUS_ERROR)
DEFAULT_PENDING_LIMIT = 5
# longest error text stored on a task record
MAX_ERROR_CHARS = 2000


#============================================
@dataclass(frozen=True)
class PendingTask:
	id: str
	url: str
	title: str = ""


#============================================
class TaskTracker(abc.ABC):
	"""
	Where pending articles come from and where results are recorded.
	"""

	@abc.abstractmethod
	def list_pending(self, limit: int = DEFAULT_PENDING_LIMIT) -> list[PendingTask]:
		raise NotImplementedError

	@abc.abstractmethod
	def set_status(self, task_id: str, status: str) -> None:
		raise NotImplementedError

	@abc.abstractmethod
	def set_complete(self, task_id: str, url: str, category: str, title: str) -> None:
		raise NotImplementedError

	@abc.abstractmethod
	def set_error(self, task_id: str, message: str) -> None:
		raise NotImplementedError


#============================================
def utc_timestamp() -> str:
	return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


#============================================
class QueueFileTracker(TaskTracker):
	"""
	TaskTracker backed by a YAML queue file; every update rewrites the file.
	"""

	def __init__(self, path: str):
		self.path = os.path.abspath(path)

	#============================================
	def _load_tasks(self) -> list[dict]:
		if not os.path.isfile(self.path):
			return []
		with open(self.path, "r", encoding="utf-8") as handle:
			data = yaml.safe_load(handle.read())
		if data is None:
			return []
		if not isinstance(data, dict) or not isinstance(data.get("tasks", []), list):
			raise RuntimeError(f"Queue file must contain a 'tasks' list: {self.path}")
		tasks = data.get("tasks") or []
		for task in tasks:
			if not isinstance(task, dict) or not task.get("id"):
				raise RuntimeError(f"Queue task without an id in {self.path}: {task}")
		return tasks

	#============================================
	def _save_tasks(self, tasks: list[dict]) -> None:
		queue_dir = os.path.dirname(self.path)
		if queue_dir:
			os.makedirs(queue_dir, exist_ok=True)
		with open(self.path, "w", encoding="utf-8") as handle:
			yaml.safe_dump({"tasks": tasks}, handle, sort_keys=False, allow_unicode=True)

	#============================================
	def _update(self, task_id: str, fields: dict) -> None:
		tasks = self._load_tasks()
		for task in tasks:
			if str(task.get("id")) == str(task_id):
				task.update(fields)
				self._save_tasks(tasks)
				return
		raise KeyError(f"Unknown task id: {task_id}")

	#============================================
	def get_task(self, task_id: str) -> dict:
		for task in self._load_tasks():
			if str(task.get("id")) == str(task_id):
				return dict(task)
		raise KeyError(f"Unknown task id: {task_id}")

	#============================================
	def add_task(self, task_id: str, url: str, title: str = "") -> None:
		"""
		Append a New task; a duplicate id is rejected.
		"""
		tasks = self._load_tasks()
		for task in tasks:
			if str(task.get("id")) == str(task_id):
				raise ValueError(f"Task id already queued: {task_id}")
		tasks.append({"id": task_id, "url": url, "title": title, "status": STATUS_NEW})
		self._save_tasks(tasks)

	#============================================
	def list_pending(self, limit: int = DEFAULT_PENDING_LIMIT) -> list[PendingTask]:
		"""
		Return up to limit tasks whose status is New, in file order.
		"""
		pending = []
		for task in self._load_tasks():
			if len(pending) >= limit:
				break
			if task.get("status", STATUS_NEW) != STATUS_NEW:
				continue
			pending.append(PendingTask(
				id=str(task["id"]),
				url=str(task.get("url") or ""),
				title=str(task.get("title") or ""),
			))
		return pending

	#============================================
	def set_status(self, task_id: str, status: str) -> None:
		if status not in VALID_STATUSES:
			raise ValueError(f"Unsupported task status: {status}")
		self._update(task_id, {"status": status})

	#============================================
	def set_complete(self, task_id: str, url: str, category: str, title: str) -> None:
		self._update(task_id, {
			"status": STATUS_COMPLETE,
			"podcast_url": url,
			"category": category,
			"title": title,
			"processed_at": utc_timestamp(),
		})

	#============================================
	def set_error(self, task_id: str, message: str) -> None:
		self._update(task_id, {
			"status": STATUS_ERROR,
			"error": (message or "")[:MAX_ERROR_CHARS],
			"processed_at": utc_timestamp(),
		})
