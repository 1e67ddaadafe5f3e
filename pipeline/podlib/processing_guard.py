"""
Process-wide set of task ids that currently have a pipeline running.
"""

# Standard Library
import threading


#============================================
class ProcessingGuard:
	"""
	Prevent the same task from being processed twice at once.

	try_acquire() and release() are safe to call from several threads.
	"""

	def __init__(self):
		self._lock = threading.Lock()
		self._active: set[str] = set()

	#============================================
	def try_acquire(self, task_id: str) -> bool:
		"""
		Claim task_id; return False if it is already held.
		"""
		with self._lock:
			if task_id in self._active:
				return False
			self._active.add(task_id)
			return True

	#============================================
	def release(self, task_id: str) -> None:
		with self._lock:
			self._active.discard(task_id)

	#============================================
	def is_processing(self, task_id: str) -> bool:
		with self._lock:
			return task_id in self._active

	#============================================
	def active_ids(self) -> list[str]:
		with self._lock:
			return sorted(self._active)
