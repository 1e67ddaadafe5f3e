"""
Per-document pipeline and the batch driver over a TaskTracker.

One document: category -> expand if short -> generate script -> write file.
A batch isolates failures per task; only a ConfigurationError stops it.
"""

# Standard Library
import os
from dataclasses import dataclass
from datetime import datetime

from podlib import article_fetcher
from podlib import category_detector
from podlib import content_expander
from podlib import pipeline_text_utils
from podlib import script_generator
from podlib import task_queue
from podlib import youtube_transcript
from podlib.pipeline_settings import ContentSettings
from podlib.podcast_errors import ArticleFetchError
from podlib.podcast_errors import ConfigurationError
from podlib.podcast_errors import UpstreamError
from podlib.podcast_errors import ValidationError
from podlib.script_models import Document
from podlib.script_models import render_script_text

# failures that end one document but not the batch
DOCUMENT_ERRORS = (UpstreamError, ArticleFetchError, ValidationError, OSError)
# fetcher titles replaced by the queued title when one was saved
PLACEHOLDER_TITLES = (article_fetcher.UNTITLED_ARTICLE, youtube_transcript.UNTITLED_VIDEO)


#============================================
@dataclass(frozen=True)
class EpisodeResult:
	title: str
	category: str
	script_path: str
	source_words: int
	total_words: int
	estimated_minutes: int
	expanded: bool


#============================================
@dataclass(frozen=True)
class TaskOutcome:
	"""
	What happened to one queued task in a batch run.
	"""
	task_id: str
	url: str
	success: bool
	skipped: bool = False
	episode: EpisodeResult = None
	error: str = ""


#============================================
def local_date_stamp() -> str:
	return datetime.now().strftime("%Y-%m-%d")


#============================================
def build_script_path(output_dir: str, title: str, date_text: str) -> str:
	"""
	Return <output_dir>/<date>-<slug>.txt for a document title.
	"""
	slug = pipeline_text_utils.slugify_title(title)
	return os.path.join(output_dir, f"{date_text}-{slug}.txt")


#============================================
def process_document(
	document: Document,
	client,
	content: ContentSettings,
	output_dir: str,
	*,
	skip_expansion: bool = False,
	date_text: str = None,
	logger=None,
) -> EpisodeResult:
	"""
	Turn one fetched Document into a script file on disk.

	Raises:
		ConfigurationError: no generation client.
		UpstreamError: script generation failed.
		ValidationError: the reply held no usable dialogue.
	"""
	category = category_detector.detect_category(document.body, document.title)
	if logger:
		logger(f"Category: {category}")
	final_document = document
	if skip_expansion:
		if logger:
			logger("Skipping content expansion by request.")
	elif content_expander.needs_expansion(document.word_count, content.min_words_for_podcast):
		if logger:
			logger(
				f"Content too short ({document.word_count} < "
				+ f"{content.min_words_for_podcast} words); expanding."
			)
		final_document = content_expander.expand_document(
			document,
			content.min_words_for_podcast,
			client,
			excerpt_chars=content.expansion_excerpt_chars,
			max_output_tokens=content.max_output_tokens,
			temperature=content.temperature,
			logger=logger,
		)
	script = script_generator.generate_script(
		final_document,
		content.target_podcast_minutes,
		content.words_per_minute,
		client,
		excerpt_chars=content.script_excerpt_chars,
		max_output_tokens=content.max_output_tokens,
		temperature=content.temperature,
		logger=logger,
	)
	if not script.segments:
		raise ValidationError(f"No usable dialogue generated for '{final_document.title}'")

	script_path = os.path.abspath(
		build_script_path(output_dir, final_document.title, date_text or local_date_stamp())
	)
	script_dir = os.path.dirname(script_path)
	if script_dir:
		os.makedirs(script_dir, exist_ok=True)
	if logger:
		logger(f"Writing podcast script output to {script_path}")
	with open(script_path, "w", encoding="utf-8") as handle:
		handle.write(render_script_text(script))
	return EpisodeResult(
		title=final_document.title,
		category=category,
		script_path=script_path,
		source_words=document.word_count,
		total_words=script.total_words,
		estimated_minutes=script.estimated_minutes,
		expanded=final_document is not document,
	)


#============================================
def process_task(
	task: task_queue.PendingTask,
	tracker: task_queue.TaskTracker,
	client,
	content: ContentSettings,
	output_dir: str,
	*,
	fetch_fn=None,
	date_text: str = None,
	logger=None,
) -> TaskOutcome:
	"""
	Run one queued task and record Complete or Error on the tracker.

	Any failure is recorded as Error and returned; only a ConfigurationError
	is recorded and then re-raised so the batch stops.
	"""
	fetch = fetch_fn or article_fetcher.fetch_source_document
	tracker.set_status(task.id, task_queue.STATUS_PROCESSING)
	try:
		document = fetch(task.url, logger=logger)
		if task.title and document.title in PLACEHOLDER_TITLES:
			document = Document.from_text(task.title, document.body)
		episode = process_document(
			document, client, content, output_dir,
			date_text=date_text, logger=logger,
		)
	except ConfigurationError as error:
		tracker.set_error(task.id, str(error))
		raise
	except DOCUMENT_ERRORS as error:
		if logger:
			logger(f"Failed to process {task.url}: {error}")
		tracker.set_error(task.id, str(error))
		return TaskOutcome(task_id=task.id, url=task.url, success=False, error=str(error))
	except Exception as error:
		# any other failure also ends only this task
		message = f"{type(error).__name__}: {error}"
		if logger:
			logger(f"Unexpected failure processing {task.url}: {message}")
		tracker.set_error(task.id, message)
		return TaskOutcome(task_id=task.id, url=task.url, success=False, error=message)
	tracker.set_complete(task.id, episode.script_path, episode.category, episode.title)
	if logger:
		logger(
			f"Completed '{episode.title}' ({episode.total_words} words, "
			+ f"~{episode.estimated_minutes} min)."
		)
	return TaskOutcome(task_id=task.id, url=task.url, success=True, episode=episode)


#============================================
def process_pending(
	tracker: task_queue.TaskTracker,
	guard,
	client,
	content: ContentSettings,
	output_dir: str,
	*,
	limit: int = task_queue.DEFAULT_PENDING_LIMIT,
	fetch_fn=None,
	date_text: str = None,
	logger=None,
) -> list[TaskOutcome]:
	"""
	Drain up to limit pending tasks, one at a time.

	Tasks whose id the guard already holds are skipped. The guard is
	released whether the task succeeds, fails, or aborts the batch.
	"""
	if limit < 1:
		raise ValueError("limit must be >= 1")
	tasks = tracker.list_pending(limit)
	if logger:
		logger(f"Found {len(tasks)} pending task(s) (limit={limit}).")
	outcomes = []
	for task in tasks:
		if not guard.try_acquire(task.id):
			if logger:
				logger(f"Skipping {task.id}: already processing.")
			outcomes.append(TaskOutcome(task_id=task.id, url=task.url, success=False, skipped=True))
			continue
		try:
			if logger:
				logger(f"Processing {task.id}: {task.url}")
			outcome = process_task(
				task, tracker, client, content, output_dir,
				fetch_fn=fetch_fn, date_text=date_text, logger=logger,
			)
		finally:
			guard.release(task.id)
		outcomes.append(outcome)
	return outcomes
