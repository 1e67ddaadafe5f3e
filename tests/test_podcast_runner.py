import os
import sys

import pytest

import git_file_utils


REPO_ROOT = git_file_utils.get_repo_root()
PIPELINE_DIR = os.path.join(REPO_ROOT, "pipeline")
if PIPELINE_DIR not in sys.path:
	sys.path.insert(0, PIPELINE_DIR)

from podlib import podcast_runner
from podlib import processing_guard
from podlib import task_queue
from podlib import youtube_transcript
from podlib.pipeline_settings import ContentSettings
from podlib.podcast_errors import ArticleFetchError
from podlib.podcast_errors import ConfigurationError
from podlib.podcast_errors import UpstreamError
from podlib.podcast_errors import ValidationError
from podlib.script_models import Document


DATE_TEXT = "2026-01-02"
TRANSCRIPT = (
	"[HOST] Welcome back to the show, friends.\n"
	"[EXPERT] Today we cover a surprising research result.\n"
)
ARTICLES = {
	"https://example.com/good": Document.from_text("Good News", " ".join(["fact"] * 3000)),
	"https://example.com/second": Document.from_text("Second Article", " ".join(["note"] * 3000)),
	"https://example.com/short": Document.from_text("Short Article", "just ten words " * 3),
	"https://example.com/flaky": Document.from_text("Flaky Article", " ".join(["data"] * 3000)),
}


#============================================
def fake_fetch(url: str, logger=None) -> Document:
	if url not in ARTICLES:
		raise ArticleFetchError(f"HTTP 404 fetching {url}")
	return ARTICLES[url]


#============================================
class FakeClient:
	"""
	Replies with research for expansion prompts and dialogue otherwise.
	"""

	def __init__(self, transcript: str = TRANSCRIPT):
		self.transcript = transcript
		self.purposes = []

	def generate(self, request, purpose=""):
		self.purposes.append(purpose)
		if "Flaky Article" in request.prompt_text:
			raise UpstreamError("OpenRouter timed out")
		if purpose == "content expansion":
			return "Extra background paragraphs for the discussion."
		return self.transcript


#============================================
def _content() -> ContentSettings:
	return ContentSettings(min_words_for_podcast=2000, target_podcast_minutes=10)


#============================================
def _tracker(tmp_path, urls: list[str]) -> task_queue.QueueFileTracker:
	tracker = task_queue.QueueFileTracker(str(tmp_path / "queue.yaml"))
	for index, url in enumerate(urls):
		tracker.add_task(f"t{index + 1}", url)
	return tracker


#============================================
def test_build_script_path() -> None:
	path = podcast_runner.build_script_path("out", "Hello, World: Part 2!", DATE_TEXT)
	assert path == os.path.join("out", "2026-01-02-hello-world-part-2.txt")


#============================================
def test_process_document_writes_script(tmp_path) -> None:
	"""
	A long article skips expansion and produces one ROLE: text file.
	"""
	client = FakeClient()
	episode = podcast_runner.process_document(
		ARTICLES["https://example.com/good"], client, _content(), str(tmp_path),
		date_text=DATE_TEXT,
	)
	assert client.purposes == ["podcast script"]
	assert not episode.expanded
	assert episode.script_path == str(tmp_path / "2026-01-02-good-news.txt")
	with open(episode.script_path, "r", encoding="utf-8") as handle:
		lines = handle.read().splitlines()
	assert lines == [
		"HOST: Welcome back to the show, friends.",
		"EXPERT: Today we cover a surprising research result.",
	]
	assert episode.total_words == 13


#============================================
def test_short_document_is_expanded_first(tmp_path) -> None:
	client = FakeClient()
	episode = podcast_runner.process_document(
		ARTICLES["https://example.com/short"], client, _content(), str(tmp_path),
		date_text=DATE_TEXT,
	)
	assert client.purposes == ["content expansion", "podcast script"]
	assert episode.expanded
	assert episode.source_words == 9


#============================================
def test_skip_expansion_flag(tmp_path) -> None:
	client = FakeClient()
	podcast_runner.process_document(
		ARTICLES["https://example.com/short"], client, _content(), str(tmp_path),
		skip_expansion=True, date_text=DATE_TEXT,
	)
	assert client.purposes == ["podcast script"]


#============================================
def test_empty_dialogue_is_validation_error(tmp_path) -> None:
	with pytest.raises(ValidationError):
		podcast_runner.process_document(
			ARTICLES["https://example.com/good"], FakeClient(transcript="No tags here at all."),
			_content(), str(tmp_path), date_text=DATE_TEXT,
		)
	assert os.listdir(tmp_path) == []


#============================================
def test_batch_isolates_document_failures(tmp_path) -> None:
	"""
	Fetch and generation failures mark only their own task as Error.
	"""
	tracker = _tracker(tmp_path, [
		"https://example.com/good",
		"https://example.com/missing",
		"https://example.com/flaky",
		"https://example.com/second",
	])
	guard = processing_guard.ProcessingGuard()
	outcomes = podcast_runner.process_pending(
		tracker, guard, FakeClient(), _content(), str(tmp_path / "scripts"),
		fetch_fn=fake_fetch, date_text=DATE_TEXT,
	)
	assert [outcome.success for outcome in outcomes] == [True, False, False, True]
	assert "404" in outcomes[1].error
	assert "timed out" in outcomes[2].error
	assert tracker.get_task("t1")["status"] == "Complete"
	assert tracker.get_task("t1")["category"] == "Technology"
	assert tracker.get_task("t2")["status"] == "Error"
	assert tracker.get_task("t3")["status"] == "Error"
	assert tracker.get_task("t4")["status"] == "Complete"
	assert os.path.isfile(tmp_path / "scripts" / "2026-01-02-good-news.txt")
	assert guard.active_ids() == []


#============================================
def test_batch_respects_limit(tmp_path) -> None:
	tracker = _tracker(tmp_path, ["https://example.com/good", "https://example.com/second"])
	outcomes = podcast_runner.process_pending(
		tracker, processing_guard.ProcessingGuard(), FakeClient(), _content(), str(tmp_path),
		limit=1, fetch_fn=fake_fetch, date_text=DATE_TEXT,
	)
	assert len(outcomes) == 1
	assert tracker.get_task("t2")["status"] == "New"


#============================================
def test_batch_skips_tasks_already_processing(tmp_path) -> None:
	tracker = _tracker(tmp_path, ["https://example.com/good"])
	guard = processing_guard.ProcessingGuard()
	guard.try_acquire("t1")
	outcomes = podcast_runner.process_pending(
		tracker, guard, FakeClient(), _content(), str(tmp_path),
		fetch_fn=fake_fetch, date_text=DATE_TEXT,
	)
	assert outcomes[0].skipped
	assert tracker.get_task("t1")["status"] == "New"
	assert guard.is_processing("t1")


#============================================
def test_configuration_error_stops_batch(tmp_path) -> None:
	"""
	A missing client aborts the run but still releases the guard.
	"""
	tracker = _tracker(tmp_path, ["https://example.com/good", "https://example.com/second"])
	guard = processing_guard.ProcessingGuard()
	with pytest.raises(ConfigurationError):
		podcast_runner.process_pending(
			tracker, guard, None, _content(), str(tmp_path),
			fetch_fn=fake_fetch, date_text=DATE_TEXT,
		)
	assert tracker.get_task("t1")["status"] == "Error"
	assert tracker.get_task("t2")["status"] == "New"
	assert guard.active_ids() == []


#============================================
def test_unexpected_error_fails_only_its_task(tmp_path) -> None:
	"""
	An error outside the known document errors is recorded and the batch goes on.
	"""
	def broken_fetch(url: str, logger=None) -> Document:
		if url.endswith("/good"):
			raise ValueError("unexpected parse failure")
		return fake_fetch(url, logger=logger)

	tracker = _tracker(tmp_path, ["https://example.com/good", "https://example.com/second"])
	guard = processing_guard.ProcessingGuard()
	outcomes = podcast_runner.process_pending(
		tracker, guard, FakeClient(), _content(), str(tmp_path),
		fetch_fn=broken_fetch, date_text=DATE_TEXT,
	)
	assert [outcome.success for outcome in outcomes] == [False, True]
	assert "unexpected parse failure" in outcomes[0].error
	assert "ValueError" in tracker.get_task("t1")["error"]
	assert tracker.get_task("t1")["status"] == "Error"
	assert tracker.get_task("t2")["status"] == "Complete"
	assert guard.active_ids() == []


#============================================
def test_video_links_use_transcript_fetcher(tmp_path, monkeypatch) -> None:
	"""
	Without a fetch_fn, YouTube URLs are read from subtitles and keep the queued title.
	"""
	fetched = []

	def fake_video(url, logger=None):
		fetched.append(url)
		return Document.from_text(youtube_transcript.UNTITLED_VIDEO, " ".join(["talk"] * 3000))

	monkeypatch.setattr(youtube_transcript, "fetch_youtube_document", fake_video)
	tracker = task_queue.QueueFileTracker(str(tmp_path / "queue.yaml"))
	tracker.add_task("v1", "https://youtu.be/abc123", title="Saved Talk")
	outcomes = podcast_runner.process_pending(
		tracker, processing_guard.ProcessingGuard(), FakeClient(), _content(), str(tmp_path),
		date_text=DATE_TEXT,
	)
	assert fetched == ["https://youtu.be/abc123"]
	assert outcomes[0].success
	assert outcomes[0].episode.title == "Saved Talk"
	assert tracker.get_task("v1")["status"] == "Complete"
