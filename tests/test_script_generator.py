import os
import sys

import pytest
import requests

import git_file_utils


REPO_ROOT = git_file_utils.get_repo_root()
PIPELINE_DIR = os.path.join(REPO_ROOT, "pipeline")
if PIPELINE_DIR not in sys.path:
	sys.path.insert(0, PIPELINE_DIR)

from podlib import script_generator
from podlib.podcast_errors import ConfigurationError
from podlib.podcast_errors import UpstreamError
from podlib.script_models import Document
from podlib.script_models import Speaker


SAMPLE_TRANSCRIPT = (
	"Sure! Here is the script.\n"
	"[HOST] Andrew: Welcome in, I'm Andrew and this is Emily.\n"
	"[EXPERT] (laughs) Thanks Andrew, today we unpack a 2024 study.\n"
	"[HOST] What did it find & why does it matter?\n"
	"[EXPERT] Costs dropped 40% in a single year.\n"
)


#============================================
class FakeClient:
	def __init__(self, reply=SAMPLE_TRANSCRIPT, error=None):
		self.reply = reply
		self.error = error
		self.requests = []

	def generate(self, request, purpose=""):
		self.requests.append((request, purpose))
		if self.error is not None:
			raise self.error
		return self.reply


#============================================
def _document(body: str = "The study looked at energy prices across Europe.") -> Document:
	return Document.from_text("Energy Prices Fall", body)


#============================================
def test_generate_script_parses_reply() -> None:
	"""
	The reply is parsed into normalized HOST/EXPERT segments.
	"""
	client = FakeClient()
	script = script_generator.generate_script(_document(), 10, 150, client)
	assert script.speakers == [Speaker.HOST, Speaker.EXPERT, Speaker.HOST, Speaker.EXPERT]
	assert script.segments[0].text == "Welcome in, I'm Andrew and this is Emily."
	assert script.segments[1].text == "Thanks Andrew, today we unpack a twenty twenty-four study."
	assert script.segments[2].text == "What did it find and why does it matter?"
	assert script.segments[3].text == "Costs dropped 40 percent in a single year."
	assert script.total_words == sum(segment.word_count for segment in script.segments)


#============================================
def test_generate_script_request_shape() -> None:
	"""
	One request with the default token budget, temperature and word target.
	"""
	client = FakeClient()
	script_generator.generate_script(_document(), 10, 150, client)
	assert len(client.requests) == 1
	request, purpose = client.requests[0]
	assert purpose == "podcast script"
	assert request.max_output_tokens == 4000
	assert request.temperature == 0.7
	assert "1500 words" in request.prompt_text
	assert "Energy Prices Fall" in request.prompt_text
	assert "[HOST]" in request.prompt_text and "[EXPERT]" in request.prompt_text


#============================================
def test_prompt_renders_every_token() -> None:
	prompt = script_generator.build_podcast_script_prompt(_document(), 15, 150)
	assert "{{" not in prompt
	assert "Andrew & Emily" in prompt
	assert prompt.rstrip().endswith("Target 2250 words for this podcast script.")


#============================================
def test_prompt_excerpt_is_truncated() -> None:
	"""
	Only the first excerpt_chars characters of the body reach the prompt.
	"""
	body = ("x" * 4000) + "TAILMARKER"
	prompt = script_generator.build_podcast_script_prompt(_document(body), 10, 150)
	assert "x" * 4000 in prompt
	assert "TAILMARKER" not in prompt
	short_prompt = script_generator.build_podcast_script_prompt(
		_document(body), 10, 150, excerpt_chars=100,
	)
	assert "x" * 101 not in short_prompt


#============================================
def test_missing_client_is_configuration_error() -> None:
	with pytest.raises(ConfigurationError):
		script_generator.generate_script(_document(), 10, 150, None)


#============================================
def test_empty_reply_is_upstream_error() -> None:
	with pytest.raises(UpstreamError):
		script_generator.generate_script(_document(), 10, 150, FakeClient(reply="   \n"))


#============================================
def test_service_failures_propagate_as_upstream_error() -> None:
	"""
	No fallback script: transport errors reach the caller.
	"""
	with pytest.raises(UpstreamError, match="timed out"):
		script_generator.generate_script(
			_document(), 10, 150, FakeClient(error=UpstreamError("OpenRouter timed out")),
		)
	with pytest.raises(UpstreamError):
		script_generator.generate_script(
			_document(), 10, 150, FakeClient(error=requests.exceptions.ConnectionError("down")),
		)


#============================================
def test_untagged_reply_returns_empty_script() -> None:
	messages = []
	script = script_generator.generate_script(
		_document(), 10, 150, FakeClient(reply="I cannot help with that."),
		logger=messages.append,
	)
	assert script.segments == ()
	assert any("no usable tagged dialogue" in message for message in messages)


#============================================
def test_invalid_length_arguments_raise() -> None:
	with pytest.raises(ValueError):
		script_generator.compute_target_words(0, 150)
	with pytest.raises(ValueError):
		script_generator.compute_target_words(10, 0)


#============================================
def test_title_with_placeholder_text_is_literal() -> None:
	"""
	A title that looks like a prompt token must not pull in the body twice.
	"""
	document = Document.from_text("Notes on {{article_excerpt}}", "UNIQUEBODY words here.")
	prompt = script_generator.build_podcast_script_prompt(document, 10, 150)
	assert "Notes on {{article_excerpt}}" in prompt
	assert prompt.count("UNIQUEBODY") == 1
