"""
Generate a two-speaker podcast Script from a Document.

Generation is all-or-nothing: a missing service is a ConfigurationError,
anything that goes wrong with the call is an UpstreamError. There is no
retry and no fallback script.
"""

from podlib import generation_client
from podlib import pipeline_text_utils
from podlib import prompt_loader
from podlib import speaker_parser
from podlib.script_models import DEFAULT_WORDS_PER_MINUTE
from podlib.script_models import Document
from podlib.script_models import GenerationRequest
from podlib.script_models import Script


SCRIPT_PROMPT_NAME = "podcast_script.txt"
HOST_NAME = "Andrew"
EXPERT_NAME = "Emily"
DEFAULT_EXCERPT_CHARS = 4000
DEFAULT_MAX_OUTPUT_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7
SCRIPT_PURPOSE = "podcast script"


#============================================
def compute_target_words(target_minutes: int, words_per_minute: int) -> int:
	if target_minutes < 1:
		raise ValueError("target_minutes must be >= 1")
	if words_per_minute < 1:
		raise ValueError("words_per_minute must be >= 1")
	return target_minutes * words_per_minute


#============================================
def build_podcast_script_prompt(
	document: Document,
	target_minutes: int,
	words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
	excerpt_chars: int = DEFAULT_EXCERPT_CHARS,
) -> str:
	"""
	Build the two-speaker podcast prompt for one document.

	Only the leading excerpt_chars characters of the body are sent.
	"""
	target_words = compute_target_words(target_minutes, words_per_minute)
	template = prompt_loader.load_prompt(SCRIPT_PROMPT_NAME)
	prompt = prompt_loader.render_prompt_with_target(template, {
		"host_name": HOST_NAME,
		"expert_name": EXPERT_NAME,
		"target_words": str(target_words),
		"target_minutes": str(target_minutes),
		"title": document.title,
		"article_excerpt": pipeline_text_utils.excerpt(document.body, excerpt_chars),
	}, target_value=str(target_words), unit="words", document_name="podcast script")
	return prompt


#============================================
def generate_script(
	document: Document,
	target_minutes: int,
	words_per_minute: int,
	client,
	*,
	excerpt_chars: int = DEFAULT_EXCERPT_CHARS,
	max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
	temperature: float = DEFAULT_TEMPERATURE,
	logger=None,
) -> Script:
	"""
	Ask the generation service for a dialogue and parse it into a Script.

	Args:
		document: source article.
		target_minutes: desired episode length.
		words_per_minute: speaking rate used for the word target and estimate.
		client: transport with generate(request, purpose=...), or None.
		logger: optional callable taking one message string.

	Raises:
		ConfigurationError: client is None.
		UpstreamError: the call failed, timed out, or returned no text.
	"""
	prompt_text = build_podcast_script_prompt(
		document, target_minutes, words_per_minute, excerpt_chars,
	)
	request = GenerationRequest(
		prompt_text=prompt_text,
		max_output_tokens=max_output_tokens,
		temperature=temperature,
	)
	if logger:
		logger(
			f"Generating podcast script for '{document.title}' "
			+ f"(target={compute_target_words(target_minutes, words_per_minute)} words, "
			+ f"prompt={len(prompt_text)} chars)."
		)
	raw_text = generation_client.request_text_strict(client, request, SCRIPT_PURPOSE)
	script = speaker_parser.parse_transcript(raw_text, words_per_minute=words_per_minute)
	if logger and not script.segments:
		logger("Generation reply contained no usable tagged dialogue.")
	elif logger:
		logger(
			f"Parsed {len(script.segments)} segments "
			+ f"({script.total_words} words, ~{script.estimated_minutes} min)."
		)
	return script
