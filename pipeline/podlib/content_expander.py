"""
Pad short articles with generated background research.

Expansion is best effort: every failure is logged and the original
Document is handed back unchanged.
"""

from podlib import generation_client
from podlib import pipeline_text_utils
from podlib import prompt_loader
from podlib.script_models import Document
from podlib.script_models import GenerationRequest


EXPANSION_PROMPT_NAME = "content_expansion.txt"
RESEARCH_DELIMITER = "\n\n--- Additional Research ---\n\n"
DEFAULT_MIN_WORDS = 2000
DEFAULT_EXCERPT_CHARS = 5000
DEFAULT_MAX_OUTPUT_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7
EXPANSION_PURPOSE = "content expansion"


#============================================
def needs_expansion(word_count: int, min_words: int = DEFAULT_MIN_WORDS) -> bool:
	return word_count < min_words


#============================================
def build_expansion_prompt(
	document: Document,
	needed_words: int,
	excerpt_chars: int = DEFAULT_EXCERPT_CHARS,
) -> str:
	"""
	Build the research prompt asking for about needed_words of supplement.
	"""
	template = prompt_loader.load_prompt(EXPANSION_PROMPT_NAME)
	prompt = prompt_loader.render_prompt(template, {
		"title": document.title,
		"article_excerpt": pipeline_text_utils.excerpt(document.body, excerpt_chars),
		"needed_words": str(needed_words),
	})
	return prompt


#============================================
def append_research(document: Document, supplement: str) -> Document:
	"""
	Return a new Document with the supplement after the research delimiter.
	"""
	body = document.body + RESEARCH_DELIMITER + supplement.strip()
	return Document.from_text(document.title, body)


#============================================
def expand_document(
	document: Document,
	target_words: int,
	client,
	*,
	excerpt_chars: int = DEFAULT_EXCERPT_CHARS,
	max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
	temperature: float = DEFAULT_TEMPERATURE,
	logger=None,
) -> Document:
	"""
	Return document with an Additional Research section, or document itself.

	Never raises for generation problems; a missing client, a failed or
	timed-out call, and an empty reply all return the input unchanged.
	"""
	needed_words = target_words - document.word_count
	if needed_words <= 0:
		return document
	request = GenerationRequest(
		prompt_text=build_expansion_prompt(document, needed_words, excerpt_chars),
		max_output_tokens=max_output_tokens,
		temperature=temperature,
	)
	if logger:
		logger(
			f"Expanding '{document.title}' ({document.word_count} words, "
			+ f"requesting ~{needed_words} more)."
		)
	supplement = generation_client.request_text_best_effort(
		client, request, EXPANSION_PURPOSE, logger=logger,
	)
	if not supplement or not supplement.strip():
		return document
	expanded = append_research(document, supplement)
	if logger:
		logger(f"Expanded '{document.title}' to {expanded.word_count} words.")
	return expanded
