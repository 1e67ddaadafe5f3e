"""
Value objects passed between the podcast script stages.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

from podlib import pipeline_text_utils


DEFAULT_WORDS_PER_MINUTE = 150


#============================================
class Speaker(enum.Enum):
	"""
	The two voices of a generated episode.
	"""
	HOST = "host"
	EXPERT = "expert"

	@property
	def label(self) -> str:
		return self.name


#============================================
@dataclass(frozen=True)
class Document:
	"""
	One fetched source unit. word_count tracks the whitespace tokens of body.
	"""
	title: str
	body: str
	word_count: int

	#============================================
	@classmethod
	def from_text(cls, title: str, body: str) -> Document:
		"""
		Build a Document and compute its word count.
		"""
		clean_body = body or ""
		return cls(
			title=(title or "").strip(),
			body=clean_body,
			word_count=pipeline_text_utils.count_words(clean_body),
		)


#============================================
@dataclass(frozen=True)
class DialogueSegment:
	speaker: Speaker
	text: str

	@property
	def word_count(self) -> int:
		return pipeline_text_utils.count_words(self.text)


#============================================
@dataclass(frozen=True)
class GenerationRequest:
	prompt_text: str
	max_output_tokens: int
	temperature: float


#============================================
@dataclass(frozen=True)
class Script:
	"""
	Ordered dialogue plus its derived length statistics.

	Segment order is playback order.
	"""
	segments: tuple[DialogueSegment, ...]
	total_words: int
	estimated_minutes: int

	#============================================
	@classmethod
	def from_segments(
		cls,
		segments,
		words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
	) -> Script:
		"""
		Freeze segments and compute total words and spoken minutes.
		"""
		if words_per_minute < 1:
			raise ValueError("words_per_minute must be >= 1")
		frozen = tuple(segments)
		total_words = 0
		for segment in frozen:
			total_words += segment.word_count
		return cls(
			segments=frozen,
			total_words=total_words,
			estimated_minutes=estimate_minutes(total_words, words_per_minute),
		)

	@property
	def speakers(self) -> list[Speaker]:
		return [segment.speaker for segment in self.segments]


#============================================
def estimate_minutes(total_words: int, words_per_minute: int) -> int:
	"""
	Round total_words / words_per_minute half-up to whole minutes.
	"""
	return int(math.floor(total_words / words_per_minute + 0.5))


#============================================
def render_script_text(script: Script) -> str:
	"""
	Render a Script as ROLE: text lines for the audio stage.
	"""
	rendered_lines = []
	for segment in script.segments:
		rendered_lines.append(f"{segment.speaker.label}: {segment.text.strip()}")
	if not rendered_lines:
		return ""
	rendered = "\n".join(rendered_lines).strip() + "\n"
	return rendered
