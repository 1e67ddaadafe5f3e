"""
Turn a language-model reply into an ordered HOST / EXPERT dialogue.

The model is asked for `[HOST]` / `[EXPERT]` tags but does not always
comply: it may use `HOST:`, a persona name such as `Andrew:`, bold markup,
or repeat the name after the tag. The scanner below accepts all of those
and emits only the two canonical speakers with normalized text.
"""

import enum
import re

from podlib import text_normalizer
from podlib.script_models import DEFAULT_WORDS_PER_MINUTE
from podlib.script_models import DialogueSegment
from podlib.script_models import Script
from podlib.script_models import Speaker


# names the model may use in place of the role tag
SPEAKER_ALIASES = {
	Speaker.HOST: ("host", "andrew"),
	Speaker.EXPERT: ("expert", "emily", "ava", "aria"),
}

# segments with this many raw characters or fewer are noise
MIN_SEGMENT_CHARS = 10

ANNOTATION_LINE_RE = re.compile(r"^\[.*\]$")


#============================================
class ScanState(enum.Enum):
	NO_SPEAKER = "no_speaker"
	IN_HOST = "in_host"
	IN_EXPERT = "in_expert"


STATE_FOR_SPEAKER = {
	Speaker.HOST: ScanState.IN_HOST,
	Speaker.EXPERT: ScanState.IN_EXPERT,
}
SPEAKER_FOR_STATE = {state: speaker for speaker, state in STATE_FOR_SPEAKER.items()}


#============================================
def build_tag_pattern(names: tuple) -> re.Pattern:
	"""
	Compile the tag-line matcher for one speaker's names.

	Accepts `[NAME]`, `[NAME]:`, and `NAME:`, optionally wrapped in `**`.
	"""
	alternation = "|".join(re.escape(name) for name in names)
	pattern = (
		r"^\**\s*(?:\[(?:" + alternation + r")\]\s*\**\s*:?"
		+ r"|(?:" + alternation + r")\s*\**\s*:)\**\s*(.*)$"
	)
	return re.compile(pattern, re.IGNORECASE)


#============================================
def build_name_prefix_pattern(names: tuple) -> re.Pattern:
	alternation = "|".join(re.escape(name) for name in names)
	return re.compile(r"^\**\s*(?:" + alternation + r")\s*\**\s*:\s*", re.IGNORECASE)


#============================================
class SpeakerTagScanner:
	"""
	Line-oriented finite-state scanner over a raw transcript.

	States are NO_SPEAKER, IN_HOST and IN_EXPERT. Lines before the first
	tag are dropped; blank lines never end a segment.
	"""

	def __init__(self, aliases: dict = None):
		self.aliases = aliases or SPEAKER_ALIASES
		self.tag_patterns = []
		self.prefix_patterns = {}
		for speaker in Speaker:
			names = tuple(self.aliases.get(speaker, ()))
			if not names:
				continue
			self.tag_patterns.append((speaker, build_tag_pattern(names)))
			self.prefix_patterns[speaker] = build_name_prefix_pattern(names)
		self.state = ScanState.NO_SPEAKER
		self.buffer: list[str] = []
		self.completed: list[tuple[Speaker, str]] = []

	#============================================
	def match_tag(self, line: str):
		"""
		Return (speaker, inline_text) for a tag line, else None.
		"""
		for speaker, pattern in self.tag_patterns:
			match = pattern.match(line)
			if match:
				return speaker, match.group(1)
		return None

	#============================================
	def strip_name_prefixes(self, speaker: Speaker, text: str) -> str:
		"""
		Drop repeated `Name:` prefixes so they are not spoken.
		"""
		pattern = self.prefix_patterns[speaker]
		clean = text.strip()
		while True:
			stripped = pattern.sub("", clean, count=1).strip()
			if stripped == clean:
				return clean
			clean = stripped

	#============================================
	def flush(self) -> None:
		if self.state is ScanState.NO_SPEAKER:
			return
		joined = " ".join(part for part in self.buffer if part).strip()
		if joined:
			self.completed.append((SPEAKER_FOR_STATE[self.state], joined))
		self.buffer = []

	#============================================
	def feed_line(self, raw_line: str) -> None:
		line = raw_line.strip()
		if not line:
			return
		tagged = self.match_tag(line)
		if tagged is not None:
			speaker, inline_text = tagged
			self.flush()
			self.state = STATE_FOR_SPEAKER[speaker]
			self.buffer = [self.strip_name_prefixes(speaker, inline_text)]
			return
		if self.state is ScanState.NO_SPEAKER:
			return
		if ANNOTATION_LINE_RE.match(line):
			return
		self.buffer.append(line)

	#============================================
	def finish(self) -> list[tuple[Speaker, str]]:
		"""
		Flush the open segment and return raw (speaker, text) pairs in order.
		"""
		self.flush()
		self.state = ScanState.NO_SPEAKER
		return list(self.completed)


#============================================
def scan_segments(raw_transcript: str, aliases: dict = None) -> list[tuple[Speaker, str]]:
	"""
	Split a transcript into raw, un-normalized speaker segments.
	"""
	scanner = SpeakerTagScanner(aliases)
	for raw_line in (raw_transcript or "").splitlines():
		scanner.feed_line(raw_line)
	return scanner.finish()


#============================================
def parse_transcript(
	raw_transcript: str,
	words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
	min_segment_chars: int = MIN_SEGMENT_CHARS,
	aliases: dict = None,
) -> Script:
	"""
	Parse a raw model reply into a normalized Script.

	Never raises on malformed text; the worst case is an empty Script.
	"""
	segments = []
	for speaker, raw_text in scan_segments(raw_transcript, aliases):
		if len(raw_text) <= min_segment_chars:
			continue
		spoken = text_normalizer.normalize(raw_text)
		if not spoken:
			continue
		segments.append(DialogueSegment(speaker=speaker, text=spoken))
	return Script.from_segments(segments, words_per_minute)
