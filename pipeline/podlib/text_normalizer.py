"""
Make dialogue text safe for speech synthesis.

normalize() strips stage directions that a TTS engine would read aloud,
spells out years, and expands the symbols voices stumble over. It is a
total function: anything it does not recognize passes through unchanged.
"""

import re

from podlib import pipeline_text_utils


# stems matched as a word start anywhere in a parenthetical, e.g. "(nervous laughter)"
PERFORMANCE_VERB_STEMS = (
	"laugh",
	"chuckl",
	"sigh",
	"paus",
	"smil",
	"nod",
	"grin",
	"shrug",
	"gestur",
	"lean",
	"point",
	"wav",
	"clear",
	"cough",
	"snort",
	"giggl",
	"beam",
	"wink",
	"rais",
)

# bare verbs removed even outside brackets, e.g. "she laughs softly,"
FREE_STANDING_VERBS = (
	"laughs?",
	"chuckles?",
	"sighs?",
	"giggles?",
	"snorts?",
	"grins?",
	"smiles?",
	"beams?",
	"winks?",
	"nods?",
	"shrugs?",
	"pauses?",
	r"clears?\s+(?:(?:his|her|their)\s+)?throat",
)

PERFORMANCE_ADVERBS = (
	"softly",
	"loudly",
	"nervously",
	"expectantly",
	"deeply",
	"quietly",
	"slightly",
	"knowingly",
	"warmly",
	"broadly",
	"briefly",
	"dramatically",
	"heartily",
	"sheepishly",
	"awkwardly",
	"excitedly",
	"thoughtfully",
	"ruefully",
	"wryly",
	"dryly",
)

SYMBOL_WORDS = (
	("&", " and "),
	("$", " dollars "),
	("%", " percent "),
)

QUOTE_REPLACEMENTS = (
	("“", '"'),
	("”", '"'),
	("‘", "'"),
	("’", "'"),
)

ONES = ("", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine")
TEENS = (
	"ten", "eleven", "twelve", "thirteen", "fourteen",
	"fifteen", "sixteen", "seventeen", "eighteen", "nineteen",
)
TENS = ("", "", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety")


BRACKET_RE = re.compile(r"\[[^\]]*\]")
ASTERISK_ACTION_RE = re.compile(r"\*[^*]+\*")
PAREN_ACTION_RE = re.compile(
	r"\([^)]*\b(?:" + "|".join(PERFORMANCE_VERB_STEMS) + r")[^)]*\)",
	re.IGNORECASE,
)
FREE_STANDING_RE = re.compile(
	r"\b(?:" + "|".join(FREE_STANDING_VERBS) + r")\b"
	+ r"(?:\s+(?:" + "|".join(PERFORMANCE_ADVERBS) + r")\b)?"
	+ r"[.,;!?]?\s*",
	re.IGNORECASE,
)
YEAR_RE = re.compile(r"\b(1[4-9]\d{2}|20[0-2]\d)\b")


#============================================
def two_digit_words(number: int) -> str:
	"""
	Spell 0-99 the way it is read inside a year ("seventy-six").
	"""
	if number < 10:
		return ONES[number]
	if number < 20:
		return TEENS[number - 10]
	tens_word = TENS[number // 10]
	unit = number % 10
	if unit:
		return f"{tens_word}-{ONES[unit]}"
	return tens_word


#============================================
def verbalize_year(year: int) -> str:
	"""
	Spell a year in 1400-2029 as spoken English.

	1776 -> "seventeen seventy-six", 1905 -> "nineteen oh five",
	2005 -> "two thousand five", 2024 -> "twenty twenty-four".
	Years outside the range come back as digits.
	"""
	remainder = year % 100
	if 2000 <= year <= 2009:
		if remainder:
			return f"two thousand {ONES[remainder]}"
		return "two thousand"
	if 2010 <= year <= 2029:
		return f"twenty {two_digit_words(remainder)}"
	if 1400 <= year <= 1999:
		century = two_digit_words(year // 100)
		if remainder == 0:
			tail = "hundred"
		elif remainder < 10:
			tail = f"oh {ONES[remainder]}"
		else:
			tail = two_digit_words(remainder)
		return f"{century} {tail}"
	return str(year)


#============================================
def strip_stage_directions(text: str) -> str:
	"""
	Remove bracketed cues, parenthetical and asterisk actions, and bare performance verbs.
	"""
	clean = BRACKET_RE.sub("", text)
	clean = PAREN_ACTION_RE.sub("", clean)
	clean = ASTERISK_ACTION_RE.sub("", clean)
	clean = FREE_STANDING_RE.sub(" ", clean)
	return clean


#============================================
def verbalize_years(text: str) -> str:
	"""
	Replace every year token in range with its spoken form.
	"""
	return YEAR_RE.sub(lambda match: verbalize_year(int(match.group(1))), text)


#============================================
def expand_symbols(text: str) -> str:
	"""
	Spell out &, $, % and straighten curly quotes.
	"""
	clean = text
	for symbol, words in SYMBOL_WORDS:
		clean = clean.replace(symbol, words)
	for curly, straight in QUOTE_REPLACEMENTS:
		clean = clean.replace(curly, straight)
	return clean


#============================================
def normalize(raw: str) -> str:
	"""
	Return TTS-safe text.

	Order matters: brackets go first so the later patterns never see
	half of a cue, and whitespace is collapsed again after symbol
	expansion so normalize(normalize(s)) == normalize(s).
	"""
	if not raw:
		return ""
	clean = strip_stage_directions(raw)
	clean = verbalize_years(clean)
	clean = pipeline_text_utils.collapse_whitespace(clean)
	clean = expand_symbols(clean)
	clean = pipeline_text_utils.collapse_whitespace(clean)
	return clean
