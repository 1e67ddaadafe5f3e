import re


SLUG_RE = re.compile(r"[^a-z0-9]+")
WHITESPACE_RE = re.compile(r"\s+")


#============================================
def extract_words(text: str) -> list[str]:
	"""
	Return whitespace-delimited tokens.
	"""
	words = (text or "").split()
	return words


#============================================
def count_words(text: str) -> int:
	"""
	Count whitespace-delimited tokens.
	"""
	words = extract_words(text)
	count = len(words)
	return count


#============================================
def collapse_whitespace(text: str) -> str:
	"""
	Collapse whitespace runs to single spaces and trim both ends.
	"""
	return WHITESPACE_RE.sub(" ", text or "").strip()


#============================================
def excerpt(text: str, char_limit: int) -> str:
	"""
	Return the leading char_limit characters of text.

	Cuts at the character level, not at a word boundary.
	"""
	if char_limit <= 0:
		return ""
	return (text or "")[:char_limit]


#============================================
def slugify_title(title: str, max_length: int = 50) -> str:
	"""
	Build a lowercase dash-separated filename slug from a title.
	"""
	slug = SLUG_RE.sub("-", (title or "").lower()).strip("-")
	slug = slug[:max_length].strip("-")
	if not slug:
		return "untitled"
	return slug
