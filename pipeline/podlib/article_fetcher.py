"""
Fetch a saved article and reduce it to a plain-text Document.
"""

# Standard Library
import os
import re

import requests
from bs4 import BeautifulSoup

from podlib import pipeline_text_utils
from podlib import youtube_transcript
from podlib.podcast_errors import ArticleFetchError
from podlib.script_models import Document


USER_AGENT = "Mozilla/5.0 (compatible; ReadLaterPodcast/1.0)"
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
UNTITLED_ARTICLE = "Untitled Article"

# page furniture removed before the text is read
BOILERPLATE_TAGS = (
	"script", "style", "noscript", "template", "iframe", "svg",
	"nav", "header", "footer", "aside",
)
BOILERPLATE_ROLES = ("navigation", "banner", "contentinfo", "complementary", "dialog")
BOILERPLATE_HINT_RE = re.compile(r"cookie|consent|newsletter", re.IGNORECASE)
# never dropped on a class/id hint alone, e.g. <body class="cookie-banner-open">
CONTENT_TAGS = ("html", "body", "main", "article")
MARKDOWN_H1_RE = re.compile(r"^#\s+(.+)", re.MULTILINE)


#============================================
def is_boilerplate(tag) -> bool:
	"""
	Return True for elements that hold navigation, banners, or notices.
	"""
	if tag.name in BOILERPLATE_TAGS:
		return True
	if tag.name in CONTENT_TAGS:
		return False
	if tag.get("role") in BOILERPLATE_ROLES:
		return True
	hints = " ".join(tag.get("class") or []) + " " + (tag.get("id") or "")
	if not BOILERPLATE_HINT_RE.search(hints):
		return False
	return tag.find(["main", "article"]) is None


#============================================
def extract_readable_text(page_html: str) -> str:
	"""
	Return the visible text of the main content area.

	Boilerplate elements are removed first, then the text of <main>,
	<article> or <body> (in that order) is joined and whitespace collapsed.
	"""
	soup = BeautifulSoup(page_html or "", "html.parser")
	for tag in soup.find_all(is_boilerplate):
		if not tag.decomposed:
			tag.decompose()
	main = soup.find("main") or soup.find("article") or soup.find("body") or soup
	text = main.get_text(separator=" ").replace("\xa0", " ")
	return pipeline_text_utils.collapse_whitespace(text)


#============================================
def extract_title(page_html: str) -> str:
	"""
	Return the <title>, else the first <h1>, else a placeholder.
	"""
	soup = BeautifulSoup(page_html or "", "html.parser")
	for tag_name in ("title", "h1"):
		tag = soup.find(tag_name)
		if tag is None:
			continue
		title = pipeline_text_utils.collapse_whitespace(tag.get_text(separator=" "))
		if title:
			return title
	return UNTITLED_ARTICLE


#============================================
def fetch_document(
	url: str,
	*,
	timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
	session=None,
	logger=None,
) -> Document:
	"""
	Download url and return its readable text as a Document.

	Raises:
		ArticleFetchError: network failure, timeout, or HTTP status >= 400.
	"""
	if not (url or "").strip():
		raise ArticleFetchError("Article URL is empty")
	http = session or requests
	if logger:
		logger(f"Fetching article: {url}")
	try:
		response = http.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
	except requests.exceptions.Timeout as error:
		raise ArticleFetchError(f"Timed out fetching {url} after {timeout:g}s") from error
	except requests.exceptions.RequestException as error:
		raise ArticleFetchError(f"Failed to fetch {url}: {error}") from error
	if response.status_code >= 400:
		raise ArticleFetchError(f"HTTP {response.status_code} fetching {url}")
	page_html = response.text
	document = Document.from_text(extract_title(page_html), extract_readable_text(page_html))
	if logger:
		logger(f"Fetched '{document.title}' ({document.word_count} words).")
	return document


#============================================
def fetch_source_document(url: str, *, logger=None) -> Document:
	"""
	Fetch url as a Document, reading YouTube links from their subtitles.
	"""
	if youtube_transcript.is_youtube_url(url):
		return youtube_transcript.fetch_youtube_document(url, logger=logger)
	return fetch_document(url, logger=logger)


#============================================
def load_text_document(path: str) -> Document:
	"""
	Read a local text or Markdown file as a Document.

	The first `# ` heading is the title; otherwise the file name is used.
	"""
	if not os.path.isfile(path):
		raise FileNotFoundError(f"Article file not found: {path}")
	with open(path, "r", encoding="utf-8") as handle:
		text = handle.read()
	match = MARKDOWN_H1_RE.search(text)
	if match:
		title = match.group(1).strip()
	else:
		title = os.path.splitext(os.path.basename(path))[0]
	return Document.from_text(title, text.strip())
