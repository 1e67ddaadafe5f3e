"""
Turn a YouTube video into a Document from its English subtitles.

Subtitles and metadata come from one yt_dlp extract_info call with
skip_download set; no media is fetched. The body carries a short header
block (title, creator, duration, description) ahead of the transcript.
"""

# Standard Library
import glob
import html
import os
import re
import tempfile

import yt_dlp

from podlib import pipeline_text_utils
from podlib.podcast_errors import ArticleFetchError
from podlib.script_models import Document


MAX_TRANSCRIPT_WORDS = 20000
MIN_TRANSCRIPT_CHARS = 50
DESCRIPTION_CHARS = 500
DEFAULT_YOUTUBE_TIMEOUT_SECONDS = 60.0
UNTITLED_VIDEO = "YouTube Video"
UNKNOWN_CREATOR = "Unknown"
SUBTITLE_LANGUAGES = ["en"]

YOUTUBE_URL_RES = (
	re.compile(r"^https?://(?:www\.)?youtube\.com/watch\?v="),
	re.compile(r"^https?://youtu\.be/"),
	re.compile(r"^https?://(?:www\.)?youtube\.com/shorts/"),
	re.compile(r"^https?://(?:www\.)?youtube\.com/embed/"),
	re.compile(r"^https?://m\.youtube\.com/watch\?v="),
)
VIDEO_ID_RES = (
	re.compile(r"youtube\.com/watch\?v=([\w-]+)"),
	re.compile(r"youtu\.be/([\w-]+)"),
	re.compile(r"youtube\.com/shorts/([\w-]+)"),
	re.compile(r"youtube\.com/embed/([\w-]+)"),
)
VTT_TAG_RE = re.compile(r"<[^>]+>")
VTT_HEADER_PREFIXES = ("WEBVTT", "Kind:", "Language:")


#============================================
def is_youtube_url(url: str) -> bool:
	"""
	Return True for watch, short-link, shorts, embed and mobile URLs.
	"""
	if not url:
		return False
	return any(pattern.search(url) for pattern in YOUTUBE_URL_RES)


#============================================
def extract_video_id(url: str) -> str:
	"""
	Return the video id in url, or None when there is none.
	"""
	for pattern in VIDEO_ID_RES:
		match = pattern.search(url or "")
		if match:
			return match.group(1)
	return None


#============================================
def parse_vtt_to_text(vtt_text: str) -> str:
	"""
	Reduce a WebVTT subtitle file to one line of spoken text.

	Auto-generated captions repeat each line as it scrolls, so a cue equal
	to or contained in the previous kept cue is dropped.
	"""
	kept = []
	last_text = ""
	for line in (vtt_text or "").splitlines():
		if not line.strip() or "-->" in line or line.startswith(VTT_HEADER_PREFIXES):
			continue
		text = VTT_TAG_RE.sub("", line).replace("&nbsp;", " ")
		text = html.unescape(text).strip()
		if not text or text == last_text or text in last_text:
			continue
		kept.append(text)
		last_text = text
	return pipeline_text_utils.collapse_whitespace(" ".join(kept))


#============================================
def truncate_words(text: str, max_words: int = MAX_TRANSCRIPT_WORDS) -> str:
	"""
	Keep at most max_words whitespace-delimited words.
	"""
	words = pipeline_text_utils.extract_words(text)
	if len(words) <= max_words:
		return text
	return " ".join(words[:max_words])


#============================================
def format_video_body(info: dict, transcript: str) -> str:
	"""
	Lay out the metadata header and transcript as one article body.
	"""
	title = info.get("title") or UNTITLED_VIDEO
	creator = info.get("uploader") or info.get("channel") or UNKNOWN_CREATOR
	duration_minutes = int((info.get("duration") or 0) / 60 + 0.5)
	description = (info.get("description") or "")[:DESCRIPTION_CHARS]
	lines = [
		f"Video Title: {title}",
		f"Creator: {creator}",
		f"Duration: {duration_minutes} minutes",
		"Source: YouTube",
		"",
		"--- Video Description ---",
		description,
		"",
		"--- Transcript ---",
		"",
		transcript,
	]
	return "\n".join(lines).strip()


#============================================
def download_subtitles(video_url: str, work_dir: str, timeout: float) -> tuple[dict, str]:
	"""
	Write English subtitles into work_dir and return (info, vtt_text).

	vtt_text is empty when the video has no English subtitles.
	"""
	options = {
		"skip_download": True,
		"writesubtitles": True,
		"writeautomaticsub": True,
		"subtitleslangs": SUBTITLE_LANGUAGES,
		"subtitlesformat": "vtt",
		"outtmpl": os.path.join(work_dir, "%(id)s.%(ext)s"),
		"socket_timeout": timeout,
		"quiet": True,
		"no_warnings": True,
		"noprogress": True,
	}
	with yt_dlp.YoutubeDL(options) as ydl:
		info = ydl.extract_info(video_url, download=True)
	vtt_paths = sorted(glob.glob(os.path.join(work_dir, "*.vtt")))
	if not vtt_paths:
		return info or {}, ""
	with open(vtt_paths[0], "r", encoding="utf-8") as handle:
		vtt_text = handle.read()
	return info or {}, vtt_text


#============================================
def fetch_youtube_document(
	url: str,
	*,
	timeout: float = DEFAULT_YOUTUBE_TIMEOUT_SECONDS,
	logger=None,
) -> Document:
	"""
	Fetch a video's subtitles and metadata as a Document.

	Raises:
		ArticleFetchError: no video id, yt-dlp failure, no English
			subtitles, or a transcript shorter than MIN_TRANSCRIPT_CHARS.
	"""
	video_id = extract_video_id(url)
	if not video_id:
		raise ArticleFetchError(f"Could not extract a YouTube video id from {url}")
	video_url = f"https://www.youtube.com/watch?v={video_id}"
	if logger:
		logger(f"Fetching YouTube transcript: {video_id}")
	with tempfile.TemporaryDirectory(prefix=f"yt_{video_id}_") as work_dir:
		try:
			info, vtt_text = download_subtitles(video_url, work_dir, timeout)
		except yt_dlp.utils.YoutubeDLError as error:
			raise ArticleFetchError(f"Failed to get YouTube transcript for {video_id}: {error}") from error
	if not vtt_text:
		raise ArticleFetchError(f"No English subtitles available for YouTube video {video_id}")
	transcript = parse_vtt_to_text(vtt_text)
	if len(transcript) < MIN_TRANSCRIPT_CHARS:
		raise ArticleFetchError(f"Transcript too short or empty for YouTube video {video_id}")
	word_count = pipeline_text_utils.count_words(transcript)
	if word_count > MAX_TRANSCRIPT_WORDS:
		if logger:
			logger(f"Truncating transcript from {word_count} to {MAX_TRANSCRIPT_WORDS} words.")
		transcript = truncate_words(transcript, MAX_TRANSCRIPT_WORDS)
	document = Document.from_text(info.get("title") or UNTITLED_VIDEO, format_video_body(info, transcript))
	if logger:
		logger(f"Transcript extracted: '{document.title}' ({document.word_count} words).")
	return document
