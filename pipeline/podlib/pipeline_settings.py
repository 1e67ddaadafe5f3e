import os
from dataclasses import dataclass

import yaml


#============================================
@dataclass(frozen=True)
class ContentSettings:
	"""
	Length targets shared by the expansion and script stages.
	"""
	min_words_for_podcast: int = 2000
	target_podcast_minutes: int = 15
	max_podcast_minutes: int = 25
	words_per_minute: int = 150
	script_excerpt_chars: int = 4000
	expansion_excerpt_chars: int = 5000
	max_output_tokens: int = 4000
	temperature: float = 0.7


#============================================
def get_repo_root() -> str:
	"""
	Return repository root based on this module location.
	"""
	module_dir = os.path.dirname(os.path.abspath(__file__))
	pipeline_dir = os.path.dirname(module_dir)
	repo_root = os.path.dirname(pipeline_dir)
	return repo_root


#============================================
def resolve_settings_path(path_text: str) -> str:
	"""
	Resolve settings path against cwd first, then repo root.
	"""
	if os.path.isabs(path_text):
		return path_text
	cwd_candidate = os.path.abspath(path_text)
	if os.path.isfile(cwd_candidate):
		return cwd_candidate
	repo_root = get_repo_root()
	repo_candidate = os.path.join(repo_root, path_text)
	return os.path.abspath(repo_candidate)


#============================================
def load_settings(path_text: str) -> tuple[dict, str]:
	"""
	Load YAML settings dict and return it with resolved path.
	"""
	resolved_path = resolve_settings_path(path_text)
	if not os.path.isfile(resolved_path):
		return {}, resolved_path
	with open(resolved_path, "r", encoding="utf-8") as handle:
		data = yaml.safe_load(handle.read())
	if data is None:
		return {}, resolved_path
	if not isinstance(data, dict):
		raise RuntimeError(f"Settings file must contain a mapping: {resolved_path}")
	return data, resolved_path


#============================================
def get_nested_value(settings: dict, keys: list[str], default_value):
	"""
	Read nested mapping value by key path.
	"""
	current = settings
	for key in keys:
		if not isinstance(current, dict):
			return default_value
		if key not in current:
			return default_value
		current = current[key]
	return current


#============================================
def get_setting_str(settings: dict, keys: list[str], default_value: str) -> str:
	"""
	Read a string setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	return str(value).strip()


#============================================
def get_setting_int(settings: dict, keys: list[str], default_value: int) -> int:
	"""
	Read an integer setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	try:
		return int(value)
	except (TypeError, ValueError) as error:
		raise RuntimeError(f"Invalid integer for setting path {'.'.join(keys)}: {value}") from error


#============================================
def get_setting_float(settings: dict, keys: list[str], default_value: float) -> float:
	"""
	Read a float setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	try:
		return float(value)
	except (TypeError, ValueError) as error:
		raise RuntimeError(f"Invalid number for setting path {'.'.join(keys)}: {value}") from error


#============================================
def load_content_settings(settings: dict) -> ContentSettings:
	"""
	Build ContentSettings from the content: and generation: sections.
	"""
	defaults = ContentSettings()
	content = ContentSettings(
		min_words_for_podcast=get_setting_int(
			settings, ["content", "min_words_for_podcast"], defaults.min_words_for_podcast,
		),
		target_podcast_minutes=get_setting_int(
			settings, ["content", "target_podcast_minutes"], defaults.target_podcast_minutes,
		),
		max_podcast_minutes=get_setting_int(
			settings, ["content", "max_podcast_minutes"], defaults.max_podcast_minutes,
		),
		words_per_minute=get_setting_int(
			settings, ["content", "words_per_minute"], defaults.words_per_minute,
		),
		script_excerpt_chars=get_setting_int(
			settings, ["content", "script_excerpt_chars"], defaults.script_excerpt_chars,
		),
		expansion_excerpt_chars=get_setting_int(
			settings, ["content", "expansion_excerpt_chars"], defaults.expansion_excerpt_chars,
		),
		max_output_tokens=get_setting_int(
			settings, ["generation", "max_output_tokens"], defaults.max_output_tokens,
		),
		temperature=get_setting_float(
			settings, ["generation", "temperature"], defaults.temperature,
		),
	)
	if content.words_per_minute < 1:
		raise RuntimeError("content.words_per_minute must be >= 1")
	if content.target_podcast_minutes < 1:
		raise RuntimeError("content.target_podcast_minutes must be >= 1")
	if content.target_podcast_minutes > content.max_podcast_minutes:
		raise RuntimeError(
			"content.target_podcast_minutes must not exceed content.max_podcast_minutes"
		)
	return content
