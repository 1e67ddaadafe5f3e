# Standard Library
import os
import re


_PROMPT_CACHE = {}
TOKEN_RE = re.compile(r"\{\{(\w+)\}\}")


#============================================
def get_prompt_root() -> str:
	"""
	Return the pipeline/prompts/ directory next to podlib.
	"""
	podlib_dir = os.path.dirname(os.path.abspath(__file__))
	return os.path.join(os.path.dirname(podlib_dir), "prompts")


#============================================
def load_prompt(prompt_name: str) -> str:
	"""
	Load a prompt template from pipeline/prompts/.
	"""
	if not prompt_name:
		raise ValueError("prompt_name is required")
	path = os.path.join(get_prompt_root(), prompt_name)
	if path in _PROMPT_CACHE:
		return _PROMPT_CACHE[path]
	if not os.path.exists(path):
		raise FileNotFoundError(f"Prompt file not found: {path}")
	with open(path, "r", encoding="utf-8") as handle:
		text = handle.read()
	_PROMPT_CACHE[path] = text
	return text


#============================================
def render_prompt(template: str, values: dict[str, str]) -> str:
	"""
	Replace {{token}} placeholders with supplied values in one pass.

	Substituted text is never scanned again, so a value that itself
	contains {{token}} is inserted literally. Unknown tokens stay intact.
	"""
	if not template:
		return ""

	def _substitute(match: re.Match) -> str:
		key = match.group(1)
		if key not in values:
			return match.group(0)
		value = values[key]
		return value if value is not None else ""

	rendered = TOKEN_RE.sub(_substitute, template)
	return rendered


#============================================
def render_prompt_with_target(
	template: str,
	values: dict[str, str],
	target_value: str,
	unit: str,
	document_name: str,
) -> str:
	"""
	Render a prompt template and append a closing target reminder.

	Adds 'Target {target_value} {unit} for this {document_name}.' at the end
	so the model sees the length constraint both near the top and as the final line.

	Args:
		template: raw prompt template with {{token}} placeholders.
		values: token substitution dict passed to render_prompt.
		target_value: the numeric target as a string (e.g. '2250').
		unit: 'words' or 'characters'.
		document_name: short label like 'podcast script'.

	Returns:
		Fully rendered prompt string with closing target line.
	"""
	rendered = render_prompt(template, values)
	closing = f"\nTarget {target_value} {unit} for this {document_name}."
	rendered = rendered.rstrip() + closing
	return rendered
