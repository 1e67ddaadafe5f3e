"""
Text-generation service transports.

Each transport exposes generate(request, purpose=...) -> str and maps every
failure (HTTP error, timeout, missing text) to UpstreamError.
"""

# Standard Library
import json
import os
import shutil
import subprocess

import requests

from podlib import pipeline_settings
from podlib.podcast_errors import ConfigurationError
from podlib.podcast_errors import UpstreamError
from podlib.script_models import GenerationRequest


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_MODEL = "anthropic/claude-3.5-haiku"
DEFAULT_INFSH_APP = "openrouter/claude-sonnet-45"
DEFAULT_INFSH_PATH = "/data/.local/bin/infsh"
DEFAULT_TIMEOUT_SECONDS = 180.0
SUPPORTED_PROVIDERS = ("openrouter", "infsh")

# envelope fields tried in order when a reply is structured
REPLY_TEXT_FIELDS = ("output", "result", "content")


#============================================
def _text_from_value(value) -> str:
	"""
	Pull text out of one envelope field value.

	Strings are used directly; lists of parts contribute their "text" items.
	"""
	if isinstance(value, str):
		return value.strip()
	if isinstance(value, list):
		parts = []
		for item in value:
			if isinstance(item, str):
				parts.append(item)
			elif isinstance(item, dict) and isinstance(item.get("text"), str):
				parts.append(item["text"])
		return "\n".join(parts).strip()
	if isinstance(value, dict):
		for key in REPLY_TEXT_FIELDS + ("text",):
			text = _text_from_value(value.get(key))
			if text:
				return text
	return ""


#============================================
def extract_reply_text(payload) -> str:
	"""
	Return the reply text from a free-form string or a structured envelope.

	Mappings are searched for output, result, then content.
	"""
	if isinstance(payload, str):
		text = payload.strip()
		if not text:
			raise UpstreamError("Generation service returned empty text")
		return text
	if isinstance(payload, dict):
		for key in REPLY_TEXT_FIELDS:
			text = _text_from_value(payload.get(key))
			if text:
				return text
		raise UpstreamError(
			"Generation reply had no output, result, or content field with text "
			+ f"(keys: {', '.join(sorted(str(key) for key in payload.keys()))})"
		)
	raise UpstreamError(f"Unsupported generation reply type: {type(payload).__name__}")


#============================================
class OpenRouterTransport:
	"""
	OpenRouter chat-completions transport over requests.
	"""
	name = "OpenRouter"

	def __init__(
		self,
		api_key: str,
		model: str = DEFAULT_OPENROUTER_MODEL,
		base_url: str = OPENROUTER_BASE_URL,
		timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
		session=None,
	) -> None:
		if not (api_key or "").strip():
			raise ConfigurationError("OPENROUTER_API_KEY is not set.")
		self.api_key = api_key.strip()
		self.model = model or DEFAULT_OPENROUTER_MODEL
		self.base_url = base_url.rstrip("/")
		self.timeout_seconds = float(timeout_seconds)
		self.session = session or requests.Session()

	def _headers(self) -> dict[str, str]:
		return {
			"Content-Type": "application/json",
			"Authorization": f"Bearer {self.api_key}",
			"X-Title": "Read Later Podcast",
		}

	def generate(self, request: GenerationRequest, *, purpose: str = "generation") -> str:
		payload = {
			"model": self.model,
			"max_tokens": request.max_output_tokens,
			"temperature": request.temperature,
			"messages": [{"role": "user", "content": request.prompt_text}],
		}
		url = f"{self.base_url}/chat/completions"
		try:
			response = self.session.post(
				url,
				headers=self._headers(),
				json=payload,
				timeout=self.timeout_seconds,
			)
		except requests.exceptions.Timeout as error:
			raise UpstreamError(
				f"{self.name} {purpose} timed out after {self.timeout_seconds:g}s"
			) from error
		except requests.exceptions.RequestException as error:
			raise UpstreamError(f"{self.name} {purpose} request failed: {error}") from error
		if response.status_code >= 400:
			raise UpstreamError(
				f"{self.name} API error: {response.status_code} - {response.text[:300]}"
			)
		try:
			parsed = response.json()
		except ValueError as error:
			raise UpstreamError(f"{self.name} returned a non-JSON body") from error
		return extract_reply_text(self._unwrap_choices(parsed))

	@staticmethod
	def _unwrap_choices(parsed):
		"""
		Return the first chat message when the body uses the choices layout.
		"""
		if not isinstance(parsed, dict):
			return parsed
		choices = parsed.get("choices")
		if isinstance(choices, list) and choices and isinstance(choices[0], dict):
			message = choices[0].get("message")
			if isinstance(message, dict):
				return message
		return parsed


#============================================
class InfshTransport:
	"""
	Runs `infsh app run <app> --input <json>` and reads its JSON envelope.
	"""
	name = "infsh"

	def __init__(
		self,
		executable_path: str,
		app_name: str = DEFAULT_INFSH_APP,
		timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
	) -> None:
		path_text = (executable_path or "").strip()
		if not path_text:
			raise ConfigurationError("INFSH_PATH is not set.")
		resolved = shutil.which(path_text)
		if resolved is None:
			raise ConfigurationError(f"infsh executable not found: {path_text}")
		self.executable_path = resolved
		self.app_name = app_name or DEFAULT_INFSH_APP
		self.timeout_seconds = float(timeout_seconds)

	def build_command(self, request: GenerationRequest) -> list[str]:
		input_json = json.dumps({
			"prompt": request.prompt_text,
			"max_tokens": request.max_output_tokens,
			"temperature": request.temperature,
		})
		return [self.executable_path, "app", "run", self.app_name, "--input", input_json]

	def generate(self, request: GenerationRequest, *, purpose: str = "generation") -> str:
		command = self.build_command(request)
		try:
			result = subprocess.run(
				command,
				capture_output=True,
				text=True,
				check=False,
				timeout=self.timeout_seconds,
			)
		except subprocess.TimeoutExpired as error:
			raise UpstreamError(
				f"{self.name} {purpose} timed out after {self.timeout_seconds:g}s"
			) from error
		except OSError as error:
			raise UpstreamError(f"{self.name} {purpose} could not start: {error}") from error
		if result.returncode != 0:
			err_text = (result.stderr or "").strip() or "unknown infsh error"
			raise UpstreamError(f"{self.name} {purpose} failed: {err_text[:300]}")
		stdout = (result.stdout or "").strip()
		try:
			parsed = json.loads(stdout)
		except ValueError:
			parsed = stdout
		return extract_reply_text(parsed)


#============================================
def describe_generation_path(settings: dict) -> str:
	"""
	Describe the configured generation provider for log lines.
	"""
	provider = get_generation_provider(settings)
	if provider == "openrouter":
		model = pipeline_settings.get_setting_str(
			settings, ["generation", "model"], DEFAULT_OPENROUTER_MODEL,
		)
		return f"openrouter(model={model})"
	app_name = pipeline_settings.get_setting_str(
		settings, ["generation", "infsh", "app"], DEFAULT_INFSH_APP,
	)
	return f"infsh(app={app_name})"


#============================================
def get_generation_provider(settings: dict) -> str:
	provider = pipeline_settings.get_setting_str(
		settings, ["generation", "provider"], "openrouter",
	).lower()
	if provider not in SUPPORTED_PROVIDERS:
		raise ConfigurationError(f"Unsupported generation provider in settings: {provider}")
	return provider


#============================================
def create_generation_client(settings: dict, session=None):
	"""
	Create the generation transport named in settings.

	Credentials come from the environment: OPENROUTER_API_KEY for
	openrouter, INFSH_PATH (or generation.infsh.path) for infsh.
	"""
	provider = get_generation_provider(settings)
	timeout_seconds = pipeline_settings.get_setting_float(
		settings, ["generation", "timeout_seconds"], DEFAULT_TIMEOUT_SECONDS,
	)
	if timeout_seconds <= 0:
		raise ConfigurationError("generation.timeout_seconds must be > 0")
	if provider == "openrouter":
		api_key_env = pipeline_settings.get_setting_str(
			settings, ["generation", "openrouter", "api_key_env"], "OPENROUTER_API_KEY",
		)
		return OpenRouterTransport(
			api_key=os.environ.get(api_key_env, ""),
			model=pipeline_settings.get_setting_str(
				settings, ["generation", "model"], DEFAULT_OPENROUTER_MODEL,
			),
			base_url=pipeline_settings.get_setting_str(
				settings, ["generation", "openrouter", "base_url"], OPENROUTER_BASE_URL,
			),
			timeout_seconds=timeout_seconds,
			session=session,
		)
	configured_path = pipeline_settings.get_setting_str(
		settings, ["generation", "infsh", "path"], "",
	)
	return InfshTransport(
		executable_path=os.environ.get("INFSH_PATH", "") or configured_path or DEFAULT_INFSH_PATH,
		app_name=pipeline_settings.get_setting_str(
			settings, ["generation", "infsh", "app"], DEFAULT_INFSH_APP,
		),
		timeout_seconds=timeout_seconds,
	)


#============================================
def request_text_strict(client, request: GenerationRequest, purpose: str) -> str:
	"""
	Hard-fail call: every failure surfaces as ConfigurationError or UpstreamError.
	"""
	if client is None:
		raise ConfigurationError(f"No generation service configured for {purpose}.")
	try:
		raw_text = client.generate(request, purpose=purpose)
	except (ConfigurationError, UpstreamError):
		raise
	except requests.exceptions.RequestException as error:
		raise UpstreamError(f"{purpose} request failed: {error}") from error
	return extract_reply_text(raw_text)


#============================================
def request_text_best_effort(client, request: GenerationRequest, purpose: str, logger=None):
	"""
	Fail-soft call: returns None instead of raising, after logging the cause.
	"""
	if client is None:
		if logger:
			logger(f"No generation service configured; skipping {purpose}.")
		return None
	try:
		return request_text_strict(client, request, purpose)
	except Exception as error:
		if logger:
			logger(f"{purpose} failed ({error}); continuing without it.")
		return None
