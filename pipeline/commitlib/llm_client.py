"""
Chat transports and the client wrapper used to summarize commits.

Each transport makes exactly one request per generate() call. Failures are
raised as LLMError subclasses and left to the caller to record.
"""

from __future__ import annotations

# Standard Library
import os
import urllib.parse

# PIP3 modules
import requests
from openai import OpenAI
from openai import APIConnectionError
from openai import OpenAIError

# local repo modules
from commitlib import prompt_loader
from commitlib.report_errors import EmptyResponseError
from commitlib.report_errors import LLMError
from commitlib.report_errors import SettingsError
from commitlib.report_errors import TransportUnavailableError


DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"
DEFAULT_OLLAMA_MODEL = "llama3.2"
DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_LANGUAGE = "English"
SUPPORTED_TRANSPORTS = ("openai", "ollama")


#============================================
def build_system_message(language: str = DEFAULT_LANGUAGE) -> str:
	"""
	Render the default persona instruction for the target language.
	"""
	template = prompt_loader.load_prompt("system_persona.txt")
	return prompt_loader.render_prompt(template, {
		"language": (language or DEFAULT_LANGUAGE).strip(),
	}).strip()


class OpenAITransport:
	name = "OpenAI"

	def __init__(
		self,
		model: str = DEFAULT_OPENAI_MODEL,
		system_message: str = "",
		temperature: float | None = None,
		api_key: str | None = None,
		client=None,
	) -> None:
		self.model = model or DEFAULT_OPENAI_MODEL
		self.system_message = system_message
		self.temperature = temperature
		self.api_key = api_key
		self._client = client

	def _get_client(self):
		if self._client is not None:
			return self._client
		api_key = self.api_key or os.environ.get("OPENAI_API_KEY", "")
		if not api_key:
			raise TransportUnavailableError("OPENAI_API_KEY environment variable is not set.")
		# the SDK retries twice by default
		self._client = OpenAI(api_key=api_key, max_retries=0)
		return self._client

	def _build_messages(self, prompt: str) -> list[dict[str, str]]:
		messages: list[dict[str, str]] = []
		if self.system_message:
			messages.append({"role": "system", "content": self.system_message})
		messages.append({"role": "user", "content": prompt})
		return messages

	def generate(self, prompt: str, *, purpose: str, max_tokens: int) -> str:
		request: dict[str, object] = {
			"model": self.model,
			"messages": self._build_messages(prompt),
		}
		# optional settings are only sent when configured
		if self.temperature is not None:
			request["temperature"] = self.temperature
		if max_tokens:
			request["max_tokens"] = max_tokens
		client = self._get_client()
		try:
			completion = client.chat.completions.create(**request)
		except APIConnectionError as exc:
			raise TransportUnavailableError("OpenAI API is unreachable.") from exc
		except OpenAIError as exc:
			raise LLMError(f"OpenAI request failed ({purpose}): {exc}") from exc
		choices = getattr(completion, "choices", None) or []
		if not choices:
			raise EmptyResponseError("OpenAI returned no choices.")
		content = choices[0].message.content or ""
		if not content.strip():
			raise EmptyResponseError("OpenAI returned empty content.")
		return content


class OllamaTransport:
	name = "Ollama"

	def __init__(
		self,
		model: str = DEFAULT_OLLAMA_MODEL,
		base_url: str = DEFAULT_OLLAMA_URL,
		system_message: str = "",
		timeout: int = 120,
	) -> None:
		self.model = model or DEFAULT_OLLAMA_MODEL
		self.base_url = (base_url or DEFAULT_OLLAMA_URL).rstrip("/")
		self.system_message = system_message
		self.timeout = int(timeout)

	def _build_messages(self, prompt: str) -> list[dict[str, str]]:
		messages: list[dict[str, str]] = []
		if self.system_message:
			messages.append({"role": "system", "content": self.system_message})
		messages.append({"role": "user", "content": prompt})
		return messages

	def _validated_chat_endpoint(self) -> str:
		"""
		Build and validate the Ollama chat endpoint URL.
		"""
		parsed = urllib.parse.urlparse(self.base_url)
		if parsed.scheme not in {"http", "https"}:
			raise TransportUnavailableError("Ollama base_url must use http or https.")
		if not parsed.netloc:
			raise TransportUnavailableError("Ollama base_url must include a host.")
		return urllib.parse.urljoin(self.base_url + "/", "api/chat")

	def generate(self, prompt: str, *, purpose: str, max_tokens: int) -> str:
		payload: dict[str, object] = {
			"model": self.model,
			"messages": self._build_messages(prompt),
			"stream": False,
			"options": {"num_predict": max_tokens},
		}
		endpoint = self._validated_chat_endpoint()
		try:
			response = requests.post(endpoint, json=payload, timeout=self.timeout)
		except requests.ConnectionError as exc:
			raise TransportUnavailableError("Ollama is unreachable.") from exc
		except requests.RequestException as exc:
			raise LLMError(f"Ollama request failed ({purpose}): {exc}") from exc
		if response.status_code >= 400:
			raise LLMError(f"Ollama chat error: status {response.status_code}")
		parsed = response.json()
		assistant_message = parsed.get("message", {}).get("content", "")
		if not assistant_message.strip():
			raise EmptyResponseError("Ollama chat returned empty content")
		return assistant_message


#============================================
class LLMClient:
	"""
	Single-transport client with prompt validation and progress logging.
	"""

	def __init__(self, transport, quiet: bool = True, log_fn=None):
		self.transport = transport
		self.quiet = quiet
		self.log_fn = log_fn

	#============================================
	def generate(self, prompt: str, *, purpose: str, max_tokens: int = 1200) -> str:
		"""
		Send one prompt and return stripped generated text.
		"""
		if not isinstance(prompt, str) or not prompt.strip():
			raise ValueError("prompt must be a non-empty string")
		if not self.quiet and self.log_fn is not None:
			self.log_fn(f"LLM request via {self.transport.name}: {purpose}")
		text = self.transport.generate(prompt, purpose=purpose, max_tokens=max_tokens)
		text = (text or "").strip()
		if not text:
			raise EmptyResponseError(f"{self.transport.name} returned no text for {purpose}")
		return text


#============================================
def resolve_model(transport_name: str, model_override: str, settings_model: str) -> str:
	"""
	Pick the model: CLI override, then OPENAI_MODEL for openai, then settings.
	"""
	if model_override:
		return model_override
	if transport_name == "openai":
		env_model = os.environ.get("OPENAI_MODEL", "").strip()
		if env_model:
			return env_model
		return settings_model or DEFAULT_OPENAI_MODEL
	return settings_model or DEFAULT_OLLAMA_MODEL


#============================================
def describe_llm_execution_path(transport_name: str, model: str) -> str:
	"""
	Describe the configured transport for progress output.
	"""
	return f"{transport_name}(model={model or 'auto'})"


#============================================
def create_llm_client(
	transport_name: str,
	model: str,
	language: str = DEFAULT_LANGUAGE,
	temperature: float | None = None,
	base_url: str = DEFAULT_OLLAMA_URL,
	quiet: bool = True,
	log_fn=None,
) -> LLMClient:
	"""
	Create the LLMClient for one commit report run.
	"""
	system_message = build_system_message(language)
	if transport_name == "openai":
		transport = OpenAITransport(
			model=model,
			system_message=system_message,
			temperature=temperature,
		)
	elif transport_name == "ollama":
		transport = OllamaTransport(
			model=model,
			base_url=base_url,
			system_message=system_message,
		)
	else:
		raise SettingsError(f"Unsupported llm transport: {transport_name}")
	return LLMClient(transport, quiet=quiet, log_fn=log_fn)
