import os

import yaml

from commitlib.report_errors import SettingsError


#============================================
def get_repo_root() -> str:
	"""
	Return project root based on this module location.
	"""
	module_dir = os.path.dirname(os.path.abspath(__file__))
	pipeline_dir = os.path.dirname(module_dir)
	return os.path.dirname(pipeline_dir)


#============================================
def resolve_settings_path(path_text: str) -> str:
	"""
	Resolve settings path against cwd first, then project root.
	"""
	if os.path.isabs(path_text):
		return path_text
	cwd_candidate = os.path.abspath(path_text)
	if os.path.isfile(cwd_candidate):
		return cwd_candidate
	repo_candidate = os.path.join(get_repo_root(), path_text)
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
		raise SettingsError(f"Settings file must contain a mapping: {resolved_path}")
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
	except ValueError as error:
		raise SettingsError(f"Invalid integer for setting path {'.'.join(keys)}: {value}") from error


#============================================
def get_setting_float(settings: dict, keys: list[str], default_value: float | None) -> float | None:
	"""
	Read an optional float setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	try:
		return float(value)
	except ValueError as error:
		raise SettingsError(f"Invalid number for setting path {'.'.join(keys)}: {value}") from error


#============================================
def is_provider_enabled(provider_name: str, provider_config) -> bool:
	"""
	Read the enabled flag of one llm.providers entry.
	"""
	if not isinstance(provider_config, dict):
		return False
	value = provider_config.get("enabled", False)
	if isinstance(value, bool):
		return value
	text = str(value).strip().lower()
	if text in {"1", "true", "yes", "on"}:
		return True
	if text in {"0", "false", "no", "off"}:
		return False
	raise SettingsError(f"Invalid enabled flag for llm provider {provider_name}: {value!r}")


#============================================
def get_enabled_llm_transport(settings: dict, default_value: str = "openai") -> str:
	"""
	Resolve exactly one enabled LLM provider from settings.
	"""
	providers = get_nested_value(settings, ["llm", "providers"], {})
	if not isinstance(providers, dict):
		raise SettingsError("Invalid settings: llm.providers must be a mapping.")

	enabled = []
	for provider_name, provider_config in providers.items():
		if is_provider_enabled(provider_name, provider_config):
			enabled.append(provider_name)

	if len(enabled) > 1:
		raise SettingsError(
			"Only one LLM provider may be enabled in settings.yaml. "
			+ f"Enabled providers: {', '.join(enabled)}"
		)
	if len(enabled) == 1:
		return enabled[0]
	return default_value


#============================================
def get_llm_provider_model(settings: dict, provider_name: str) -> str:
	"""
	Read default model for one provider, falling back to llm.model.
	"""
	model_value = get_setting_str(
		settings,
		["llm", "providers", provider_name, "model"],
		"",
	)
	if model_value:
		return model_value
	return get_setting_str(settings, ["llm", "model"], "")
