# Standard Library
import os


_PROMPT_CACHE = {}
PROMPT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "prompts")


#============================================
def load_prompt(prompt_name: str) -> str:
	"""
	Load a prompt template from commitlib/prompts/.
	"""
	if not prompt_name:
		raise ValueError("prompt_name is required")
	path = os.path.join(PROMPT_DIR, prompt_name)
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
	Replace {{token}} placeholders with supplied values.
	"""
	if not template:
		return ""
	rendered = template
	for key, value in values.items():
		token = "{{" + key + "}}"
		replacement = value if value is not None else ""
		rendered = rendered.replace(token, replacement)
	return rendered
