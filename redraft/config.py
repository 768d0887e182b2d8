"""
Configuration — loads settings from .redraft.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).

Credentials are deliberately absent: API keys come from the environment only
(see ``redraft.llm.registry``).
"""

import os
import sys

import yaml


_DEFAULTS = {
    "provider": "openai",
    "model": "",
    "base_url": "",
    "max_output_tokens": 0,
    "debug": False,
    "log_file": "",
}

# Config file search locations
_CONFIG_FILENAMES = [".redraft.yaml", ".redraft.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Server configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller via :meth:`apply_overrides`)
    2. Environment variables
    3. .redraft.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}
        self._yaml = yd

        # Helper: env var > yaml > default; unusable values fall back to default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val:
                source, raw = env_key, env_val
            elif yd.get(yaml_key) is not None:
                source, raw = yaml_key, yd[yaml_key]
            else:
                return default
            try:
                return cast(raw)
            except (TypeError, ValueError):
                print(f"[nvim-redraft] Invalid value for {source}: {raw!r}; "
                      f"using default {default!r}", file=sys.stderr)
                return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.PROVIDER = _get("NVIM_REDRAFT_PROVIDER", "provider",
                             _DEFAULTS["provider"]).strip().lower()
        self.MODEL = _get("NVIM_REDRAFT_MODEL", "model", _DEFAULTS["model"])
        self.BASE_URL = _get("NVIM_REDRAFT_BASE_URL", "base_url",
                             _DEFAULTS["base_url"])
        self.MAX_OUTPUT_TOKENS = _get("NVIM_REDRAFT_MAX_TOKENS", "max_output_tokens",
                                      _DEFAULTS["max_output_tokens"], cast=int)

        self.DEBUG = _get_bool("NVIM_REDRAFT_DEBUG", "debug", _DEFAULTS["debug"])
        self.LOG_FILE = _get("NVIM_REDRAFT_LOG_FILE", "log_file",
                             _DEFAULTS["log_file"])

        # Per-provider base URL overrides, e.g. ``glm: {base_url: ...}``
        self._provider_urls: dict[str, str] = {}
        for name, section in yd.items():
            if isinstance(section, dict) and section.get("base_url"):
                self._provider_urls[str(name).lower()] = str(section["base_url"])

    def apply_overrides(self, provider: str | None = None, model: str | None = None,
                        debug: bool | None = None, log_file: str | None = None) -> None:
        """Apply CLI argument overrides on top of env / YAML / defaults."""
        if provider:
            self.PROVIDER = provider.strip().lower()
        if model:
            self.MODEL = model
        if debug is not None:
            self.DEBUG = debug
        if log_file:
            self.LOG_FILE = log_file

    def get_base_url(self, provider: str) -> str | None:
        """Return the base URL override for *provider*, or None for its default.

        A provider-specific section wins over the global ``base_url``, which only
        applies to the configured default provider.
        """
        url = self._provider_urls.get(provider.lower())
        if url:
            return url
        if self.BASE_URL and provider.lower() == self.PROVIDER:
            return self.BASE_URL
        return None

    def get_max_output_tokens(self) -> int | None:
        return self.MAX_OUTPUT_TOKENS or None

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
