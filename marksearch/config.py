"""
Configuration management for marksearch.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/marksearch/config.toml) and local
(marksearch.toml) configurations.
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict, fields

from .constants import (
    DEFAULT_INPUT_FILE,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_EMBEDDINGS_FILE,
    DEFAULT_MODEL_NAME,
    DEFAULT_DEVICE,
    MAX_EMBEDDING_CHARS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_FETCH_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_EMBEDDING_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_QUERY,
)

# Optional fields may be cleared with an empty value or "none"
_OPTIONAL_FIELDS = {"embedding_timeout"}


@dataclass
class MarksearchConfig:
    """
    marksearch configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (MARKSEARCH_*)
    3. Explicit config file (--config)
    4. Local config file (./marksearch.toml or ./.marksearchrc)
    5. User config file (~/.config/marksearch/config.toml)
    6. System defaults
    """

    # Files
    input_file: str = field(default=DEFAULT_INPUT_FILE)
    output_file: str = field(default=DEFAULT_OUTPUT_FILE)
    embeddings_file: str = field(default=DEFAULT_EMBEDDINGS_FILE)
    write_embeddings_file: bool = field(default=True)

    # Embedding model
    model_name: str = field(default=DEFAULT_MODEL_NAME)
    device: str = field(default=DEFAULT_DEVICE)
    max_text_chars: int = field(default=MAX_EMBEDDING_CHARS)
    embedding_timeout: Optional[float] = field(default=DEFAULT_EMBEDDING_TIMEOUT)

    # Network settings
    request_timeout: float = field(default=DEFAULT_REQUEST_TIMEOUT)
    fetch_retries: int = field(default=DEFAULT_FETCH_RETRIES)
    retry_backoff: float = field(default=DEFAULT_RETRY_BACKOFF)
    user_agent: str = field(default=DEFAULT_USER_AGENT)

    # Search
    search_limit: int = field(default=DEFAULT_SEARCH_LIMIT)
    default_query: str = field(default=DEFAULT_QUERY)

    # Display
    log_level: str = field(default="INFO")
    show_progress: bool = field(default=True)

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "MarksearchConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (applied after the
                user and local files)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_config_path = Path.home() / ".config" / "marksearch" / "config.toml"
        if user_config_path.exists():
            config._merge(cls._load_toml(user_config_path))

        local_paths = [
            Path.cwd() / "marksearch.toml",
            Path.cwd() / ".marksearchrc",
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()
        config._expand_paths()

        return config

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with MARKSEARCH_ prefix."""
        prefix = "MARKSEARCH_"
        known = {f.name for f in fields(self)}
        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            config_key = key[len(prefix):].lower()
            if config_key not in known:
                continue
            if config_key in _OPTIONAL_FIELDS and value.strip().lower() in ("", "none"):
                setattr(self, config_key, None)
                continue

            current_value = getattr(self, config_key)
            if isinstance(current_value, bool):
                setattr(self, config_key, value.lower() in ("true", "1", "yes"))
            elif isinstance(current_value, int):
                setattr(self, config_key, int(value))
            elif isinstance(current_value, float) or config_key in _OPTIONAL_FIELDS:
                setattr(self, config_key, float(value))
            else:
                setattr(self, config_key, value)

    def _expand_paths(self):
        """Expand ~ and environment variables in paths."""
        path_fields = ["input_file", "output_file", "embeddings_file"]
        for field_name in path_fields:
            value = getattr(self, field_name)
            if isinstance(value, str):
                expanded = os.path.expanduser(os.path.expandvars(value))
                setattr(self, field_name, expanded)

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = Path.home() / ".config" / "marksearch" / "config.toml"

        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null; unset optionals are left out
        data = {k: v for k, v in asdict(self).items() if v is not None}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)


# Global configuration instance
_config: Optional[MarksearchConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> MarksearchConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = MarksearchConfig.load(config_file)
    return _config


def init_config(config_file: Optional[Path] = None, **kwargs) -> MarksearchConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        config_file: Explicit config file to load
        **kwargs: Configuration overrides; None values are ignored

    Returns:
        Configured instance
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
