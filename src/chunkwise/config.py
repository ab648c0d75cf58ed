"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

APP_NAME = "chunkwise"
APP_AUTHOR = "chunkwise"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	config_file: Path = field(init=False)
	plans_dir: Path = field(init=False)
	db_path: Path = field(init=False)
	log_dir: Path = field(init=False)

	# User-configurable
	log_level: str = "WARNING"
	recent_sessions: int = 5

	def __post_init__(self) -> None:
		self.config_file = self.config_dir / "config.toml"
		self.plans_dir = self.data_dir / "plans"
		self.db_path = self.data_dir / "chunkwise.db"
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.plans_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


PATH_FIELDS = {"config_dir", "data_dir"}


def _apply_env_overrides(config: Config) -> Config:
	"""Apply CHUNKWISE_* environment variable overrides."""
	env_map = {
		"CHUNKWISE_CONFIG_DIR": "config_dir",
		"CHUNKWISE_DATA_DIR": "data_dir",
		"CHUNKWISE_LOG_LEVEL": "log_level",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, Path(val) if attr in PATH_FIELDS else val)
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if key in PATH_FIELDS:
			setattr(config, key, Path(os.path.expanduser(val)))
		elif key in ("log_level", "recent_sessions"):
			setattr(config, key, val)

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	# The config dir itself may be redirected from the environment
	config_dir = os.getenv("CHUNKWISE_CONFIG_DIR")
	if config_dir:
		config.config_dir = Path(config_dir)
		config.__post_init__()
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config


DEFAULT_CONFIG_TOML = """# chunkwise configuration

# data_dir = "~/.local/share/chunkwise"
# log_level = "WARNING"
# recent_sessions = 5
"""
