"""Configuration file loading."""

import os
from pathlib import Path
from typing import Mapping

import yaml

from guidelint.config.settings import Settings

CONFIG_FILENAMES = [".guidelint.yaml", ".guidelint.yml", "guidelint.yaml", "guidelint.yml"]

# Environment variable -> settings field, applied over the config file
ENV_OVERRIDES = {
  "GITHUB_TOKEN": "github_token",
  "GUIDELINT_RULES_DIR": "rules_dir",
  "GITHUB_API_URL": "api_url",
}


def _find_config_file(config_path: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path is not None:
    if not config_path.exists():
      raise FileNotFoundError(f"Config file not found: {config_path}")
    return config_path

  for filename in CONFIG_FILENAMES:
    path = Path.cwd() / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None) -> Settings:
  """Load settings from a config file and the environment."""
  data: dict = {}
  path = _find_config_file(config_path)
  if path:
    with open(path) as f:
      data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
      raise ValueError(f"Config file {path} must contain a mapping")

  return _parse_config(data, os.environ)


def _parse_config(data: dict, environ: Mapping[str, str]) -> Settings:
  """Merge file data with environment overrides into Settings."""
  merged = dict(data)
  for env_var, field_name in ENV_OVERRIDES.items():
    value = environ.get(env_var)
    if value:
      merged[field_name] = value
  return Settings(**merged)
