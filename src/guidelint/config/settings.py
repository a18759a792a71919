"""Application settings."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(extra="forbid")

  rules_dir: Path = Path("rules")
  builtin_rules: bool = True
  dry_run: bool = True
  github_token: str | None = Field(default=None, repr=False)
  api_url: str = "https://api.github.com"
  batch_size: int = Field(default=50, ge=1, le=100)
  per_page: int = Field(default=100, ge=1, le=100)
  max_comment_pages: int = Field(default=10, ge=1)
  timeout: float = Field(default=30.0, gt=0)
  max_findings_shown: int = Field(default=10, ge=1)
