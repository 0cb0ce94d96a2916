"""Configuration management for the IdeaForge interview.

This module provides configuration loading with sensible defaults. Values
come from the environment (optionally seeded from a ``.env`` file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# Stand-in key that counts as "no credential"
PLACEHOLDER_API_KEY = "mock-key"


@dataclass
class GatewayConfig:
    """Settings for the hosted language model."""
    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-5-mini"
    timeout: float = 120.0

    @property
    def live(self) -> bool:
        """True when a real credential is configured."""
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY


@dataclass
class Config:
    """Main configuration object."""
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    save_dir: Path = field(default_factory=lambda: Path.home() / ".ideaforge" / "packages")


def load_config(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> Config:
    """Load configuration with defaults.

    Args:
        env: Mapping to read from. Defaults to ``os.environ`` after loading
            ``.env`` into it.
        dotenv_path: Explicit ``.env`` file; python-dotenv searches upwards
            from the working directory when omitted.

    Returns:
        Config object populated from the environment.

    Raises:
        ValueError: If IDEAFORGE_TIMEOUT is not a number.
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    gateway = GatewayConfig(api_key=env.get("OPENAI_API_KEY") or None)
    if env.get("OPENAI_BASE_URL"):
        gateway.base_url = env["OPENAI_BASE_URL"].rstrip("/")
    if env.get("OPENAI_MODEL"):
        gateway.model = env["OPENAI_MODEL"]
    timeout = env.get("IDEAFORGE_TIMEOUT")
    if timeout:
        try:
            gateway.timeout = float(timeout)
        except ValueError as exc:
            raise ValueError(f"IDEAFORGE_TIMEOUT must be a number of seconds, got {timeout!r}") from exc

    config = Config(gateway=gateway)
    if env.get("IDEAFORGE_SAVE_DIR"):
        config.save_dir = Path(env["IDEAFORGE_SAVE_DIR"]).expanduser()
    return config
