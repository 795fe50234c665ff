"""
Configuration loader
"""
import os
import yaml
from pathlib import Path
from typing import Optional

from evalmate.models import ClientConfig


API_URL_ENV = "EVALMATE_API_URL"


def load_config(config_path: Optional[str] = "config/client.yaml") -> ClientConfig:
    """
    Load client configuration from YAML file

    Args:
        config_path: Path to config file, or None for built-in defaults

    Returns:
        ClientConfig object; EVALMATE_API_URL overrides api_base

    Raises:
        FileNotFoundError: If config_path is given and does not exist
    """
    data = {}
    if config_path is not None:
        path = Path(config_path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

    api_url = os.environ.get(API_URL_ENV)
    if api_url:
        data['api_base'] = api_url

    return ClientConfig(**data)
