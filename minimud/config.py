import os
import logging

import yaml
from dotenv import load_dotenv

from minimud.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"

DEFAULTS = {
    'world': 'data/worlds/cave',
    'save_file': 'save.json',
    'debug_mode': False,
    'listener_enabled': False,
    'listener_model': 'gpt-5-nano',
}

DEFAULT_YAML = """
# MINI-MUD CONFIGURATION
# ----------------------
# world: directory holding manifest.yaml, rooms.yaml and items.yaml
# listener_enabled: map free-form input to commands with OpenAI
# (needs OPENAI_API_KEY in .env)

world: data/worlds/cave
save_file: save.json
debug_mode: false
listener_enabled: false
listener_model: gpt-5-nano
"""


def load_config(config_path=CONFIG_FILE):
    """
    Loads config.yaml or creates default if missing.
    Missing keys fall back to DEFAULTS.
    """
    if not os.path.exists(config_path):
        logger.info("Writing default configuration to %s", config_path)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_YAML.strip() + "\n")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error de sintaxis YAML en {config_path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{config_path} debe ser un mapa de opciones")

    config = dict(DEFAULTS)
    config.update(loaded)
    return config


def load_env(env_path=None):
    """Reads .env into os.environ without overriding variables already set."""
    return load_dotenv(env_path, override=False)
