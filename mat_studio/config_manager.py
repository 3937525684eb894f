import json
import logging
import os

log = logging.getLogger(__name__)

# We define the file name here
CONFIG_FILE = "config.json"


def load_config(path=None):
    config_path = path or os.path.join(os.path.dirname(os.path.abspath(__file__)), CONFIG_FILE)
    try:
        with open(config_path, 'r', encoding='utf-8') as file:
            return json.load(file)

    except FileNotFoundError:
        log.error("config file not found: %s", config_path)
        return None
    except json.JSONDecodeError as e:
        log.error("config file is not valid JSON (%s): %s", config_path, e)
        return None


CONFIG = load_config()


def app_setting(key, default=None):
    """Read one value from the app_settings block, tolerating a missing config."""
    if not CONFIG:
        return default
    return CONFIG.get('app_settings', {}).get(key, default)
