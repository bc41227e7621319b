import yaml
from pathlib import Path
import os
import re
import logging

_ENV_PLACEHOLDER = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _expand_env(value):
    """Replace ``${VAR}`` / ``${VAR:-default}`` placeholders from the environment."""
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    if not isinstance(value, str):
        return value

    def _sub(match):
        name, default = match.group(1), match.group(2)
        env_val = os.getenv(name)
        if env_val is None:
            if default is None:
                logging.warning(f"{name} environment variable is referenced in settings.yaml but not set.")
                return ""
            return default
        return env_val

    expanded = _ENV_PLACEHOLDER.sub(_sub, value)
    # A value that was nothing but an unset placeholder becomes None
    if expanded == "" and _ENV_PLACEHOLDER.fullmatch(value):
        return None
    return expanded


def load_config():
    """Load configuration from settings.yaml located in the package directory.

    ``SQLSHIFT_SETTINGS`` may point to an alternative settings file.
    """
    settings_path = None
    try:
        package_dir = Path(__file__).parent.parent
        project_root = package_dir.parent

        settings_path = Path(os.getenv("SQLSHIFT_SETTINGS") or package_dir / 'settings.yaml')

        if not settings_path.exists():
            logging.error(f"Critical: settings.yaml not found at expected path: {settings_path}")
            raise FileNotFoundError(f"settings.yaml not found at {settings_path}")

        with open(settings_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f)

        if not config_data:
            config_data = {}
            logging.warning(f"settings.yaml at {settings_path} is empty or invalid.")

        config_data = _expand_env(config_data)

        # Ensure base_dirs paths are absolute, resolved from project_root
        resolved_base_dirs = {}
        if 'base_dirs' in config_data:
            for key, path_str in config_data['base_dirs'].items():
                if isinstance(path_str, str) and not os.path.isabs(path_str):
                    resolved_base_dirs[key] = str((project_root / path_str).resolve())
                else:
                    resolved_base_dirs[key] = path_str
            config_data['base_dirs'] = resolved_base_dirs
        else:
            logging.info("'base_dirs' not found in settings.yaml.")
            config_data['base_dirs'] = {}

        return config_data

    except FileNotFoundError as fnfe:
        logging.error(f"Configuration Error: {fnfe}", exc_info=True)
        raise
    except Exception as e:
        logging.error(f"Error loading configuration from {settings_path or 'unknown path'}: {e}", exc_info=True)
        raise Exception(f"Failed to load application configuration: {e}") from e


# Load config at import time
try:
    config = load_config()
except Exception as e:
    logging.critical(f"CRITICAL FAILURE: Could not load application settings. Error: {e}", exc_info=True)
    raise SystemExit(f"Application cannot start due to configuration load failure: {e}")
