"""Application configuration for the translation sync tools."""
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import jsonschema
import yaml
from dotenv import load_dotenv

from translation_sync.logging_config import setup_logger
from translation_sync.models import LocalePairing

# Shape of the `project_options_pairs` table: options id -> source and target locales.
PROJECT_OPTIONS_PAIRS_SCHEMA = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "properties": {
            "source": {"type": "string", "minLength": 1},
            "targets": {
                "type": "array",
                "items": {"type": "string", "minLength": 1}
            }
        },
        "required": ["source", "targets"]
    }
}


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    project_root: str
    extracted_folder: str
    job_ledger_path: str

    # Vendor project options
    project_options_id: Optional[str]
    project_options_pairs: Dict[str, LocalePairing]

    # Locale slugs enabled on the host platform
    host_locales: List[str] = field(default_factory=list)

    @property
    def pairing(self) -> LocalePairing:
        """Pairing of the active project options; an empty pairing when none is configured."""
        if self.project_options_id is None:
            return LocalePairing(source="")
        return self.project_options_pairs.get(self.project_options_id, LocalePairing(source=""))


def _compute_project_root() -> str:
    """Compute the project root directory."""
    script_real_path = os.path.realpath(__file__)
    script_dir = os.path.dirname(script_real_path)
    return os.path.abspath(os.path.join(script_dir, os.pardir))


def _load_dotenv_files(project_root: str) -> None:
    """Load .env files from project root or docker directory."""
    dotenv_path_project_root = os.path.join(project_root, '.env')
    dotenv_path_docker_dir = os.path.join(project_root, 'docker', '.env')

    if os.path.exists(dotenv_path_project_root):
        load_dotenv(dotenv_path_project_root)
    elif os.path.exists(dotenv_path_docker_dir):
        load_dotenv(dotenv_path_docker_dir)


def _load_yaml_config(project_root: str) -> Dict[str, Any]:
    """
    Read the YAML configuration as a plain dict.

    The file is `config.yaml` in the project root unless
    TRANSLATION_SYNC_CONFIG_FILE names another one. The logger is not set up
    yet at this point (its settings live in this very file), so problems are
    reported on stderr. A missing, unreadable, empty or non-mapping file, as
    well as invalid YAML, yields an empty dict and the defaults apply.
    """
    default_config_path = os.path.join(project_root, 'config.yaml')
    config_file = os.environ.get('TRANSLATION_SYNC_CONFIG_FILE', default_config_path)

    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)

    config = {}
    try:
        if not os.path.exists(config_file):
            print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                  file=sys.stderr)
            print(f"Tip: Create a config.yaml file in '{project_root}' or set TRANSLATION_SYNC_CONFIG_FILE.",
                  file=sys.stderr)
            return config

        if not os.access(config_file, os.R_OK):
            print(f"Error: Configuration file '{config_file}' exists but is not readable. Check file permissions.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
            if loaded_config is None:
                print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                      file=sys.stderr)
            elif isinstance(loaded_config, dict):
                config = loaded_config
            else:
                print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                      file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _setup_logger_from_config(config: Dict[str, Any]) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = config.get('logging', {})
    log_level_str = log_config.get('log_level', 'INFO').upper()
    log_file_path = log_config.get('log_file_path', 'logs/translation_sync.log')
    log_to_console = log_config.get('log_to_console', True)
    return setup_logger(log_level_str, log_file_path, log_to_console)


def _build_pairings(raw_pairs: Any, logger: logging.Logger) -> Dict[str, LocalePairing]:
    """Validate the pairing table and turn it into LocalePairing values."""
    try:
        jsonschema.validate(instance=raw_pairs, schema=PROJECT_OPTIONS_PAIRS_SCHEMA)
    except jsonschema.ValidationError as e:
        logger.critical("CRITICAL: Invalid 'project_options_pairs' configuration: %s", e.message)
        logger.critical("Each entry needs a 'source' locale and a list of 'targets'.")
        sys.exit(1)

    return {
        str(options_id): LocalePairing(source=entry['source'], targets=tuple(entry['targets']))
        for options_id, entry in raw_pairs.items()
    }


def _parse_host_locales(config: Dict[str, Any]) -> List[str]:
    from_env = os.environ.get('HOST_LOCALES')
    if from_env:
        return [locale.strip().lower() for locale in from_env.split(',') if locale.strip()]
    return [str(locale).lower() for locale in config.get('host_locales', [])]


def load_app_config() -> AppConfig:
    """
    Load application configuration from YAML file and environment variables.

    Returns:
        AppConfig: The loaded application configuration.
    """
    project_root = _compute_project_root()
    _load_dotenv_files(project_root)
    config = _load_yaml_config(project_root)

    logger = _setup_logger_from_config(config)

    pairs = _build_pairings(config.get('project_options_pairs') or {}, logger)

    project_options_id = os.environ.get('SDL_PROJECT_OPTIONS_ID', config.get('project_options_id'))
    if project_options_id is not None:
        project_options_id = str(project_options_id)
        if project_options_id not in pairs:
            logger.warning("Project options '%s' has no configured language pairing.", project_options_id)

    host_locales = _parse_host_locales(config)
    if not host_locales:
        logger.warning("No host locales configured; quick translation will not be offered.")

    logger.info("Loaded configuration with %d project options pairing(s).", len(pairs))

    return AppConfig(
        project_root=project_root,
        extracted_folder=config.get('extracted_folder', os.path.join(project_root, 'extracted')),
        job_ledger_path=config.get('job_ledger_path', os.path.join(project_root, 'jobs.json')),
        project_options_id=project_options_id,
        project_options_pairs=pairs,
        host_locales=host_locales,
    )
