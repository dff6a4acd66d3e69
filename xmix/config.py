"""
Configuration loading for xmix.

Precedence, lowest to highest:
    1. Built-in defaults (DEFAULTS)
    2. YAML file, if given
    3. Environment: OSC_HOST, OSC_PORT, XMIX_LOG_LEVEL

Example config.yaml:

    mixer:
      host: 192.168.1.70
      port: 10024
    timeouts:
      query: 1.0
      probe: 0.5
    keepalive:
      interval: 9.0
    logging:
      level: INFO

The mixer family is never configured; it is detected at connect time.
"""

import copy
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

from xmix.osc import DEFAULT_QUERY_TIMEOUT, KEEPALIVE_INTERVAL, PORT_XAIR, PROBE_TIMEOUT

DEFAULT_HOST = "192.168.1.70"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULTS = {
    'mixer': {
        'host': DEFAULT_HOST,
        'port': PORT_XAIR,
    },
    'timeouts': {
        'query': DEFAULT_QUERY_TIMEOUT,
        'probe': PROBE_TIMEOUT,
    },
    'keepalive': {
        'interval': KEEPALIVE_INTERVAL,
    },
    'logging': {
        'level': 'INFO',
    },
}


def _merge(base: dict, override: Mapping) -> dict:
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> dict:
    """
    Load configuration from defaults, an optional YAML file and the environment.

    Args:
        path: Path to configuration YAML file (optional)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated configuration dictionary

    Raises:
        FileNotFoundError: If a named config file doesn't exist
        yaml.YAMLError: If YAML syntax is invalid
        ValueError: If configuration is invalid (via validate_config)
    """
    config = copy.deepcopy(DEFAULTS)

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Omit --config to use defaults and OSC_HOST/OSC_PORT."
            )
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(
                    f"Invalid configuration file: {path}\n"
                    f"Top level must be a mapping"
                )
            _merge(config, loaded)

    env = os.environ if environ is None else environ
    if env.get('OSC_HOST'):
        config['mixer']['host'] = env['OSC_HOST']
    if env.get('OSC_PORT'):
        try:
            config['mixer']['port'] = int(env['OSC_PORT'])
        except ValueError:
            raise ValueError(
                f"Invalid OSC_PORT: {env['OSC_PORT']!r}\n"
                f"Port must be an integer in range 1-65535"
            ) from None
    if env.get('XMIX_LOG_LEVEL'):
        config['logging']['level'] = env['XMIX_LOG_LEVEL']

    validate_config(config)

    return config


def validate_config(config: dict) -> None:
    """
    Validate a configuration dictionary.

    Validates:
    - mixer.host present and non-empty
    - mixer.port integer in range 1-65535
    - timeouts.query, timeouts.probe, keepalive.interval > 0
    - logging.level is a standard level name

    Raises:
        ValueError: If any validation fails
    """
    mixer = config.get('mixer', {})
    host = mixer.get('host')
    if not host or not isinstance(host, str):
        raise ValueError(
            "Configuration missing 'mixer.host'\n"
            "Must specify: mixer.host: <mixer IP or hostname>"
        )

    port = mixer.get('port')
    if isinstance(port, bool) or not isinstance(port, int) or not (1 <= port <= 65535):
        raise ValueError(
            f"Invalid mixer port: {port}\n"
            f"Port must be in range 1-65535 (X-Air 10024, X32 10023)"
        )

    for section, key in (('timeouts', 'query'), ('timeouts', 'probe'), ('keepalive', 'interval')):
        value = config.get(section, {}).get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValueError(
                f"Invalid {section}.{key}: {value}\n"
                f"Must be a number of seconds > 0"
            )

    level = config.get('logging', {}).get('level', 'INFO')
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ValueError(
            f"Invalid logging.level: {level}\n"
            f"Must be one of {', '.join(LOG_LEVELS)}"
        )
