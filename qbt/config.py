# qbt/config.py - environment driven settings for the command line
import os

from dotenv import find_dotenv, load_dotenv

from .exceptions import ParameterError

FALLBACK_CONFIG = {
    "QBT_HOST": "localhost:8080",
    "QBT_USERNAME": "admin",
    "QBT_PASSWORD": "",
    "QBT_TIMEOUT": "10.0",
    "LOG_LEVEL": "INFO",
}


def load_config(env_file=None) -> dict:
    """
    Builds the settings dict: fallback values, overridden by the environment.

    A .env file (the given one, or the first found walking up from the
    working directory) is loaded first without overriding variables that
    are already set.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    config = FALLBACK_CONFIG.copy()
    env_config = {key: os.getenv(key) for key in config.keys() if os.getenv(key) is not None}
    config.update(env_config)

    try:
        config["QBT_TIMEOUT"] = float(config["QBT_TIMEOUT"])
    except ValueError as e:
        raise ParameterError(f"QBT_TIMEOUT must be a number, got {config['QBT_TIMEOUT']!r}") from e
    config["LOG_LEVEL"] = config["LOG_LEVEL"].upper()
    return config
