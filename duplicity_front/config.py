# Stdlib imports
import logging
import os
import pathlib
import stat
import typing

# Vendor imports
import pydantic
import yaml

# Local imports
from . import model
from .errors import ConfigError, ConfigParseError

# Default configuration file path exists in the user's config dir
default_config_path = pathlib.Path("~/.config/duplicity-front.yml")


def check_permissions(config_path: pathlib.Path, logger: logging.Logger) -> None:
    """Warn when anyone but the owner can access the file (POSIX only)."""
    if os.name != "posix":
        return

    try:
        mode = config_path.stat().st_mode
    except OSError as err:
        raise ConfigError(f"Error when getting config permissions: {err}") from err

    if stat.S_IMODE(mode) & 0o077:
        logger.warning(
            "It is recommended that your configuration file be not readable to anyone except for the user."
        )


def parse_config(stream: typing.Union[str, typing.IO[str]]) -> model.Configuration:
    """Parse YAML into a configuration and check that it is sane."""
    try:
        parsed = yaml.load(stream, yaml.SafeLoader)
    except yaml.YAMLError as err:
        raise ConfigParseError(
            f"Error when parsing configuration file: {err}"
        ) from err

    # An empty document is an empty configuration
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ConfigParseError(
            "Error when parsing configuration file: the top level must map repository names to repositories."
        )

    try:
        instance = model.Configuration(repositories=parsed)
    except pydantic.ValidationError as err:
        raise ConfigParseError(
            f"Error when parsing configuration file: {err}"
        ) from err

    instance.check()
    return instance


# Return the config values in the config file
def load_config_values(
    config_path: pathlib.Path,
    logger: logging.Logger,
) -> model.Configuration:
    # Resolve the path string to a path object
    config_path = config_path.expanduser()
    logger.info("Loading configuration from file: %s", config_path)

    if not config_path.is_file():
        raise ConfigError(f"Configuration file not found: {config_path}")

    check_permissions(config_path, logger)

    # Open and decode the config file
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            instance = parse_config(handle)
    except OSError as err:
        raise ConfigError(
            f"Error when opening configuration file: {err}"
        ) from err

    logger.debug("Loaded %d repositories", len(instance.repositories))
    return instance
