# Stdlib imports
import logging
import sys
import typing

# Vendor imports
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

# Local imports
from . import model

LOGGER_NAME = "duplicity-front"

VERBOSITY_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO]


def print(*args, file=None):
    Console(file=file, soft_wrap=True, emoji=False).print(*args)


def print_line(*args, file=None):
    print("-" * 8, *args, file=file)


def print_error(message: str):
    print("-" * 8, f"[red]{escape(message)}", file=sys.stderr)
    sys.exit(1)


def print_kv(key: str, value: str = ""):
    print(f"[yellow]{key}[/]: {escape(value)}")


def print_config_data(data: typing.Any):
    serialized: str = yaml.safe_dump(data, sort_keys=False)
    print("\n".join("|  " + escape(line) for line in serialized.splitlines()))


def masked_repository_data(repository: model.Repository) -> dict[str, typing.Any]:
    """Serialized repository options, safe for display."""
    data = repository.serialize()
    if "passphrase" in data:
        data["passphrase"] = "********"
    return data


def create_logger(verbosity: int) -> logging.Logger:
    """Build a logger for the given number of `-v` flags.

    The logger is not registered with the logging module, so each call
    returns an independent instance.
    """
    level = (
        VERBOSITY_LEVELS[verbosity]
        if verbosity < len(VERBOSITY_LEVELS)
        else logging.DEBUG
    )

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.Logger(LOGGER_NAME, level)
    logger.propagate = False
    logger.addHandler(handler)

    logger.debug("Verbosity set to Debug.")
    return logger
