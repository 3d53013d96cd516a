### stdlib imports
import typing

if typing.TYPE_CHECKING:
    from .command import Invocation


class DuplicityFrontError(Exception):
    """Base class for every error this tool reports to the user.

    The message should be clear enough to diagnose the problem without
    re-running in a verbose mode.
    """


class ConfigError(DuplicityFrontError):
    """The configuration file could not be located, read or opened."""


class ConfigParseError(ConfigError):
    """The configuration file is not valid YAML or does not match the schema."""


class ConfigInvariantError(ConfigError):
    """A repository is inconsistent, or references an unusable sub-repository."""


class RepositoryNotFoundError(DuplicityFrontError):
    def __init__(self, name: str):
        super().__init__(
            f"Repository {name} could not be loaded from the configuration."
        )
        self.name = name


class SubprocessError(DuplicityFrontError):
    def __init__(self, invocation: "Invocation", message: str):
        super().__init__(f"{message} (command: {invocation})")
        self.invocation = invocation


class SubprocessSpawnError(SubprocessError):
    def __init__(self, invocation: "Invocation", reason: str):
        super().__init__(invocation, f"Error when spawning subprocess: {reason}")


class SubprocessFailedError(SubprocessError):
    def __init__(self, invocation: "Invocation", exit_code: int):
        super().__init__(
            invocation,
            f"Subprocess encountered an error and exited with status {exit_code}",
        )
        self.exit_code = exit_code
