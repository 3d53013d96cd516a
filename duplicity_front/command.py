### stdlib imports
import dataclasses
import logging
import os
import shlex
import sys
import typing

### vendor imports
import sh

### local imports
from . import model
from .errors import SubprocessFailedError, SubprocessSpawnError

DUPLICITY = "duplicity"
SUDO = "sudo"

# duplicity reads the encryption passphrase from this variable
PASSPHRASE_VAR = "PASSPHRASE"


@dataclasses.dataclass(frozen=True)
class Invocation:
    """A single command to be spawned.

    `env` only holds the variables to add to the current environment and is
    never part of the string form or repr.
    """

    executable: str
    args: tuple[str, ...]
    env: typing.Mapping[str, str] = dataclasses.field(
        default_factory=dict, repr=False
    )

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


def duplicity_invocation(
    repository: model.Repository,
    args: typing.Iterable[str],
    dry_run: bool = False,
) -> Invocation:
    # Global flags go straight after the executable
    duplicity_args = ["--dry-run", *args] if dry_run else list(args)

    if repository.sudo:
        executable = SUDO
        duplicity_args = [f"--preserve-env={PASSPHRASE_VAR}", DUPLICITY, *duplicity_args]
    else:
        executable = DUPLICITY

    env = {}
    if repository.passphrase is not None:
        env[PASSPHRASE_VAR] = repository.passphrase

    return Invocation(executable, tuple(duplicity_args), env)


def maximize_niceness():
    os.nice(20)


class ProcessRunner:
    """Runs invocations one at a time, passing their output through."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def run(self, invocation: Invocation) -> None:
        self.logger.info("command: %s", invocation)
        if invocation.env:
            self.logger.debug(
                "environment overrides: %s", ", ".join(sorted(invocation.env))
            )

        try:
            command = sh.Command(invocation.executable)
        except sh.CommandNotFound as err:
            raise SubprocessSpawnError(
                invocation, f"'{invocation.executable}' could not be found in PATH"
            ) from err

        # Start the command
        try:
            running_proc = command(
                *invocation.args,
                _preexec_fn=maximize_niceness,
                _bg=True,
                _bg_exc=False,
                _env={**os.environ, **invocation.env},
                _out=sys.stdout,
                _err=sys.stderr,
            )
        except OSError as err:
            raise SubprocessSpawnError(invocation, str(err)) from err

        # Wait for it to finish and kill it on a keyboard interrupt
        try:
            running_proc.wait()
        except sh.ErrorReturnCode as err:
            raise SubprocessFailedError(invocation, err.exit_code) from err
        except KeyboardInterrupt:
            self.logger.warning("Keyboard interrupt detected")
            if running_proc.is_alive():
                self.logger.warning("Killing the running process...")
                running_proc.kill()
            raise

        self.logger.debug("command finished: %s", invocation)
