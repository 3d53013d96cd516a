"""The duplicity actions that can be run against a leaf repository.

Each operation turns a repository into the argument lists of the duplicity
commands it needs, in the order they must run. The executable, `sudo` and
`--dry-run` handling is left to the orchestrator.
"""

### stdlib imports
import abc
import dataclasses
import typing

### local imports
from . import model


class Operation(abc.ABC):
    name: typing.ClassVar[str]

    @abc.abstractmethod
    def arguments(self, repository: model.Repository) -> list[list[str]]:
        ...


@dataclasses.dataclass(frozen=True)
class Backup(Operation):
    name: typing.ClassVar[str] = "backup"

    def arguments(self, repository: model.Repository) -> list[list[str]]:
        assert repository.source is not None and repository.remote is not None
        remote = repository.remote

        commands = [
            [*repository.construct_flags(), repository.source, remote]
        ]

        # Retention is only applied once the backup itself has succeeded
        if repository.remove_older_than is not None:
            commands.append(
                ["remove_older_than", repository.remove_older_than, "--force", remote]
            )
        if repository.remove_all_inc_of_but_n_full is not None:
            commands.append(
                [
                    "remove-all-inc-of-but-n-full",
                    str(repository.remove_all_inc_of_but_n_full),
                    "--force",
                    remote,
                ]
            )
        if repository.remove_all_but_n_full is not None:
            commands.append(
                [
                    "remove-all-but-n-full",
                    str(repository.remove_all_but_n_full),
                    "--force",
                    remote,
                ]
            )

        return commands


@dataclasses.dataclass(frozen=True)
class Verify(Operation):
    name: typing.ClassVar[str] = "verify"

    compare_data: bool = False
    time: typing.Optional[str] = None
    file_to_restore: typing.Optional[str] = None

    def arguments(self, repository: model.Repository) -> list[list[str]]:
        assert repository.remote is not None
        args = ["verify"]
        if self.compare_data:
            args.append("--compare-data")
        if self.time is not None:
            args += ["--time", self.time]
        if self.file_to_restore is not None:
            args += ["--file-to-restore", self.file_to_restore]
        return [[*args, repository.remote]]


@dataclasses.dataclass(frozen=True)
class CollectionStatus(Operation):
    name: typing.ClassVar[str] = "collection-status"

    file_changed: typing.Optional[str] = None

    def arguments(self, repository: model.Repository) -> list[list[str]]:
        assert repository.remote is not None
        args = ["collection-status"]
        if self.file_changed is not None:
            args += ["--file-changed", self.file_changed]
        return [[*args, repository.remote]]


@dataclasses.dataclass(frozen=True)
class ListCurrentFiles(Operation):
    name: typing.ClassVar[str] = "list-current-files"

    time: typing.Optional[str] = None

    def arguments(self, repository: model.Repository) -> list[list[str]]:
        assert repository.remote is not None
        args = ["list-current-files"]
        if self.time is not None:
            args += ["--time", self.time]
        return [[*args, repository.remote]]


@dataclasses.dataclass(frozen=True)
class Cleanup(Operation):
    name: typing.ClassVar[str] = "cleanup"

    force: bool = False
    extra_clean: bool = False

    def arguments(self, repository: model.Repository) -> list[list[str]]:
        assert repository.remote is not None
        args = ["cleanup"]
        if self.force:
            args.append("--force")
        if self.extra_clean:
            args.append("--extra-clean")
        return [[*args, repository.remote]]
