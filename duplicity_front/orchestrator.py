### stdlib imports
import logging
import typing

### local imports
from . import model
from .command import Invocation, duplicity_invocation
from .operation import Operation


class RunnerProtocol(typing.Protocol):
    def run(self, invocation: Invocation) -> None:
        ...


class Orchestrator:
    """Walks a repository and its sub-repositories, running an operation on
    every leaf in declaration order.

    The first error aborts the whole walk: later siblings and any pending
    retention steps are skipped.
    """

    def __init__(
        self,
        config: model.Configuration,
        runner: RunnerProtocol,
        logger: logging.Logger,
        dry_run: bool = False,
    ):
        self.config = config
        self.runner = runner
        self.logger = logger
        self.dry_run = dry_run

    def execute(self, operation: Operation, name: str) -> None:
        repository = self.config.get_repository(name)

        for sub_name in repository.sub_repositories:
            self.logger.debug("%s: descending into sub-repository %s", name, sub_name)
            self.execute(operation, sub_name)

        if repository.is_leaf:
            self.logger.info("Running %s on repository %s", operation.name, name)
            for invocation in self.invocations(operation, repository):
                self.runner.run(invocation)

    def invocations(
        self, operation: Operation, repository: model.Repository
    ) -> list[Invocation]:
        return [
            duplicity_invocation(repository, args, self.dry_run)
            for args in operation.arguments(repository)
        ]
