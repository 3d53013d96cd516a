# Stdlib imports
import dataclasses
import logging
import pathlib
import typing

# Vendor imports
import typer

# Local imports
from . import command, config as applicationConfig, errors, helper, model, operation
from .orchestrator import Orchestrator


@dataclasses.dataclass
class CLIState:
    config_path: pathlib.Path
    logger: logging.Logger
    dry_run: bool = False
    _config: typing.Optional[model.Configuration] = dataclasses.field(
        default=None, repr=False
    )

    @property
    def config(self) -> model.Configuration:
        # Loaded on first use so that subcommand help never needs a config file.
        # The whole file is still validated before any command runs.
        if self._config is None:
            try:
                self._config = applicationConfig.load_config_values(
                    self.config_path, self.logger
                )
            except errors.DuplicityFrontError as err:
                helper.print_error(f"Error when loading configuration: {err}")
        return self._config


# Create a subclass of the context with correct typing of the state object
class FrontCLIContext(typer.Context):
    obj: CLIState


# Initialize the typer app
cli = typer.Typer(
    help="A front end to the duplicity backup utility, providing support for pre-configured repositories defined in a YAML file. It is advisable to first use '--dry-run' to ensure nothing unexpected happens before making permanent changes.",
    no_args_is_help=True,
)


# Main method that sets up logging and the configuration for all commands
@cli.callback()
def cli_main(
    ctx: FrontCLIContext,
    config: pathlib.Path = typer.Option(
        applicationConfig.default_config_path,
        "--config",
        "-c",
        envvar="DUPLICITY_FRONT_CONFIG",
        help="Configuration file containing information about backup repositories.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase the verbosity of messages written to stderr. Can be specified multiple times.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run/",
        "-n/",
        help="Perform a run and calculate what will be changed, but take no action.",
    ),
):
    ctx.obj = CLIState(
        config_path=config, logger=helper.create_logger(verbose), dry_run=dry_run
    )


def execute(ctx: FrontCLIContext, op: operation.Operation, name: str) -> None:
    state = ctx.obj
    orchestrator = Orchestrator(
        state.config,
        command.ProcessRunner(state.logger),
        state.logger,
        dry_run=state.dry_run,
    )

    try:
        orchestrator.execute(op, name)
    except errors.DuplicityFrontError as err:
        helper.print_error(str(err))


def repository_argument() -> typing.Any:
    return typer.Argument(
        ..., help="Repository to use, as set in the configuration file."
    )


@cli.command(
    name="backup",
    help="Backup the specified repository. Repositories listing sub-repositories run them in the order they are listed. If the repository has any of the 'remove_older_than', 'remove_all_inc_of_but_n_full' or 'remove_all_but_n_full' options, a successful backup is followed by the matching duplicity command.",
)
def cli_backup(
    ctx: FrontCLIContext,
    name: str = repository_argument(),
):
    execute(ctx, operation.Backup(), name)


@cli.command(
    name="verify",
    help="Verify the backup against the original files. See duplicity's manual for more information about the options.",
)
def cli_verify(
    ctx: FrontCLIContext,
    name: str = repository_argument(),
    compare_data: bool = typer.Option(
        False,
        "--compare-data/",
        help="Enables data comparison (refer to duplicity manual).",
    ),
    time: typing.Optional[str] = typer.Option(
        None,
        "--time",
        metavar="TIME",
        help="Selects a backup to verify against instead of the latest (refer to duplicity manual).",
    ),
    file_to_restore: typing.Optional[str] = typer.Option(
        None,
        "--file-to-restore",
        metavar="RELPATH",
        help="Restrict verify to that file or folder (refer to duplicity manual).",
    ),
):
    execute(
        ctx,
        operation.Verify(
            compare_data=compare_data, time=time, file_to_restore=file_to_restore
        ),
        name,
    )


@cli.command(
    name="collection-status",
    help="Summarize the status of the backup repository by printing the chains and sets found, and the number of volumes in each.",
)
def cli_collection_status(
    ctx: FrontCLIContext,
    name: str = repository_argument(),
    file_changed: typing.Optional[str] = typer.Option(
        None,
        "--file-changed",
        metavar="RELPATH",
        help="Collect the status of this path only instead of the entire contents of the backup archive (refer to duplicity manual).",
    ),
):
    execute(ctx, operation.CollectionStatus(file_changed=file_changed), name)


@cli.command(
    name="list-current-files", help="List the files contained in the backup."
)
def cli_list_current_files(
    ctx: FrontCLIContext,
    name: str = repository_argument(),
    time: typing.Optional[str] = typer.Option(
        None,
        "--time",
        metavar="TIME",
        help="Selects a backup to list files from instead of the latest (refer to duplicity manual).",
    ),
):
    execute(ctx, operation.ListCurrentFiles(time=time), name)


@cli.command(
    name="cleanup",
    help="Delete extraneous duplicity files in the backup location. Non-duplicity files and files in complete data sets will not be deleted. This should only be necessary after a duplicity session fails or is aborted. Note that '--force' is required to actually delete the files instead of just listing them.",
)
def cli_cleanup(
    ctx: FrontCLIContext,
    name: str = repository_argument(),
    force: bool = typer.Option(
        False,
        "--force/",
        help="Delete the files instead of just listing them (refer to duplicity manual).",
    ),
    extra_clean: bool = typer.Option(
        False,
        "--extra-clean/",
        help="USE WITH CAUTION. When cleaning up, be more aggressive about saving space (refer to duplicity manual).",
    ),
):
    execute(ctx, operation.Cleanup(force=force, extra_clean=extra_clean), name)


@cli.command(
    name="list",
    help="List all repositories defined in the configuration file.",
)
def cli_list(ctx: FrontCLIContext):
    config = ctx.obj.config

    helper.print("Repositories:")
    for name, repository in config.repositories.items():
        if repository.has_sub_repositories():
            helper.print_kv(f"  - {name}", ", ".join(repository.sub_repositories))
        else:
            helper.print_kv(
                f"  - {name}", f"{repository.source} -> {repository.remote}"
            )


@cli.command(
    name="show",
    help="Print the configuration of a repository. The passphrase, if any, is masked.",
)
def cli_show(
    ctx: FrontCLIContext,
    name: str = repository_argument(),
):
    config = ctx.obj.config

    try:
        repository = config.get_repository(name)
    except errors.RepositoryNotFoundError as err:
        helper.print_error(str(err))

    helper.print_line(f"Repository: {name}")
    helper.print_config_data(helper.masked_repository_data(repository))
