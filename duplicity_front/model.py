### stdlib imports
import dataclasses
import enum
import typing

### vendor imports
import pydantic

### local imports
from .errors import ConfigInvariantError, RepositoryNotFoundError


class FlagKind(enum.Enum):
    SWITCH = "switch"
    VALUE = "value"
    LIST = "list"
    PAIR = "pair"


@dataclasses.dataclass(frozen=True)
class FlagDescriptor:
    """Maps one repository field onto the duplicity flag of the same name."""

    field: str
    kind: FlagKind

    @property
    def flag(self) -> str:
        return "--" + self.field.replace("_", "-")

    def emit(self, value: typing.Any) -> typing.Iterator[str]:
        if self.kind is FlagKind.SWITCH:
            if value:
                yield self.flag
        elif self.kind is FlagKind.VALUE:
            if value is not None:
                yield self.flag
                yield str(value)
        elif self.kind is FlagKind.LIST:
            for entry in value:
                yield self.flag
                yield str(entry)
        elif self.kind is FlagKind.PAIR:
            for first, second in value:
                yield self.flag
                yield str(first)
                yield str(second)


def _flags(kind: FlagKind, *fields: str) -> list[FlagDescriptor]:
    return [FlagDescriptor(field, kind) for field in fields]


SWITCH = FlagKind.SWITCH
VALUE = FlagKind.VALUE
LIST = FlagKind.LIST
PAIR = FlagKind.PAIR

# Emission order of every pass-through flag. Inclusions come first, then
# exclusions, then everything else. Changing this order changes the command
# lines handed to duplicity.
FLAG_ORDER: tuple[FlagDescriptor, ...] = (
    # Inclusions
    *_flags(LIST, "include", "include_filelist", "include_regexp"),
    # Exclusions
    *_flags(LIST, "exclude"),
    *_flags(SWITCH, "exclude_device_files"),
    *_flags(LIST, "exclude_filelist", "exclude_if_present"),
    *_flags(VALUE, "exclude_older_than"),
    *_flags(SWITCH, "exclude_other_filesystems"),
    *_flags(LIST, "exclude_regexp"),
    # Everything else
    *_flags(SWITCH, "asynchronous_upload"),
    *_flags(VALUE, "backend_retry_delay"),
    *_flags(SWITCH, "compare_data", "copy_links"),
    *_flags(
        VALUE,
        "encrypt_key",
        "encrypt_secret_keyring",
        "encrypt_sign_key",
        "file_prefix",
        "file_prefix_manifest",
        "file_prefix_archive",
        "file_prefix_signature",
        "full_if_older_than",
    ),
    *_flags(SWITCH, "ftp_passive", "ftp_regular", "gio"),
    *_flags(
        VALUE,
        "hidden_encrypt_key",
        "imap_full_address",
        "imap_mailbox",
        "gpg_binary",
        "gpg_options",
        "log_file",
        "max_blocksize",
        "name",
    ),
    *_flags(
        SWITCH,
        "no_compression",
        "no_encryption",
        "no_print_statistics",
        "null_separator",
        "numeric_owner",
    ),
    *_flags(VALUE, "num_retries"),
    *_flags(SWITCH, "old_filenames"),
    *_flags(VALUE, "par2_options", "par2_redundancy"),
    *_flags(SWITCH, "progress"),
    *_flags(VALUE, "progress_rate"),
    *_flags(PAIR, "rename"),
    *_flags(VALUE, "rsync_options"),
    *_flags(SWITCH, "short_filenames"),
    *_flags(VALUE, "sign_key"),
    *_flags(SWITCH, "ssh_askpass"),
    *_flags(VALUE, "ssh_options", "tempdir", "time_separator", "timeout"),
    *_flags(SWITCH, "use_agent"),
    *_flags(VALUE, "volsize"),
)


# Quoted numbers and other non-integers are rejected rather than converted
Count = typing.Optional[
    typing.Annotated[pydantic.StrictInt, pydantic.Field(ge=0)]
]


class Repository(pydantic.BaseModel):
    """All the options of a single repository.

    Most fields are duplicity flags passed through verbatim by
    `construct_flags`. A repository either lists `sub_repositories` (a group)
    or has both a `source` and a `remote` (a leaf). Parsing a repository does
    not check this; call `check` for that.
    """

    model_config = pydantic.ConfigDict(
        extra="forbid", frozen=True, coerce_numbers_to_str=True
    )

    ### Custom options ###
    sub_repositories: list[str] = []
    sudo: pydantic.StrictBool = False
    passphrase: typing.Optional[str] = None

    ### Positional arguments ###
    source: typing.Optional[str] = None
    remote: typing.Optional[str] = None

    ### Retention, applied after a successful backup ###
    remove_older_than: typing.Optional[str] = None
    remove_all_but_n_full: Count = None
    remove_all_inc_of_but_n_full: Count = None

    ### Include/exclude fields ###
    include: list[str] = []
    include_filelist: list[str] = []
    include_regexp: list[str] = []
    exclude: list[str] = []
    exclude_device_files: pydantic.StrictBool = False
    exclude_filelist: list[str] = []
    exclude_if_present: list[str] = []
    exclude_older_than: typing.Optional[str] = None
    exclude_other_filesystems: pydantic.StrictBool = False
    exclude_regexp: list[str] = []

    ### Remaining duplicity flags ###
    asynchronous_upload: pydantic.StrictBool = False
    backend_retry_delay: Count = None
    compare_data: pydantic.StrictBool = False
    copy_links: pydantic.StrictBool = False
    encrypt_key: typing.Optional[str] = None
    encrypt_secret_keyring: typing.Optional[str] = None
    encrypt_sign_key: typing.Optional[str] = None
    file_prefix: typing.Optional[str] = None
    file_prefix_manifest: typing.Optional[str] = None
    file_prefix_archive: typing.Optional[str] = None
    file_prefix_signature: typing.Optional[str] = None
    full_if_older_than: typing.Optional[str] = None
    ftp_passive: pydantic.StrictBool = False
    ftp_regular: pydantic.StrictBool = False
    gio: pydantic.StrictBool = False
    hidden_encrypt_key: typing.Optional[str] = None
    imap_full_address: typing.Optional[str] = None
    imap_mailbox: typing.Optional[str] = None
    gpg_binary: typing.Optional[str] = None
    gpg_options: typing.Optional[str] = None
    log_file: typing.Optional[str] = None
    max_blocksize: Count = None
    name: typing.Optional[str] = None
    no_compression: pydantic.StrictBool = False
    no_encryption: pydantic.StrictBool = False
    no_print_statistics: pydantic.StrictBool = False
    null_separator: pydantic.StrictBool = False
    numeric_owner: pydantic.StrictBool = False
    num_retries: Count = None
    old_filenames: pydantic.StrictBool = False
    par2_options: typing.Optional[str] = None
    par2_redundancy: Count = None
    progress: pydantic.StrictBool = False
    progress_rate: Count = None
    rename: list[tuple[str, str]] = []
    rsync_options: typing.Optional[str] = None
    short_filenames: pydantic.StrictBool = False
    sign_key: typing.Optional[str] = None
    ssh_askpass: pydantic.StrictBool = False
    ssh_options: typing.Optional[str] = None
    tempdir: typing.Optional[str] = None
    time_separator: typing.Optional[str] = pydantic.Field(
        None, min_length=1, max_length=1
    )
    timeout: Count = None
    use_agent: pydantic.StrictBool = False
    volsize: Count = None

    def has_sub_repositories(self) -> bool:
        return len(self.sub_repositories) > 0

    @property
    def is_leaf(self) -> bool:
        return self.source is not None and self.remote is not None

    def check(self) -> None:
        """Raise a `ConfigInvariantError` describing the first inconsistency."""
        has_source = self.source is not None
        has_remote = self.remote is not None
        has_subs = self.has_sub_repositories()

        if not has_source and not has_remote:
            if not has_subs:
                raise ConfigInvariantError(
                    "Repository must either specify both a source and a remote, or list sub-repositories."
                )
            return

        if has_source != has_remote:
            if has_subs:
                raise ConfigInvariantError(
                    "Both source and remote must be simultaneously specified, and sub-repositories cannot be simultaneously listed."
                )
            raise ConfigInvariantError(
                "Both source and remote must be simultaneously specified."
            )

        if has_subs:
            raise ConfigInvariantError(
                "Sub-repositories cannot be simultaneously specified with source and remote."
            )

    def construct_flags(self) -> list[str]:
        flags: list[str] = []
        for descriptor in FLAG_ORDER:
            flags.extend(descriptor.emit(getattr(self, descriptor.field)))
        return flags

    def serialize(self) -> dict[str, typing.Any]:
        """Return only the fields that differ from their defaults."""
        return self.model_dump(mode="json", exclude_defaults=True)


class Configuration(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        extra="forbid", frozen=True, coerce_numbers_to_str=True
    )

    repositories: dict[str, Repository] = {}

    def get_repository(self, name: str) -> Repository:
        if (repository := self.repositories.get(name, None)) is None:
            raise RepositoryNotFoundError(name)
        return repository

    def check(self) -> None:
        """Check every repository, then the references between them.

        Stops at the first problem found.
        """
        for name, repository in self.repositories.items():
            try:
                repository.check()
            except ConfigInvariantError as err:
                raise ConfigInvariantError(
                    f"Error in repository {name}: {err}"
                ) from err

        self.check_references()

    def check_references(self) -> None:
        """Check that sub-repositories exist and never lead back to their parent."""
        for name, repository in self.repositories.items():
            for sub_name in repository.sub_repositories:
                if sub_name not in self.repositories:
                    raise ConfigInvariantError(
                        f"Repository {name} lists {sub_name} as a sub-repository, but it could not be located within config file."
                    )

        self._check_cycles()

    def _check_cycles(self) -> None:
        finished: set[str] = set()

        def visit(name: str, path: list[str]) -> None:
            if name in path:
                cycle = " -> ".join(path[path.index(name) :] + [name])
                raise ConfigInvariantError(
                    f"Repository {name} has a cyclic sub-repository reference: {cycle}"
                )
            if name in finished:
                return
            for sub_name in self.repositories[name].sub_repositories:
                visit(sub_name, path + [name])
            finished.add(name)

        for name in self.repositories:
            visit(name, [])
