"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from duplicity_front.command import Invocation
from duplicity_front.errors import SubprocessFailedError


class RecordingRunner:
    """Records invocations instead of spawning them.

    Any invocation with an argument listed in `fail_on` fails as if
    duplicity exited with status 1.
    """

    def __init__(self, fail_on: tuple[str, ...] = ()) -> None:
        self.calls: list[Invocation] = []
        self.fail_on = fail_on

    def run(self, invocation: Invocation) -> None:
        self.calls.append(invocation)
        if any(arg in self.fail_on for arg in invocation.args):
            raise SubprocessFailedError(invocation, 1)

    @property
    def argvs(self) -> list[list[str]]:
        return [call.argv for call in self.calls]


@pytest.fixture
def logger() -> logging.Logger:
    test_logger = logging.getLogger("duplicity_front.tests")
    test_logger.setLevel(logging.DEBUG)
    return test_logger


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a sample valid configuration with nested groups."""
    return """
everything:
  sub_repositories:
    - documents
    - media

documents:
  sub_repositories:
    - notes
    - mail

notes:
  source: ~/notes
  remote: ssh://backup@host//notes
  exclude:
    - ~/notes/.cache

mail:
  source: ~/mail
  remote: ssh://backup@host//mail
  passphrase: hunter2
  remove_older_than: 30D

media:
  sudo: true
  source: /srv/media
  remote: ssh://backup@host//media
  volsize: 500
"""


@pytest.fixture
def config_file(tmp_path: Path, sample_config_yaml: str) -> Path:
    config_path = tmp_path / "duplicity-front.yml"
    config_path.write_text(sample_config_yaml, encoding="utf-8")
    config_path.chmod(0o600)
    return config_path
