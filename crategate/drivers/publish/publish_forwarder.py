"""Runs the underlying publish command once the gate has been passed."""

from __future__ import annotations

import subprocess  # nosec B404 - Required to run the publish command
from collections.abc import Sequence
from pathlib import Path

from crategate.kernel.config.models import PublishConfig
from crategate.kernel.exceptions import PublishCommandError
from crategate.kernel.logging import get_logger
from crategate.kernel.validation.rules import CRATES_IO

logger = get_logger(__name__)

ALLOW_DIRTY_FLAG = "--allow-dirty"


def target_registry(extra_args: Sequence[str]) -> str | None:
    """Registry name the forwarded arguments publish to.

    ``crates-io`` unless ``--registry NAME`` is passed. ``--index URL``
    addresses a registry by URL only, so no name is known and None is returned.

    Examples
    --------
    >>> target_registry(["--dry-run"])
    'crates-io'
    >>> target_registry(["--registry", "my-reg"])
    'my-reg'
    >>> target_registry(["--index=https://example.com/index"]) is None
    True
    """
    args = list(extra_args)
    for i, arg in enumerate(args):
        if arg == "--index" or arg.startswith("--index="):
            return None
        if arg.startswith("--registry="):
            return arg.partition("=")[2]
        if arg == "--registry" and i + 1 < len(args):
            return args[i + 1]
    return CRATES_IO


class PublishForwarder:
    """Invokes the real publish command and relays its exit status.

    Output is not captured: the command writes straight to the operator's
    terminal. Extra arguments are passed through verbatim.

    Parameters
    ----------
    command : Sequence[str]
        Base command, e.g. ``("cargo", "publish")``
    cwd : str | Path | None
        Directory to run the command in (the project root)
    """

    def __init__(
        self, command: Sequence[str] = ("cargo", "publish"), cwd: str | Path | None = None
    ) -> None:
        self._command = list(command)
        self._cwd = Path(cwd) if cwd else None

    @classmethod
    def from_config(cls, config: PublishConfig, cwd: str | Path | None = None) -> PublishForwarder:
        return cls(config.command, cwd=cwd)

    def build_command(self, extra_args: Sequence[str], *, allow_dirty: bool = False) -> list[str]:
        """Full argument vector for the publish command.

        ``allow_dirty`` appends ``--allow-dirty`` unless the operator already passed it.
        """
        command = [*self._command, *extra_args]
        if allow_dirty and ALLOW_DIRTY_FLAG not in extra_args:
            command.append(ALLOW_DIRTY_FLAG)
        return command

    def forward(self, extra_args: Sequence[str], *, allow_dirty: bool = False) -> int:
        """Run the publish command and return its exit status unchanged.

        Raises
        ------
        PublishCommandError
            If the command cannot be started at all
        """
        command = self.build_command(extra_args, allow_dirty=allow_dirty)
        logger.info("Running {command}", command=" ".join(command))
        try:
            # Using list format without shell=True for security
            result = subprocess.run(command, cwd=self._cwd, check=False)  # nosec B603
        except FileNotFoundError as e:
            raise PublishCommandError(command, "executable not found") from e
        except OSError as e:
            raise PublishCommandError(command, str(e)) from e

        logger.info("Publish command exited with {code}", code=result.returncode)
        return result.returncode
