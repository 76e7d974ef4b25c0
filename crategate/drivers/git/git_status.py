"""Working-tree status via ``git status --porcelain``.

The checker never raises for git problems: a missing git binary, a
directory outside any repository, or a timeout all become
``RepoStatus.unavailable`` so that the absence of version control cannot
prevent publishing.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from crategate.kernel.domain.models import RepoStatus
from crategate.kernel.logging import get_logger

logger = get_logger(__name__)

_STATUS_ARGS = ("status", "--porcelain")


def parse_porcelain(output: str) -> list[str]:
    """Extract changed paths from ``git status --porcelain`` (v1) output.

    Each line is ``XY <path>``; renames and copies are ``XY <old> -> <new>``
    and report the new path.

    Examples
    --------
    >>> parse_porcelain(" M src/lib.rs\\nR  a.rs -> b.rs\\n?? notes.txt\\n")
    ['src/lib.rs', 'b.rs', 'notes.txt']
    """
    paths = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        paths.append(path.strip().strip('"'))
    return paths


class GitStatusChecker:
    """Classifies the working tree of a project directory.

    Parameters
    ----------
    cwd : str | Path | None
        Directory to run git in (defaults to the current directory)
    timeout : float
        Seconds to wait for git before reporting the status as unavailable
    git_executable : str
        Name or path of the git binary
    """

    def __init__(
        self,
        cwd: str | Path | None = None,
        timeout: float = 10.0,
        git_executable: str = "git",
    ) -> None:
        self._cwd = Path(cwd) if cwd else Path.cwd()
        self._timeout = timeout
        self._git = git_executable

    async def acheck(self) -> RepoStatus:
        """Run the status query and classify its output."""
        if shutil.which(self._git) is None:
            logger.debug("git executable {git!r} not found", git=self._git)
            return RepoStatus.unavailable(f"'{self._git}' not found on PATH")

        try:
            process = await asyncio.create_subprocess_exec(
                self._git,
                *_STATUS_ARGS,
                cwd=self._cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return RepoStatus.unavailable(f"could not run git: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self._timeout)
        except TimeoutError:
            process.kill()
            await process.wait()
            logger.warning("git status timed out after {timeout}s", timeout=self._timeout)
            return RepoStatus.unavailable(f"git status timed out after {self._timeout}s")

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip().splitlines()
            reason = message[0] if message else f"git exited with status {process.returncode}"
            logger.debug("git status failed: {reason}", reason=reason)
            return RepoStatus.unavailable(reason)

        paths = parse_porcelain(stdout.decode(errors="replace"))
        if not paths:
            return RepoStatus.clean()
        logger.debug("Working tree has {count} changed paths", count=len(paths))
        return RepoStatus.dirty(paths)
