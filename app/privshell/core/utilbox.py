"""Resolution of the portable utility binary (toybox, busybox, ...).

Target systems ship different implementations of the POSIX tool set. The
first candidate found via ``which`` becomes the prefix of every listing
and read command for the rest of the session. Resolution happens once
and produces an immutable :class:`UtilBox` value that is handed to
every component issuing commands.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from privshell.core.config import DEFAULT_UTILBOX_CANDIDATES
from privshell.core.errors import ShellCommandFailedError, UtilboxNotAvailableError
from privshell.core.quoting import quote
from privshell.utils.shell import ShellRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UtilBox:
    """A resolved utility binary.

    Attributes:
        name: Candidate name that resolved (e.g. "toybox").
        path: Absolute path reported by ``which``; empty for bare executables.
        quoted: Shell-quoted form of ``path``; empty for bare executables.
        version: Output of ``<path> --version``, if it could be probed.
    """

    name: str
    path: str
    quoted: str
    version: str | None = None

    @classmethod
    def bare(cls) -> UtilBox:
        """Return a UtilBox that invokes bare executables without a prefix."""
        return cls(name="", path="", quoted="")

    @property
    def is_bare(self) -> bool:
        """Check whether commands are run without a utility prefix."""
        return not self.quoted

    def command(self, command: str) -> str:
        """Prefix a utility command with the quoted binary path.

        Args:
            command: Utility command, e.g. ``ls -bAll "/data"``.

        Returns:
            Command line ready to be passed to a ShellRunner.
        """
        if self.is_bare:
            return command
        return f"{self.quoted} {command}"


def probe_utilbox(runner: ShellRunner, name: str) -> UtilBox | None:
    """Probe a single utility binary candidate.

    Runs ``which <name>``. Empty output, or exit status 1 with nothing on
    stderr, means the candidate is not available. Any other failure, such
    as a denied elevation, propagates. On a hit, ``<path> --version`` is run
    for diagnostics; a failing version probe does not invalidate the hit.

    Args:
        runner: Runner used for the probes.
        name: Candidate binary name.

    Returns:
        The resolved UtilBox, or None if the candidate is not available.

    Raises:
        ShellCommandFailedError: If the shell itself fails to run ``which``.
    """
    try:
        result = runner.run(f"which {name}")
    except ShellCommandFailedError as e:
        if e.result.returncode != 1 or e.result.stderr.strip():
            raise
        logger.debug("Tried utilbox name '%s'. Not available (exit %d).", name, e.result.returncode)
        return None

    path = "".join(result.out).strip()
    if not path:
        logger.debug("Tried utilbox name '%s'. Not available.", name)
        return None

    quoted = quote(path)
    version: str | None = None
    try:
        version_result = runner.run(f"{quoted} --version")
        version = "".join(version_result.out).strip() or None
    except ShellCommandFailedError as e:
        logger.debug("Version probe for %s failed with exit %d", path, e.result.returncode)

    logger.info("Using utilbox %s : %s : %s", name, quoted, version or "unknown version")
    return UtilBox(name=name, path=path, quoted=quoted, version=version)


def resolve_utilbox(
    runner: ShellRunner,
    candidates: Sequence[str] = DEFAULT_UTILBOX_CANDIDATES,
) -> UtilBox:
    """Resolve the first available utility binary.

    Candidates are probed in order and probing stops at the first hit.

    Args:
        runner: Runner used for the probes.
        candidates: Binary names to try, in order.

    Returns:
        The resolved UtilBox.

    Raises:
        UtilboxNotAvailableError: If no candidate resolves. The error
            names every candidate that was tried.
        ShellCommandFailedError: If the shell fails for a reason other
            than a missing candidate.
    """
    for name in candidates:
        utilbox = probe_utilbox(runner, name)
        if utilbox is not None:
            return utilbox

    logger.debug("No more options for utilbox. Bailing out.")
    raise UtilboxNotAvailableError(candidates)
