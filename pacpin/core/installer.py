"""Downloading resolved archives and installing them with pacman.

Each resolved batch (one specification line) is installed with a single
``pacman -U`` call so that pacman sees the packages together; batches run
strictly in order and the first failure stops the run.

pacman runs inside the MSYS2 shell. On GitHub Actions ``setup-msys2``
installs a ``msys2.cmd`` wrapper that is called through ``cmd``; any other
shell (for example ``bash`` when already inside MSYS2) is called directly
with ``-c``.

Typical usage::

    async with HTTPClient() as client:
        installer = Installer(client, PacmanRunner(shell), download_dir)
        await installer.install_all(batches, Environment.UCRT64)
"""

from __future__ import annotations

import os
import shlex
import asyncio
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from pacpin.core.environment import Environment
from pacpin.utils.http import HTTPClient
from pacpin.utils.logger import get_logger
from pacpin.utils.filesystem import remove_file, validate_path, windows_path_to_posix
from pacpin.constants import PREREQUISITE_PACKAGES
from pacpin.exceptions import (
    ArtifactDownloadFailedError,
    FileOperationError,
    InstallerError,
    NetworkError,
)
from pacpin.models.package import ResolvedNormal, ResolvedPackage

logger = get_logger("installer")


def default_shell(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the MSYS2 shell used when none is configured.

    Inside GitHub Actions this is the ``msys2.cmd`` wrapper written by
    ``setup-msys2``; elsewhere ``bash`` from ``PATH``.
    """
    env = os.environ if environ is None else environ
    runner_temp = env.get("RUNNER_TEMP")
    if runner_temp:
        return str(Path(runner_temp) / "setup-msys2" / "msys2.cmd")
    return "bash"


class PacmanRunner:
    """Runs commands inside the MSYS2 shell.

    Args:
        shell: Path of ``msys2.cmd`` or of a POSIX shell.
    """

    def __init__(self, shell: str) -> None:
        self.shell = shell

    def build_command(self, args: Sequence[str]) -> List[str]:
        """Return the argv that runs ``args`` inside the shell."""
        script = " ".join(shlex.quote(arg) for arg in args)

        if self.shell.lower().endswith(".cmd"):
            return ["cmd", "/D", "/S", "/C", self.shell, "-c", script]

        return [self.shell, "-c", script]

    def run(self, args: Sequence[str]) -> None:
        """Run ``args`` inside the shell, streaming its output.

        Raises:
            InstallerError: The shell could not be started or the command
                exited non-zero.
        """
        command = self.build_command(args)
        logger.info("Running: %s", " ".join(args))
        logger.debug("Command line: %s", command)

        try:
            completed = subprocess.run(command, check=False)
        except OSError as exc:
            raise InstallerError(
                f"Could not start the MSYS2 shell '{self.shell}': {exc}",
                command=command,
            ) from exc

        if completed.returncode != 0:
            raise InstallerError(
                f"Command '{' '.join(args)}' failed with exit code "
                f"{completed.returncode}",
                command=command,
                returncode=completed.returncode,
            )

    def pacman(self, args: Sequence[str]) -> None:
        """Run ``pacman --noconfirm`` with ``args``."""
        self.run(["pacman", "--noconfirm", *args])


class Installer:
    """Downloads resolved batches and installs them one at a time.

    Args:
        client: HTTP client used for downloads.
        runner: Runs pacman.
        download_dir: Directory the archives are written to.
        keep_downloads: Keep the archives after installing.
    """

    def __init__(
        self,
        client: HTTPClient,
        runner: PacmanRunner,
        download_dir: Path,
        *,
        keep_downloads: bool = False,
    ) -> None:
        self.client = client
        self.runner = runner
        self.download_dir = download_dir
        self.keep_downloads = keep_downloads

    def destination(self, package: ResolvedNormal) -> Path:
        """Return the download path of ``package``, inside the download directory.

        Raises:
            FileOperationError: The archive name would leave the directory.
        """
        return validate_path(self.download_dir / package.name, base_dir=self.download_dir)

    async def download(self, package: ResolvedNormal) -> Path:
        """Download one archive into the download directory.

        Raises:
            ArtifactDownloadFailedError: The download or the write failed.
        """
        destination = self.destination(package)
        logger.info("Downloading package '%s' with url '%s'", package.name, package.url)

        try:
            return await self.client.download(package.url, destination)
        except NetworkError as exc:
            raise ArtifactDownloadFailedError(
                f"Error in getting the file: {package.url}: {exc.message}",
                url=package.url,
                status_code=exc.status_code,
            ) from exc
        except FileOperationError as exc:
            raise ArtifactDownloadFailedError(
                f"Error in saving the file: {package.url}: {exc.message}",
                url=package.url,
            ) from exc

    def install_prerequisites(self, environment: Environment) -> None:
        """Refresh the package databases and install the archive tools."""
        self.runner.pacman(["-Sy"])
        packages = [name.format(prefix=environment.prefix) for name in PREREQUISITE_PACKAGES]
        self.runner.pacman(["-Sy", "--needed", *packages])

    async def install_batch(self, batch: Sequence[ResolvedPackage]) -> None:
        """Install one batch with a single ``pacman -U``.

        Virtual packages are passed by name; normal packages are downloaded
        concurrently and passed as shell paths, in batch order.
        """
        normal = [package for package in batch if isinstance(package, ResolvedNormal)]
        destinations = [self.destination(package) for package in normal]

        try:
            # All downloads settle before the first error is raised
            results = await asyncio.gather(
                *(self.download(package) for package in normal),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result

            paths = iter(results)
            arguments = [
                windows_path_to_posix(next(paths))
                if isinstance(package, ResolvedNormal)
                else package.name
                for package in batch
            ]

            await asyncio.to_thread(self.runner.pacman, ["-U", *arguments])
        finally:
            if not self.keep_downloads:
                for path in destinations:
                    remove_file(path)

    async def install_all(
        self,
        batches: Sequence[Sequence[ResolvedPackage]],
        environment: Environment,
        *,
        prerequisites: bool = True,
    ) -> None:
        """Install every batch in order, stopping at the first failure."""
        if prerequisites:
            await asyncio.to_thread(self.install_prerequisites, environment)

        for index, batch in enumerate(batches, start=1):
            logger.info("Installing batch %d/%d", index, len(batches))
            await self.install_batch(batch)
