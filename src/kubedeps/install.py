"""
Installs the dependencies to locally run the fabric8 microservices platform:
- The VM driver (xhyve in OSX)
- The kubernetes distribution (minikube or minishift)
- The kubernetes CLI (kubectl)
- The OpenShift CLI (oc), only for minishift
"""
import logging
import shutil
import sys
import tarfile
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from shutil import which
from typing import Callable, Iterable, List, Optional

from invoke import Context, Result, task

from ._archive import EXECUTABLE_MODE, download_file, untar, unzip
from ._config import InstallConfig
from ._errors import ArchiveError, DriverInstallError, HomeDirectoryError, KubedepsError
from ._github import GithubClient, get_latest_version
from ._platform import (
    KUBECTL,
    KUBERNETES,
    OC,
    OC_SHA,
    OC_VERSION,
    OSFamily,
    distro_url,
    kubectl_url,
    oc_archive_is_zip,
    oc_archive_name,
    oc_url,
)

logger = logging.getLogger(__name__)

XHYVE_DRIVER = "docker-machine-driver-xhyve"

# Errors that fail a single step without stopping the run
STEP_ERRORS = (KubedepsError, OSError, zipfile.BadZipFile, tarfile.TarError)


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


STATUS_ICONS = {
    StepStatus.SUCCESS: "✅",
    StepStatus.SKIPPED: "👌",
    StepStatus.FAILED: "⛔️",
}


@dataclass
class StepResult:
    name: str
    status: StepStatus
    message: str = ""

    def __str__(self):
        return f"{STATUS_ICONS[self.status]} {self.name}: {self.message}"


@dataclass
class InstallReport:
    """Results of the installation steps, in the order they ran"""

    steps: List[StepResult] = field(default_factory=list)
    fatal: bool = False

    def add(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    def failed(self) -> List[StepResult]:
        return [step for step in self.steps if step.status is StepStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.fatal and not self.failed()

    def summary(self) -> str:
        return "\n".join(str(step) for step in self.steps)


def _run_step(name: str, function: Callable[..., StepResult], *args) -> StepResult:
    try:
        result = function(*args)
    except STEP_ERRORS as error:
        logger.warning("Unable to install %s: %s", name, error)
        return StepResult(name, StepStatus.FAILED, str(error))
    if result.status is StepStatus.FAILED:
        logger.warning("Unable to install %s: %s", name, result.message)
    else:
        logger.info(result.message)
    return result


def _already_available(name: str, binary: str) -> StepResult:
    return StepResult(name, StepStatus.SKIPPED, f"{binary} is already available on your PATH")


def ensure_bin_dir(config: InstallConfig) -> StepResult:
    """Creates the directory the binaries are downloaded to"""
    bin_dir = config.bin_dir
    bin_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    return StepResult("install directory", StepStatus.SUCCESS, f"{bin_dir} ready")


def _checked_run(ctx: Context, command: str, **kwargs) -> Result:
    result: Result = ctx.run(command, warn=True, **kwargs)
    if not result.ok:
        msg = f"{command!r} failed with exit code {result.exited}"
        raise DriverInstallError(msg)
    return result


def install_xhyve_driver(ctx: Context) -> StepResult:
    """
    Installs the xhyve driver with Homebrew. The driver binary is owned by root
    and setuid so it can create VMs without asking for the password every time.
    Requires sudo.
    """
    logger.info("fabric8 recommends OSX users use the xhyve driver")
    info = ctx.run(f"brew info {XHYVE_DRIVER}", hide=True, warn=True)
    if info.ok and "Not installed" not in info.stdout:
        return StepResult("driver", StepStatus.SKIPPED, "xhyve driver already installed")

    _checked_run(ctx, f"brew install {XHYVE_DRIVER}")
    brew_prefix = _checked_run(ctx, "brew --prefix", hide=True).stdout.strip()
    driver = f"{brew_prefix}/opt/{XHYVE_DRIVER}/bin/{XHYVE_DRIVER}"
    _checked_run(ctx, f"sudo chown root:wheel {driver}")
    _checked_run(ctx, f"sudo chmod u+s {driver}")
    return StepResult("driver", StepStatus.SUCCESS, "xhyve driver installed")


def install_driver(ctx: Context, config: InstallConfig) -> StepResult:
    family = config.platform.os_family
    if family is OSFamily.DARWIN:
        return install_xhyve_driver(ctx)
    if family is OSFamily.LINUX:
        msg = f"Driver install for {config.platform.os} not yet supported"
        raise DriverInstallError(msg)
    return StepResult("driver", StepStatus.SKIPPED, f"No driver needed for {config.platform.os}")


def install_distro(config: InstallConfig, client: GithubClient) -> StepResult:
    """Downloads minikube or minishift unless it's already in the $PATH"""
    spec = config.download_spec
    binary = config.platform.executable(spec.local_binary)
    if which(binary):
        return _already_available(spec.local_binary, binary)

    version = get_latest_version(client, spec.distro_owner, spec.distro_repo)
    url = distro_url(spec, version, config.platform)
    destination = config.bin_dir / binary
    logger.info("Downloading %s...", url)
    download_file(destination, url)
    return StepResult(spec.local_binary, StepStatus.SUCCESS, f"Downloaded {binary}")


def install_kubectl(config: InstallConfig, client: GithubClient) -> StepResult:
    """Downloads the latest kubectl unless it's already in the $PATH"""
    binary = config.platform.executable(KUBECTL)
    if which(binary):
        return _already_available(KUBECTL, binary)

    version = get_latest_version(client, KUBERNETES, KUBERNETES)
    url = kubectl_url(version, config.platform)
    destination = config.bin_dir / binary
    logger.info("Downloading %s...", url)
    download_file(destination, url)
    return StepResult(KUBECTL, StepStatus.SUCCESS, f"Downloaded {binary}")


def _promote_binary(extracted: Iterable[Path], target: Path) -> Path:
    """Copies the binary found in the extracted files next to the other binaries"""
    if target.is_file():
        target.chmod(EXECUTABLE_MODE)
        return target
    for path in extracted:
        if path.name == target.name and path.is_file():
            shutil.copy(path, target)
            target.chmod(EXECUTABLE_MODE)
            return target
    msg = f"Couldn't find {target.name} in the extracted files"
    raise ArchiveError(msg)


def install_oc_client(
    config: InstallConfig, version: str = OC_VERSION, sha: str = OC_SHA
) -> StepResult:
    """
    Downloads the OpenShift client tools. The version is pinned since the
    release asset names contain a commit SHA we can't work out yet.
    """
    binary = config.platform.executable(OC)
    if which(binary):
        return _already_available(OC, binary)

    url = oc_url(config.platform, version=version, sha=sha)
    archive = config.bin_dir / oc_archive_name(config.platform)
    logger.info("Downloading %s...", url)
    download_file(archive, url)

    try:
        if oc_archive_is_zip(config.platform):
            extracted = unzip(archive, config.bin_dir)
        else:
            extracted = untar(archive, config.bin_dir)
    except (OSError, zipfile.BadZipFile, tarfile.TarError) as error:
        msg = f"Unable to extract {archive}: {error}"
        raise ArchiveError(msg) from error
    _promote_binary(extracted, config.bin_dir / binary)
    return StepResult(OC, StepStatus.SUCCESS, f"Downloaded {binary}")


def run_install(
    ctx: Context, config: InstallConfig, client: Optional[GithubClient] = None
) -> InstallReport:
    """Runs every installation step in order.

    Parameters
    ----------
    ctx : Context
        Used to run the package manager commands
    config : InstallConfig
        Resolved configuration for this run
    client : GithubClient, optional
        Client used to look up releases, one is created from the
        configured token if not provided

    Returns
    -------
    InstallReport
        One result per step. If the install directory can't be created the
        report is fatal and no other step runs.
    """
    report = InstallReport()
    bin_dir_result = report.add(_run_step("install directory", ensure_bin_dir, config))
    # Every later step writes to bin_dir, so stop here rather than carry on
    if bin_dir_result.status is StepStatus.FAILED:
        logger.error("Unable to create directory to download files %s", config.bin_dir)
        report.fatal = True
        return report

    client = client or GithubClient.from_token(config.github_token)
    report.add(_run_step("driver", install_driver, ctx, config))
    report.add(_run_step(config.download_spec.local_binary, install_distro, config, client))
    report.add(_run_step(KUBECTL, install_kubectl, config, client))
    if config.download_spec.is_minishift:
        report.add(_run_step(OC, install_oc_client, config))
    return report


def is_installed(config: InstallConfig) -> bool:
    """
    Checks whether the kube config file and the binaries for the configured
    mode are present. Nothing is installed.
    """
    if not config.kube_config.exists():
        return False

    if not which(KUBECTL):
        return False

    spec = config.download_spec
    if spec.is_minishift:
        return bool(which(spec.local_binary)) and bool(which(spec.client_binary))
    return bool(which(spec.local_binary))


@task(help={"minishift": "Install minishift rather than minikube"})
def install(ctx: Context, minishift=False):
    """Installs the dependencies to locally run the fabric8 microservices platform"""
    try:
        config = InstallConfig.from_env(minishift=minishift)
    except HomeDirectoryError as error:
        sys.exit(str(error))

    report = run_install(ctx, config)
    print(report.summary(), file=sys.stderr)
    if report.fatal:
        sys.exit(f"Unable to create directory to download files {config.bin_dir}")
    failed = report.failed()
    if failed:
        print(
            f"⚠️ {len(failed)} step(s) failed, fix the problem and run install again",
            file=sys.stderr,
        )
