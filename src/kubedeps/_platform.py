"""
Maps the install mode and the host platform to the binaries and the
URLs they are downloaded from.

Every URL built by kubedeps is a pure function of a DownloadSpec, a
release version and a Platform.
"""
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

MINIKUBE = "minikube"
MINISHIFT = "minishift"
KUBECTL = "kubectl"
OC = "oc"
KUBERNETES = "kubernetes"
MINISHIFT_OWNER = "jimmidyson"

KUBE_DOWNLOAD_URL = "https://storage.googleapis.com/"
MINISHIFT_DOWNLOAD_URL = "https://github.com/jimmidyson/"

KUBECTL_URL_FORMAT = (
    "https://storage.googleapis.com/kubernetes-release/release/"
    "v{version}/bin/{os}/{arch}/kubectl"
)
OC_URL_FORMAT = (
    "https://github.com/openshift/origin/releases/download/"
    "v{version}/openshift-origin-client-tools-v{version}-{sha}"
)

# Not looked up dynamically, the release asset names carry a commit SHA
OC_VERSION = "1.2.2"
OC_SHA = "565691c"

# Go style architecture names, as used by the release assets
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


class Mode(str, Enum):
    """The local cluster flavour to install"""

    MINIKUBE = MINIKUBE
    MINISHIFT = MINISHIFT

    @classmethod
    def from_flag(cls, minishift: bool) -> "Mode":
        return cls.MINISHIFT if minishift else cls.MINIKUBE


class OSFamily(str, Enum):
    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    OTHER = "other"

    @classmethod
    def from_os(cls, os_name: str) -> "OSFamily":
        try:
            return cls(os_name)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Platform:
    """Operating system and architecture, named the way Go release assets
    name them (darwin, linux, windows / amd64, arm64, ...)
    """

    os: str
    arch: str

    @property
    def os_family(self) -> OSFamily:
        return OSFamily.from_os(self.os)

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.os_family is OSFamily.WINDOWS else ""

    def executable(self, name: str) -> str:
        """The file name of the executable ``name`` on this platform"""
        return f"{name}{self.executable_suffix}"


def normalize_arch(machine: str) -> str:
    machine_lower = machine.lower()
    return _ARCH_MAP.get(machine_lower, machine_lower)


def get_platform(system: Optional[str] = None, machine: Optional[str] = None) -> Platform:
    """Detects the current platform

    Parameters
    ----------
    system : str, optional
        Overrides platform.system()
    machine : str, optional
        Overrides platform.machine()

    Returns
    -------
    Platform
        The operating system and architecture of the host
    """
    system = system or platform.system()
    machine = machine or platform.machine()
    return Platform(os=system.lower(), arch=normalize_arch(machine))


@dataclass(frozen=True)
class DownloadSpec:
    """Everything that differs between a minikube and a minishift install"""

    client_binary: str
    distro_owner: str
    distro_repo: str
    local_binary: str
    extra_path: str
    download_url: str
    is_minishift: bool


DOWNLOAD_SPECS: Dict[Mode, DownloadSpec] = {
    Mode.MINIKUBE: DownloadSpec(
        client_binary=KUBECTL,
        distro_owner=KUBERNETES,
        distro_repo=MINIKUBE,
        local_binary=MINIKUBE,
        extra_path="",
        download_url=KUBE_DOWNLOAD_URL,
        is_minishift=False,
    ),
    Mode.MINISHIFT: DownloadSpec(
        client_binary=OC,
        distro_owner=MINISHIFT_OWNER,
        distro_repo=MINISHIFT,
        local_binary=MINISHIFT,
        extra_path="download/",
        download_url=MINISHIFT_DOWNLOAD_URL,
        is_minishift=True,
    ),
}


def get_download_spec(mode: Mode) -> DownloadSpec:
    return DOWNLOAD_SPECS[mode]


def get_download_properties(minishift: bool) -> DownloadSpec:
    """Returns the DownloadSpec for minishift (True) or minikube (False)"""
    return get_download_spec(Mode.from_flag(minishift))


def distro_url(spec: DownloadSpec, version, platform_: Platform) -> str:
    """URL of the kubernetes distribution binary (minikube or minishift)"""
    repo = spec.distro_repo
    return (
        f"{spec.download_url}{repo}/releases/{spec.extra_path}v{version}/"
        f"{repo}-{platform_.os}-{platform_.arch}{platform_.executable_suffix}"
    )


def kubectl_url(version, platform_: Platform) -> str:
    url = KUBECTL_URL_FORMAT.format(
        version=version, os=platform_.os, arch=platform_.arch
    )
    return f"{url}{platform_.executable_suffix}"


def oc_url(platform_: Platform, version: str = OC_VERSION, sha: str = OC_SHA) -> str:
    """URL of the OpenShift client tools archive"""
    url = OC_URL_FORMAT.format(version=version, sha=sha)
    family = platform_.os_family
    if family is OSFamily.WINDOWS:
        return f"{url}-windows.zip"
    if family is OSFamily.DARWIN:
        return f"{url}-mac.zip"
    return f"{url}-{platform_.os}-{platform_.arch}.tar.gz"


def oc_archive_is_zip(platform_: Platform) -> bool:
    return platform_.os_family in {OSFamily.WINDOWS, OSFamily.DARWIN}


def oc_archive_name(platform_: Platform) -> str:
    return f"{OC}.zip" if oc_archive_is_zip(platform_) else f"{OC}.tar.gz"
