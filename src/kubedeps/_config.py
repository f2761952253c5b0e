"""
Configuration resolved once per run from the environment
"""
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ._errors import HomeDirectoryError
from ._platform import DownloadSpec, Mode, Platform, get_download_spec, get_platform

BIN_LOCATION = ".fabric8/bin"
KUBE_CONFIG_LOCATION = ".kube/config"

GITHUB_TOKEN_ENV = "GH_TOKEN"


def get_home_directory() -> Path:
    """
    Gets the user home directory, raises HomeDirectoryError if it can't be
    found in the environment
    """
    variable = "USERPROFILE" if platform.system() == "Windows" else "HOME"
    home = os.environ.get(variable)
    if not home:
        msg = f"No user home environment variable found for OS {platform.system()}"
        raise HomeDirectoryError(msg)
    return Path(home)


@dataclass
class InstallConfig:
    home: Path
    mode: Mode = Mode.MINIKUBE
    platform: Platform = field(default_factory=get_platform)
    github_token: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_env(
        cls, minishift: bool = False, platform_: Optional[Platform] = None
    ) -> "InstallConfig":
        """Builds the configuration from the environment variables

        Parameters
        ----------
        minishift : bool
            Install minishift rather than minikube
        platform_ : Platform, optional
            Target platform, detected from the host when not given

        Returns
        -------
        InstallConfig
            The configuration for this run

        Raises
        ------
        HomeDirectoryError
            If the user home directory can't be resolved
        """
        return cls(
            home=get_home_directory(),
            mode=Mode.from_flag(minishift),
            platform=platform_ or get_platform(),
            github_token=os.environ.get(GITHUB_TOKEN_ENV) or None,
        )

    @property
    def bin_dir(self) -> Path:
        """Directory where the binaries are downloaded to"""
        return self.home / BIN_LOCATION

    @property
    def kube_config(self) -> Path:
        return self.home / KUBE_CONFIG_LOCATION

    @property
    def download_spec(self) -> DownloadSpec:
        return get_download_spec(self.mode)

    @property
    def is_minishift(self) -> bool:
        return self.mode is Mode.MINISHIFT
