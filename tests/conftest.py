"""
Shared fixtures: an isolated $HOME and $PATH, fake GitHub clients and
recorders for downloads.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest
from invoke import MockContext
from typing_extensions import Annotated

from kubedeps import InstallConfig
from kubedeps._platform import Mode, Platform

LINUX_AMD64 = Platform(os="linux", arch="amd64")

FakeBinDir = Annotated[Path, "Only directory in $PATH"]


@pytest.fixture()
def ctx() -> MockContext:
    return MockContext()


@pytest.fixture()
def home(tmp_path_factory, monkeypatch) -> Path:
    home_dir = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    monkeypatch.delenv("GH_TOKEN", raising=False)
    return home_dir


@pytest.fixture()
def fake_bin_dir(tmp_path, monkeypatch) -> FakeBinDir:
    """An empty directory that replaces the whole $PATH"""
    bin_dir = tmp_path / "path-bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", str(bin_dir))
    return bin_dir


@pytest.fixture()
def put_on_path(fake_bin_dir) -> Callable[..., List[Path]]:
    """Creates executables with the given names in the $PATH"""

    def _put(*names: str) -> List[Path]:
        created = []
        for name in names:
            executable = fake_bin_dir / name
            executable.write_text("#!/bin/sh\n")
            executable.chmod(0o755)
            created.append(executable)
        return created

    return _put


@pytest.fixture()
def make_config(home) -> Callable[..., InstallConfig]:
    def _make(mode=Mode.MINIKUBE, platform=LINUX_AMD64, github_token=None):
        return InstallConfig(
            home=home, mode=mode, platform=platform, github_token=github_token
        )

    return _make


@dataclass
class FakeGithubClient:
    """Answers latest_release with fixed tags"""

    tags: Dict[Tuple[str, str], str] = field(default_factory=dict)
    calls: List[Tuple[str, str]] = field(default_factory=list)

    def latest_release(self, owner, repo):
        self.calls.append((owner, repo))
        return {"tag_name": self.tags.get((owner, repo), "v1.2.3")}


@pytest.fixture()
def github_client() -> FakeGithubClient:
    return FakeGithubClient()


@dataclass
class DownloadRecorder:
    """Replaces download_file, writes a placeholder (or a callback) instead"""

    downloads: List[Tuple[Path, str]] = field(default_factory=list)
    writers: Dict[str, Callable[[Path], None]] = field(default_factory=dict)

    def __call__(self, destination, url):
        destination = Path(destination)
        self.downloads.append((destination, url))
        writer = self.writers.get(destination.name)
        if writer:
            writer(destination)
        else:
            destination.write_bytes(b"binary")
        destination.chmod(0o755)
        return destination

    @property
    def urls(self) -> List[str]:
        return [url for _, url in self.downloads]


@pytest.fixture()
def downloads(monkeypatch) -> DownloadRecorder:
    recorder = DownloadRecorder()
    monkeypatch.setattr("kubedeps.install.download_file", recorder)
    return recorder
