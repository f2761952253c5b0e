import pytest

from kubedeps._config import InstallConfig, get_home_directory
from kubedeps._errors import HomeDirectoryError
from kubedeps._platform import Mode, Platform


def test_from_env(home, monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "token")
    config = InstallConfig.from_env(minishift=True, platform_=Platform("linux", "arm64"))

    assert config.home == home
    assert config.mode is Mode.MINISHIFT
    assert config.is_minishift
    assert config.github_token == "token"
    assert config.bin_dir == home / ".fabric8" / "bin"
    assert config.kube_config == home / ".kube" / "config"
    assert config.download_spec.local_binary == "minishift"


def test_token_is_optional(home):
    config = InstallConfig.from_env()
    assert config.github_token is None
    assert config.mode is Mode.MINIKUBE
    assert "token" not in repr(config)


def test_empty_token_is_ignored(home, monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "")
    assert InstallConfig.from_env().github_token is None


def test_home_directory(home):
    assert get_home_directory() == home


def test_home_directory_missing(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.delenv("USERPROFILE", raising=False)
    with pytest.raises(HomeDirectoryError):
        get_home_directory()


def test_home_directory_empty(monkeypatch):
    # expanduser would fall back to "/" here
    monkeypatch.setenv("HOME", "")
    monkeypatch.setenv("USERPROFILE", "")
    with pytest.raises(HomeDirectoryError):
        get_home_directory()


def test_install_task_exits_without_home(monkeypatch):
    from invoke import MockContext

    from kubedeps.install import install

    monkeypatch.setenv("HOME", "")
    monkeypatch.setenv("USERPROFILE", "")
    with pytest.raises(SystemExit, match="No user home"):
        install(MockContext())
