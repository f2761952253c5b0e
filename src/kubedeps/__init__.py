import importlib
import logging
import pkgutil
import sys
from types import ModuleType
from typing import Dict, Iterator

from invoke.collection import Collection, Task

from .__about__ import __version__  # noqa: F401
from ._config import InstallConfig  # noqa: F401
from .install import InstallReport, is_installed, run_install  # noqa: F401


def import_submodules(package_name) -> Dict[str, ModuleType]:
    """
    Import the public submodules of a package, recursively.
    Private modules (starting with underscore) hold no tasks and are skipped.

    :param package_name: Package name
    :type package_name: str
    :rtype: dict[types.ModuleType]
    """
    package = sys.modules[package_name]
    result = {}
    for _loader, name, _is_pkg in pkgutil.walk_packages(package.__path__):
        if name.startswith("_"):
            continue
        try:
            result[name] = importlib.import_module(package_name + "." + name)
        except (ImportError, SyntaxError) as error:
            logging.error(f"Error loading {name}: {error}")

    return result


def iter_tasks_module(
    module: ModuleType,
) -> Iterator[Task]:
    """
    Yields the tasks defined in a module
    """
    for _, maybe_task in module.__dict__.items():
        if not isinstance(maybe_task, Task):
            continue
        yield maybe_task


def get_root_ns() -> Collection:
    """
    Loads the tasks of every public module into a single namespace
    """
    ns = Collection()
    for name, submodule in import_submodules("kubedeps").items():
        logging.debug(f"Loading built-in module {name}")
        for task in iter_tasks_module(submodule):
            ns.add_task(task)
    return ns
