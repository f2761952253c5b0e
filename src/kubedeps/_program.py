import logging
import os

from invoke import Program

from . import __version__, get_root_ns


class KubedepsProgram(Program):
    def __init__(
        self,
    ) -> None:
        self.configure_logging()
        ns = get_root_ns()
        super().__init__(
            name="kubedeps",
            binary="kubedeps",
            binary_names=["kubedeps"],
            version=__version__,
            namespace=ns,
        )

    def configure_logging(self):
        logging.basicConfig(level=os.environ.get("KUBEDEPS_LOGLEVEL", "INFO"))


def main():
    KubedepsProgram().run()
