"""
Exceptions raised while installing the local cluster dependencies
"""


class KubedepsError(Exception):
    """Base class for the errors raised by kubedeps"""


class HomeDirectoryError(KubedepsError):
    """The user home directory can't be determined"""


class ReleaseLookupError(KubedepsError):
    """The latest release of a GitHub project couldn't be resolved"""


class DriverInstallError(KubedepsError):
    """The VM driver couldn't be installed"""


class ArchiveError(KubedepsError):
    """An archive doesn't have the expected content"""


class DownloadError(KubedepsError):
    """A file couldn't be downloaded"""
