"""
Download files and unpack the archives they come in.

None of these functions clean up after a failure: a failed download or
extraction may leave a partial file behind.
"""
import gzip
import os
import shutil
import tarfile
import zipfile
from http.client import HTTPException
from pathlib import Path
from typing import BinaryIO, List, Optional, Union
from urllib.request import Request, urlopen

from .__about__ import __version__
from ._errors import ArchiveError, DownloadError

EXECUTABLE_MODE = 0o755
DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644

# https://www.rfc-editor.org/rfc/rfc1952#page-5
GZIP_MAGIC = b"\x1f\x8b"
FEXTRA = 0x04
FNAME = 0x08

PathLike = Union[str, Path]


def create_request(url: str) -> Request:
    """Creates a Request object with headers"""
    if not url.startswith(("http:", "https:")):
        msg = "URL must start with 'http:' or 'https:'"
        raise ValueError(msg)
    return Request(  # noqa: S310
        url,
        data=None,
        headers={"User-Agent": f"kubedeps/{__version__}"},
    )


def download_file(destination: PathLike, url: str) -> Path:
    """Downloads url into destination and makes it executable

    Parameters
    ----------
    destination : Union[str, Path]
        The file to write, truncated if it exists
    url : str
        The URL to GET

    Returns
    -------
    Path
        The downloaded file

    Raises
    ------
    DownloadError
        If the request fails or the response is cut short
    """
    destination = Path(destination)
    try:
        with open(destination, "wb") as out:
            with urlopen(create_request(url)) as response:  # noqa: S310
                shutil.copyfileobj(response, out)
        destination.chmod(EXECUTABLE_MODE)
    except (OSError, HTTPException) as error:
        msg = f"Unable to download file {destination} from {url}: {error}"
        raise DownloadError(msg) from error
    return destination


def _stored_mode(info: zipfile.ZipInfo) -> int:
    # Unix permission bits live in the high word of external_attr
    return (info.external_attr >> 16) & 0o777


def _open_truncated(path: Path, mode: int) -> BinaryIO:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    return os.fdopen(fd, "wb")


def unzip(archive: PathLike, target: PathLike) -> List[Path]:
    """
    Extracts every entry of a zip archive below target, the entries'
    paths aren't sanitized. Returns the extracted files, all of them executable.
    """
    target = Path(target)
    extracted: List[Path] = []
    with zipfile.ZipFile(archive) as zip_file:
        target.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        for info in zip_file.infolist():
            path = target / info.filename
            mode = _stored_mode(info)
            if info.is_dir():
                path.mkdir(mode=mode or DEFAULT_DIR_MODE, parents=True, exist_ok=True)
                continue
            path.parent.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
            with zip_file.open(info) as source, _open_truncated(
                path, mode or DEFAULT_FILE_MODE
            ) as out:
                shutil.copyfileobj(source, out)
            path.chmod(EXECUTABLE_MODE)
            extracted.append(path)
    return extracted


def read_gzip_name(fp: BinaryIO) -> Optional[str]:
    """Reads the original file name stored in a gzip header (FNAME field).
    The stream is left positioned after the name.
    """
    header = fp.read(10)
    if len(header) < 10 or header[:2] != GZIP_MAGIC:
        msg = "Not a gzipped file"
        raise ArchiveError(msg)
    flags = header[3]
    if flags & FEXTRA:
        extra_length = int.from_bytes(fp.read(2), "little")
        fp.read(extra_length)
    if not flags & FNAME:
        return None
    name = bytearray()
    while True:
        char = fp.read(1)
        if not char:
            msg = "Truncated gzip header"
            raise ArchiveError(msg)
        if char == b"\x00":
            break
        name += char
    return name.decode("latin-1")


def ungzip(source: PathLike, target: PathLike) -> Path:
    """
    Decompresses a single file gzip stream into target, naming the result
    after the name embedded in the gzip header.
    """
    with open(source, "rb") as fp:
        name = read_gzip_name(fp)
        if not name:
            msg = f"{source} doesn't carry the name of the compressed file"
            raise ArchiveError(msg)
        fp.seek(0)
        output = Path(target) / Path(name).name
        with gzip.GzipFile(fileobj=fp) as archive, open(output, "wb") as out:
            shutil.copyfileobj(archive, out)
    output.chmod(EXECUTABLE_MODE)
    return output


def untar(source: PathLike, target: PathLike) -> List[Path]:
    """Extracts a .tar.gz below target, regular files are made executable"""
    target = Path(target)
    target.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
    extracted: List[Path] = []
    with tarfile.open(source, "r:gz") as tar:
        members = tar.getmembers()
        tar.extractall(target, members=members, filter="tar")
        for member in members:
            if not member.isfile():
                continue
            path = target / member.name
            path.chmod(EXECUTABLE_MODE)
            extracted.append(path)
    return extracted
