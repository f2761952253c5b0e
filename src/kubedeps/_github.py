"""
Retrieve the latest release versions of projects hosted in GitHub.
"""
import logging
from typing import Any, Dict, Optional

import requests
from packaging.version import InvalidVersion, Version

from .__about__ import __version__
from ._errors import ReleaseLookupError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
LATEST_RELEASE_FORMAT = GITHUB_API_BASE + "/repos/{owner}/{repo}/releases/latest"


class GithubClient:
    """
    Thin client over the GitHub REST API. Create it once per run and pass it
    to the functions that need it.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": f"kubedeps/{__version__}",
            }
        )

    @classmethod
    def from_token(cls, token: Optional[str] = None) -> "GithubClient":
        """Without a token the client is anonymous (and more rate limited)"""
        client = cls()
        if token:
            client.session.headers["Authorization"] = f"Bearer {token}"
        return client

    @property
    def authenticated(self) -> bool:
        return "Authorization" in self.session.headers

    def latest_release(self, owner: str, repo: str) -> Dict[str, Any]:
        url = LATEST_RELEASE_FORMAT.format(owner=owner, repo=repo)
        logger.debug("Fetching latest release from %s", url)
        response = self.session.get(url)
        response.raise_for_status()
        return response.json()


def parse_tag(tag: str) -> Version:
    """Parses a v<major>.<minor>.<patch> tag name

    Parameters
    ----------
    tag : str
        The tag name, the leading v is optional

    Returns
    -------
    Version
        The parsed version

    Raises
    ------
    ReleaseLookupError
        If the tag isn't a major.minor.patch version
    """
    version_string = tag[1:] if tag.startswith("v") else tag
    try:
        version = Version(version_string)
    except InvalidVersion as error:
        msg = f"Can't parse a version from tag {tag!r}"
        raise ReleaseLookupError(msg) from error
    if len(version.release) != 3:
        msg = f"Tag {tag!r} is not a major.minor.patch version"
        raise ReleaseLookupError(msg)
    return version


def get_latest_version(client: GithubClient, owner: str, repo: str) -> Version:
    """Returns the version of the latest published release of owner/repo"""
    try:
        release = client.latest_release(owner, repo)
    except (requests.RequestException, ValueError) as error:
        msg = f"Unable to get latest version for {owner}/{repo}: {error}"
        raise ReleaseLookupError(msg) from error
    tag = release.get("tag_name") if isinstance(release, dict) else None
    if not tag:
        msg = f"Cannot get release name for {owner}/{repo}"
        raise ReleaseLookupError(msg)
    version = parse_tag(tag)
    logger.debug("Latest release of %s/%s is %s", owner, repo, version)
    return version
