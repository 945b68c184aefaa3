# GitHub Contents API client: the remote content store behind the relay

import base64
import logging
from dataclasses import dataclass
from urllib.parse import quote

import requests

from .errors import ConflictError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileMeta:
    name: str
    path: str
    sha: str
    size: int
    download_url: str
    type: str = 'file'


@dataclass(frozen=True)
class RemoteFile:
    path: str
    sha: str
    content: bytes


class GitHubContentStore:
    """Read, write and delete files in one repository branch.

    Every write carries the sha of the version it replaces; GitHub rejects
    stale shas with 409, which is raised as ConflictError. There is no
    caching and no retry: any upstream failure reaches the caller.
    """

    def __init__(self, token: str, repo: str, branch: str = 'main',
                 api_url: str = 'https://api.github.com', timeout: float = 30,
                 session: requests.Session = None):
        self.repo = repo
        self.branch = branch
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'gallery-admin-relay',
            'X-GitHub-Api-Version': '2022-11-28',
        })

    def _url(self, path: str) -> str:
        return f'{self.api_url}/repos/{self.repo}/contents/{quote(path.strip("/"))}'

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        logger.debug(f'GitHub {method} {url}')
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise UpstreamError(f'{method} {path}: {e}') from e

    @staticmethod
    def _raise_for_status(res: requests.Response, action: str):
        if res.ok:
            return
        detail = f'{action}: {res.text[:500]}'
        if res.status_code == 409:
            raise ConflictError(detail, status=res.status_code)
        raise UpstreamError(detail, status=res.status_code)

    def list_dir(self, path: str) -> list:
        """List a directory. A missing directory is an empty listing."""
        res = self._request('GET', path, params={'ref': self.branch})
        if res.status_code == 404:
            return []
        self._raise_for_status(res, f'list {path}')
        data = res.json()
        if not isinstance(data, list):
            return []
        return [
            FileMeta(
                name=item.get('name', ''),
                path=item.get('path', ''),
                sha=item.get('sha', ''),
                size=item.get('size', 0),
                download_url=item.get('download_url'),
                type=item.get('type', 'file'),
            )
            for item in data
        ]

    def read_file(self, path: str):
        """Fetch a file, or None when it does not exist."""
        res = self._request('GET', path, params={'ref': self.branch})
        if res.status_code == 404:
            return None
        self._raise_for_status(res, f'read {path}')
        data = res.json()
        encoded = (data.get('content') or '').replace('\n', '')
        return RemoteFile(path=path, sha=data['sha'], content=base64.b64decode(encoded))

    def write_file(self, path: str, content: bytes, message: str, sha: str = None) -> str:
        """Create or update ``path`` and return the new blob sha.

        Without ``sha`` the current one is looked up first, so an existing
        file is overwritten rather than rejected.
        """
        if sha is None:
            current = self.read_file(path)
            if current is not None:
                sha = current.sha

        body = {
            'message': message,
            'content': base64.b64encode(content).decode('ascii'),
            'branch': self.branch,
        }
        if sha:
            body['sha'] = sha

        res = self._request('PUT', path, json=body)
        self._raise_for_status(res, f'write {path}')
        new_sha = res.json()['content']['sha']
        logger.info(f'Committed {path} ({len(content)} bytes), sha={new_sha}')
        return new_sha

    def delete_file(self, path: str, sha: str, message: str) -> bool:
        res = self._request('DELETE', path, json={
            'message': message,
            'sha': sha,
            'branch': self.branch,
        })
        self._raise_for_status(res, f'delete {path}')
        logger.info(f'Deleted {path}')
        return True
