from __future__ import annotations
import logging
import os
import tempfile
import time
import warnings
from contextlib import contextmanager, suppress
from functools import partial
from typing import Callable, Iterator
from urllib.parse import urlparse

import requests
from urllib3.exceptions import InsecureRequestWarning

from imageoverlay.errors import InvalidConfigError, ResourceError

logger = logging.getLogger(__name__)

CACHE_TTL_SEC = 60 * 60
CHUNK_SIZE = 8 * 1024
USER_AGENT = "imageoverlay/1.0"

_REMOTE_SCHEMES = ("http", "https")


def is_remote(source: str) -> bool:
    return urlparse(source).scheme.lower() in _REMOTE_SCHEMES


class CacheLoader:
    """
    Keeps a local copy of a (possibly remote) image in cache_dir.

    A copy is fresh while its mtime is less than ttl seconds old. There is
    no locking: two processes refreshing the same file race and the last
    writer wins.
    """

    def __init__(
        self,
        cache_dir: str | os.PathLike,
        ttl: int = CACHE_TTL_SEC,
        chunk_size: int = CHUNK_SIZE,
        clock: Callable[[], float] = time.time,
        timeout: float = 15.0,
    ):
        self.cache_dir = _validate_cache_dir(os.fspath(cache_dir))
        self.ttl = int(ttl)
        self.chunk_size = int(chunk_size)
        self.clock = clock
        self.timeout = timeout

    def cache_path_for(self, source: str) -> str:
        name = os.path.basename(urlparse(source).path if is_remote(source) else source)
        if not name:
            raise ResourceError(f"couldn't derive a cache file name from {source}")
        return self.cache_dir + "/" + name

    def is_fresh(self, cache_path: str, now: float | None = None) -> bool:
        if not os.path.isfile(cache_path):
            return False
        if now is None:
            now = self.clock()
        return now - os.path.getmtime(cache_path) < self.ttl

    def refresh(self, source: str, cache_path: str) -> None:
        """
        Copy source into cache_path chunk by chunk, replacing any older copy.

        The bytes land in a temporary file beside the cache copy and are
        renamed over it only once the whole source has been read.
        """
        written = 0
        with self._open_source(source) as chunks:
            try:
                out = tempfile.NamedTemporaryFile(dir=self.cache_dir, prefix=".", suffix=".part", delete=False)
            except OSError as exc:
                raise ResourceError(f"couldn't open cache file at {cache_path}") from exc
            try:
                with out:
                    for chunk in chunks:
                        out.write(chunk)
                        written += len(chunk)
                try:
                    os.replace(out.name, cache_path)
                except OSError as exc:
                    raise ResourceError(f"couldn't open cache file at {cache_path}") from exc
            except BaseException:
                with suppress(FileNotFoundError):
                    os.unlink(out.name)
                raise
        logger.debug("cached %s -> %s (%d bytes)", source, cache_path, written)

    def resolve(self, source: str) -> str:
        """Return the path to read: the cached copy when fresh, else source."""
        cache_path = self.cache_path_for(source)
        now = self.clock()
        if self.is_fresh(cache_path, now):
            logger.debug("cache hit for %s", source)
        else:
            self.refresh(source, cache_path)
        if self.is_fresh(cache_path, now):
            return cache_path
        logger.debug("cache copy of %s is not fresh after refresh; reading source", source)
        return source

    @contextmanager
    def _open_source(self, source: str) -> Iterator[Iterator[bytes]]:
        if is_remote(source):
            # Peer verification stays off for fetching source images.
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", InsecureRequestWarning)
                try:
                    resp = requests.get(
                        source,
                        headers={"User-Agent": USER_AGENT},
                        stream=True,
                        verify=False,
                        timeout=self.timeout,
                    )
                except requests.RequestException as exc:
                    raise ResourceError(f"couldn't open file at {source}") from exc
            with resp:
                try:
                    resp.raise_for_status()
                except requests.RequestException as exc:
                    raise ResourceError(f"couldn't open file at {source}") from exc
                try:
                    yield resp.iter_content(chunk_size=self.chunk_size)
                except requests.RequestException as exc:
                    raise ResourceError(f"couldn't read file at {source}") from exc
            return

        try:
            f = open(source, "rb")
        except OSError as exc:
            raise ResourceError(f"couldn't open file at {source}") from exc
        with f:
            yield iter(partial(f.read, self.chunk_size), b"")


def _validate_cache_dir(path: str) -> str:
    if not os.path.isdir(path):
        raise InvalidConfigError(f"cache directory at {path} could not be found")
    if not os.access(path, os.R_OK):
        raise InvalidConfigError(f"cache directory at {path} is not readable")
    if not os.access(path, os.W_OK):
        raise InvalidConfigError(f"cache directory at {path} is not writable")
    return os.path.realpath(path)
