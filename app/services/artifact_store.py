"""
Durable per-day image cache. One PNG per day key (YYYY-MM-DD) under a cache directory.
Writes go through a temp file + os.replace so readers never see a partial image.
Cache location is picked once per process: /tmp on serverless hosts, project .cache otherwise.
"""
import logging
import os
import re
import tempfile
from contextlib import suppress
from functools import lru_cache
from pathlib import Path

from app.config import Settings, get_settings
from app.core.exceptions import ArtifactNotFound

logger = logging.getLogger(__name__)

DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ARTIFACT_SUFFIX = ".png"
SERVERLESS_CACHE_DIR = Path("/tmp") / "morning-pic-cache"
CACHE_BACKENDS = {"auto", "local", "tmp"}


class ArtifactStore:
    """Key -> bytes map. Subclasses implement read/write/delete."""

    def read(self, key: str) -> bytes:
        raise NotImplementedError

    def write(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        try:
            self.read(key)
        except ArtifactNotFound:
            return False
        return True


class LocalArtifactStore(ArtifactStore):
    def __init__(self, base_dir: Path | str):
        self.base_dir = Path(base_dir)

    def path_for(self, key: str) -> Path:
        if not DAY_KEY_RE.match(key or ""):
            raise ValueError(f"Invalid day key: {key!r}")
        return self.base_dir / f"{key}{ARTIFACT_SUFFIX}"

    def read(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise ArtifactNotFound(key) from None

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def write(self, key: str, data: bytes) -> None:
        """Atomically replace the image for key. Raises OSError on failure (old file kept)."""
        path = self.path_for(key)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.base_dir), prefix=path.name + ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with suppress(OSError):
                os.remove(tmp_name)
            raise
        logger.info("Cached image %s (%d KB)", path, round(len(data) / 1024))

    def delete(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return False
        return True


def _is_serverless() -> bool:
    return bool(os.environ.get("VERCEL") or os.environ.get("LAMBDA_TASK_ROOT"))


def resolve_cache_dir(settings: Settings) -> Path:
    """Cache directory from settings: explicit cache_dir wins, then backend choice."""
    if settings.cache_dir:
        return Path(settings.cache_dir)
    backend = (settings.cache_backend or "auto").strip().lower()
    if backend not in CACHE_BACKENDS:
        raise ValueError(f"cache_backend must be one of {sorted(CACHE_BACKENDS)}, got {backend!r}")
    if backend == "tmp" or (backend == "auto" and _is_serverless()):
        return SERVERLESS_CACHE_DIR
    return Path.cwd() / ".cache"


def build_artifact_store(settings: Settings) -> ArtifactStore:
    cache_dir = resolve_cache_dir(settings)
    logger.info("Image cache directory: %s", cache_dir)
    return LocalArtifactStore(cache_dir)


@lru_cache
def get_artifact_store() -> ArtifactStore:
    """Process-wide store, selected once at startup."""
    return build_artifact_store(get_settings())
