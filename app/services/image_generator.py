"""
Per-day cache-or-generate for the morning picture.

- Unforced: serve today's cached image (HIT) or generate and cache it (MISS).
- Forced: always generate; today's image is replaced only after the new one is ready (REGENERATED).
Generation errors propagate and never touch the cache. Cache write errors are logged
and the fresh image is still returned.
"""
import logging
import threading
import time
from collections.abc import Callable
from datetime import date, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from app.config import get_settings
from app.core.exceptions import ArtifactNotFound
from app.schemas.morning_image import IMAGE_MEDIA_TYPE, CacheStatus, GenerateImageOptions, GenerateImageResult
from app.services import ai_service
from app.services.artifact_store import ArtifactStore, get_artifact_store
from app.services.prompt_builder import build_image_prompt

logger = logging.getLogger(__name__)


def today_in(timezone_name: str = "UTC") -> date:
    return datetime.now(ZoneInfo(timezone_name or "UTC")).date()


def day_key(day: date) -> str:
    return day.isoformat()


class KeyedLocks:
    """One lock per key, created on demand. Locks are dropped once no thread holds or waits on them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    def acquire(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        lock.acquire()
        return lock

    def release(self, key: str, lock: threading.Lock) -> None:
        lock.release()
        with self._guard:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class ImageGenerator:
    def __init__(
        self,
        store: ArtifactStore,
        fetch_day_context: Callable[[date], str] = ai_service.fetch_day_context,
        synthesize_image: Callable[[str], tuple[bytes, str]] = ai_service.synthesize_image,
        clock: Callable[[], date] | None = None,
        single_flight: bool = True,
    ):
        self.store = store
        self._fetch_day_context = fetch_day_context
        self._synthesize_image = synthesize_image
        self._clock = clock or (lambda: today_in("UTC"))
        self._locks = KeyedLocks() if single_flight else None

    def generate(self, options: GenerateImageOptions | None = None) -> GenerateImageResult:
        options = options or GenerateImageOptions()
        today = self._clock()
        key = day_key(today)
        logger.info("Morning image requested for %s (force_regenerate=%s)", key, options.force_regenerate)

        if not options.force_regenerate:
            cached = self._read_cached(key)
            if cached is not None:
                return GenerateImageResult(image_bytes=cached, cache_status=CacheStatus.HIT, day_key=key)

        if self._locks is None:
            return self._generate_and_commit(today, key, options)

        lock = self._locks.acquire(key)
        try:
            if not options.force_regenerate:
                # Another request may have committed while we waited
                cached = self._read_cached(key)
                if cached is not None:
                    return GenerateImageResult(image_bytes=cached, cache_status=CacheStatus.HIT, day_key=key)
            return self._generate_and_commit(today, key, options)
        finally:
            self._locks.release(key, lock)

    def _read_cached(self, key: str) -> bytes | None:
        try:
            data = self.store.read(key)
        except ArtifactNotFound:
            logger.info("Cache MISS for %s", key)
            return None
        except OSError as e:
            logger.warning("Cache read failed for %s, generating instead: %s", key, e)
            return None
        logger.info("Cache HIT for %s (%d KB)", key, round(len(data) / 1024))
        return data

    def _generate_and_commit(self, today: date, key: str, options: GenerateImageOptions) -> GenerateImageResult:
        status = CacheStatus.REGENERATED if options.force_regenerate else CacheStatus.MISS
        start = time.monotonic()

        day_context = self._fetch_day_context(today)
        prompt = build_image_prompt(today, day_context, options.custom_prompt)
        if options.custom_prompt:
            logger.info("Custom prompt added: %s", options.custom_prompt)
        image_bytes, mime_type = self._synthesize_image(prompt)
        if mime_type != IMAGE_MEDIA_TYPE:
            logger.info("Model returned %s; serving and caching as %s", mime_type, IMAGE_MEDIA_TYPE)

        # Single atomic replace; the previous image stays valid until this succeeds
        try:
            self.store.write(key, image_bytes)
        except OSError as e:
            logger.warning("Failed to cache image for %s: %s", key, e)

        logger.info(
            "Morning image %s for %s in %.0fms (%d KB)",
            status.value, key, (time.monotonic() - start) * 1000, round(len(image_bytes) / 1024),
        )
        return GenerateImageResult(image_bytes=image_bytes, cache_status=status, day_key=key)


@lru_cache
def get_image_generator() -> ImageGenerator:
    settings = get_settings()
    return ImageGenerator(
        store=get_artifact_store(),
        clock=lambda: today_in(settings.day_key_timezone),
        single_flight=settings.single_flight,
    )


def generate_image(options: GenerateImageOptions | None = None) -> GenerateImageResult:
    """Entry point for routers: today's morning image plus cache status."""
    return get_image_generator().generate(options)
