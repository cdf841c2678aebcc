"""Process-lifetime template cache and the template resolver built on it."""

from typing import Any, Callable, Dict, Tuple

import structlog

from modules.notifications.adapters.base import BlobStore
from modules.notifications.templates import (
    get_default_template,
    get_template_file_name,
)

logger = structlog.get_logger()

CacheKey = Tuple[str, str]


class TemplateCache:
    """Unbounded ``(container, name) -> body`` mapping.

    Lives for the life of the process (one warm Lambda container) and has
    no eviction. Population is idempotent: two concurrent misses for the
    same key store the same body.

    Example:
        cache = TemplateCache()
        body = cache.get_or_populate(
            "templates",
            "welcome.html",
            lambda: store.fetch("templates", "welcome.html"),
        )
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, str] = {}
        self._hits = 0
        self._misses = 0

    def get_or_populate(
        self, container: str, name: str, loader: Callable[[], str]
    ) -> str:
        """Return the cached body, calling ``loader`` only on a miss.

        Nothing is cached when ``loader`` raises.
        """
        key = (container, name)
        if key in self._entries:
            self._hits += 1
            return self._entries[key]

        self._misses += 1
        body = loader()
        self._entries[key] = body
        logger.debug("template_cached", container=container, name=name)
        return body

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class TemplateResolver:
    """Resolve the HTML body for a notification kind.

    Prefers the external template from the blob store (through the cache)
    and degrades to the built-in default for the kind, or the generic
    built-in body. ``resolve`` never raises.

    Args:
        blob_store: Source of external templates
        cache: Shared template cache
        container: Bucket holding the templates
    """

    def __init__(self, blob_store: BlobStore, cache: TemplateCache, container: str):
        self._blob_store = blob_store
        self._cache = cache
        self._container = container

    @property
    def cache(self) -> TemplateCache:
        return self._cache

    def resolve(self, kind: Any) -> str:
        name = get_template_file_name(kind)
        try:
            return self._cache.get_or_populate(
                self._container,
                name,
                lambda: self._blob_store.fetch(self._container, name),
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "template_fallback_used",
                container=self._container,
                template=name,
                kind=str(kind),
                error=str(e),
                error_type=type(e).__name__,
            )
        return get_default_template(kind)
