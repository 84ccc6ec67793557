# marketplace/cache.py
"""Look-aside cache of estate search results.

For each filter fingerprint Redis holds the full ordered list of matching
estate ids (popularity desc, id asc). Pages are sliced out of that list and
only the rows on the page are loaded from the store.

A miss is answered straight from the store while a background job computes
the id list and stores it. The list is replaced with DEL + RPUSH inside one
MULTI/EXEC, so readers see either the old list or the complete new one.
Any estate write drops every list (`invalidate_all`). A refill that finishes
after an invalidation can leave a stale list until the next write; that
window is accepted.
"""
from typing import Callable, List, Optional, Sequence, Tuple

import redis
from sqlalchemy.orm import Session, sessionmaker

from . import crud
from .conditions import Predicate, require_conditions
from .errors import CacheBackendError
from .models import Estate
from .utils import get_logger

logger = get_logger("cache")
FillHook = Callable[[str, List[int]], None]


class CacheMiss(Exception):
    pass


class EstateIdCache:
    def __init__(
        self,
        client: redis.Redis,
        session_factory: sessionmaker,
        scheduler,
        key_prefix: str = "estate:ids:",
        on_fill: Optional[FillHook] = None,
    ):
        self.client = client
        self.session_factory = session_factory
        self.scheduler = scheduler
        self.key_prefix = key_prefix
        self.on_fill = on_fill

    def key(self, fingerprint: str) -> str:
        return self.key_prefix + fingerprint

    def search(
        self, db: Session, fingerprint: str, predicates: Sequence[Predicate], limit: int, offset: int
    ) -> Tuple[List[Estate], int]:
        require_conditions(list(predicates))
        try:
            ids, total = self.read(fingerprint, limit, offset)
        except CacheMiss:
            estates, total = crud.search(db, Estate, predicates, limit, offset)
            self.scheduler.submit(self.fill, fingerprint, list(predicates), name="estate-cache-fill")
            return estates, total
        estates = crud.get_estates_by_ids(db, ids)
        estates.sort(key=lambda e: (-e.popularity, e.id))
        return estates, total

    def read(self, fingerprint: str, limit: int, offset: int) -> Tuple[List[int], int]:
        """Return one page of cached ids and the full list length.

        Raises CacheMiss when nothing is cached for the fingerprint. The two
        reads are not atomic; a concurrent invalidation can shorten the page.
        """
        key = self.key(fingerprint)
        try:
            length = self.client.llen(key)
            if not length:
                raise CacheMiss(key)
            if limit <= 0 or offset >= length:
                return [], length
            values = self.client.lrange(key, offset, offset + limit - 1)
        except redis.RedisError as e:
            logger.error("Cache read failed for %s: %s", key, e)
            raise CacheBackendError("cache read failed for %s" % key) from e
        return [int(v) for v in values], length

    def fill(self, fingerprint: str, predicates: Sequence[Predicate]) -> None:
        """Recompute and store the id list; failures are logged and dropped."""
        key = self.key(fingerprint)
        try:
            db = self.session_factory()
            try:
                ids = crud.search_ids(db, Estate, predicates)
            finally:
                db.close()
            if not ids:
                return
            self.replace(key, ids)
        except Exception:
            logger.exception("Cache fill failed for %s", key)
            return
        logger.debug("Cached %d estate ids for %s", len(ids), key)
        if self.on_fill is not None:
            self.on_fill(fingerprint, ids)

    def replace(self, key: str, ids: Sequence[int]) -> None:
        with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            pipe.rpush(key, *ids)
            pipe.execute()

    def invalidate_all(self) -> int:
        """Drop every cached id list; returns the number of keys removed."""
        removed = 0
        try:
            batch = []
            for key in self.client.scan_iter(match=self.key_prefix + "*", count=500):
                batch.append(key)
                if len(batch) >= 500:
                    removed += self.client.delete(*batch)
                    batch = []
            if batch:
                removed += self.client.delete(*batch)
        except redis.RedisError as e:
            logger.error("Cache invalidation failed under %s: %s", self.key_prefix, e)
            raise CacheBackendError("cache invalidation failed") from e
        logger.info("Invalidated %d cached estate searches", removed)
        return removed
