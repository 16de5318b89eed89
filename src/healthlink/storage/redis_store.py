from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Type

from ..config import StorageSettings
from ..errors import StorageError
from .base import R, RecordStorage
from .models import Record

logger = logging.getLogger(__name__)


def connect_redis(settings: StorageSettings):
    """Return a Redis client, or FakeRedis when ``USE_FAKEREDIS`` is on."""
    if settings.use_fakeredis:
        import fakeredis
        return fakeredis.FakeRedis(decode_responses=False)
    from redis import Redis
    client = Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password or None,
        ssl=settings.redis_ssl,
        decode_responses=False,
    )
    try:
        client.ping()
    except Exception as exc:
        raise StorageError(f'Redis unavailable at {settings.redis_host}:{settings.redis_port}: {exc}')
    return client


class RedisStorage(RecordStorage):
    """Each collection is a hash of id -> JSON plus a list holding insertion order.

    Single writes are atomic in Redis. Chat session updates read then write,
    so concurrent updates to one session from separate processes are
    last-writer-wins.
    """

    def __init__(self, client: Any, *, key_prefix: str = 'healthlink', seed_clinics: bool = True):
        self._r = client
        self._prefix = key_prefix
        if seed_clinics:
            self.seed_sample_clinics()

    def _hash_key(self, collection: str) -> str:
        return f'{self._prefix}:{collection}'

    def _order_key(self, collection: str) -> str:
        return f'{self._prefix}:{collection}:order'

    @staticmethod
    def _decode(raw: Any, cls: Type[R]) -> Optional[R]:
        if raw is None:
            return None
        try:
            text = raw.decode('utf-8') if isinstance(raw, bytes) else str(raw)
            return cls.from_dict(json.loads(text))
        except (ValueError, TypeError) as exc:
            raise StorageError(f'Corrupt {cls.__name__} record: {exc}')

    def _put(self, collection: str, record: Record) -> None:
        record_id = record.id  # type: ignore[attr-defined]
        payload = json.dumps(record.to_dict(), ensure_ascii=False).encode('utf-8')
        try:
            created = self._r.hset(self._hash_key(collection), record_id, payload)
            if created:
                self._r.rpush(self._order_key(collection), record_id)
        except Exception as exc:
            raise StorageError(f'Failed to write {collection}/{record_id}: {exc}')

    def _get(self, collection: str, record_id: str, cls: Type[R]) -> Optional[R]:
        try:
            raw = self._r.hget(self._hash_key(collection), record_id)
        except Exception as exc:
            raise StorageError(f'Failed to read {collection}/{record_id}: {exc}')
        return self._decode(raw, cls)

    def _values(self, collection: str, cls: Type[R]) -> List[R]:
        try:
            ids = self._r.lrange(self._order_key(collection), 0, -1)
            if not ids:
                return []
            raws = self._r.hmget(self._hash_key(collection), ids)
        except Exception as exc:
            raise StorageError(f'Failed to list {collection}: {exc}')
        out = []
        for raw in raws:
            record = self._decode(raw, cls)
            if record is not None:
                out.append(record)
        return out

    def _delete(self, collection: str, record_id: str) -> bool:
        try:
            removed = self._r.hdel(self._hash_key(collection), record_id)
            if removed:
                self._r.lrem(self._order_key(collection), 0, record_id)
        except Exception as exc:
            raise StorageError(f'Failed to delete {collection}/{record_id}: {exc}')
        return bool(removed)
