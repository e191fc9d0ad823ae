"""Thread-safe in-memory link store."""

import threading
from typing import Dict, Optional

from .base import LinkStoreBase
from .models import LinkRecord


class InMemoryLinkStore(LinkStoreBase):
    """Process-lifetime token to URL map guarded by a single lock.

    Records are immutable, so a reader holding a record can never observe
    a partially written value.
    """

    def __init__(self) -> None:
        self._records: Dict[str, LinkRecord] = {}
        self._lock = threading.Lock()

    def try_insert(self, token: str, original_url: str) -> bool:
        record = LinkRecord(token=token, original_url=original_url)
        with self._lock:
            if token in self._records:
                return False
            self._records[token] = record
        return True

    def get_record(self, token: str) -> Optional[LinkRecord]:
        with self._lock:
            return self._records.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
