#web/backend/app/repository.py
import time
from threading import Lock
from typing import Callable, Dict

from .config import SEEN_MESSAGE_TTL_SECONDS


class SeenMessageStore:
    """
    Id входящих сообщений, которые уже обработаны.
    Живёт в памяти процесса; записи старше ttl забываются.
    """

    def __init__(self, ttl_seconds: float = SEEN_MESSAGE_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._seen: Dict[str, float] = {}
        self._lock = Lock()

    def already_handled(self, message_id: str) -> bool:
        """True, если id уже встречался; иначе запоминает его и возвращает False."""
        now = self.clock()
        with self._lock:
            expired = [k for k, t in self._seen.items() if now - t > self.ttl_seconds]
            for key in expired:
                del self._seen[key]

            if message_id in self._seen:
                return True
            self._seen[message_id] = now
            return False

    def __len__(self) -> int:
        return len(self._seen)
