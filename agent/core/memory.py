from __future__ import annotations

"""In-process chat history.

Records live only as long as the process. The store is created by the app
factory and handed to request handlers, so every test can start from a
fresh instance. A relational table with the same columns can replace it as
long as it keeps ``list``/``create``/``clear``.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List

from agent.core.models import ChatRecord, NewChat


logger = logging.getLogger(__name__)

FIRST_ID = 1


class ChatStore:
    def __init__(self) -> None:
        self._records: Dict[int, ChatRecord] = {}
        self._next_id = FIRST_ID
        # FastAPI runs sync handlers on a thread pool; create/clear must not interleave.
        self._lock = threading.Lock()

    def list(self) -> List[ChatRecord]:
        with self._lock:
            return list(self._records.values())

    def create(self, chat: NewChat) -> ChatRecord:
        with self._lock:
            record = ChatRecord(
                id=self._next_id,
                message=chat.message,
                response=chat.response,
                system_prompt=chat.system_prompt,
                location=chat.location,
                timestamp=datetime.now(timezone.utc),
            )
            self._records[record.id] = record
            self._next_id += 1
        logger.info("Stored chat id=%s message_len=%s", record.id, len(record.message))
        return record

    def clear(self) -> int:
        with self._lock:
            removed = len(self._records)
            self._records = {}
            self._next_id = FIRST_ID
        logger.info("Cleared %s chats", removed)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
