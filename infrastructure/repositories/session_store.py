"""
内存版会话存储实现

仅限单进程：会话与统计随进程生命周期存在，不做持久化。
"""
from __future__ import annotations

import asyncio
from typing import Dict, Iterator, Optional

from domain.payment_session.entity import PaymentSession, PaymentStats
from domain.payment_session.repository import SessionStore


class InMemorySessionStore(SessionStore):
    """基于字典的会话存储，会话只增不删"""

    def __init__(self) -> None:
        self._sessions: Dict[str, PaymentSession] = {}
        self.stats = PaymentStats()
        self.lock = asyncio.Lock()

    def add(self, session: PaymentSession) -> None:
        if session.id in self._sessions:
            raise ValueError(f"Session {session.id} already stored")
        self._sessions[session.id] = session

    def get(self, session_id: str) -> Optional[PaymentSession]:
        return self._sessions.get(session_id)

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def iter_sessions(self) -> Iterator[PaymentSession]:
        # 复制一份，避免遍历过程中字典被修改
        return iter(list(self._sessions.values()))

    def count(self) -> int:
        return len(self._sessions)
