"""
支付会话存储接口 - 定义会话数据访问的抽象接口
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from .entity import PaymentSession, PaymentStats


class SessionStore(ABC):
    """
    会话存储抽象接口

    持有会话映射、运行统计以及串行化所有读-改-写操作的锁。
    调用方在修改会话或统计前必须持有 ``lock``。
    """

    lock: asyncio.Lock
    stats: PaymentStats

    @abstractmethod
    def add(self, session: PaymentSession) -> None:
        """新增会话"""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[PaymentSession]:
        """根据ID获取会话"""
        pass

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        """检查会话ID是否已存在"""
        pass

    @abstractmethod
    def iter_sessions(self) -> Iterator[PaymentSession]:
        """遍历所有会话"""
        pass

    @abstractmethod
    def count(self) -> int:
        """会话总数"""
        pass
