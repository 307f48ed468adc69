"""
支付会话领域服务 - 过期转换与统计记账

控制器的惰性过期与后台清理共用这里的实现，保证同一会话只被计数一次。
调用方负责持有存储锁。
"""
from __future__ import annotations

from datetime import datetime

from .entity import PaymentSession, PaymentStats
from .repository import SessionStore


def expire_session(session: PaymentSession, stats: PaymentStats, now: datetime) -> bool:
    """超时的 active 会话转为 expired 并记账；返回是否发生转换"""
    if session.expire(now):
        stats.record_expired()
        return True
    return False


def sweep_expired(store: SessionStore, now: datetime) -> int:
    """扫描全部会话，返回本次转为 expired 的数量"""
    expired = 0
    for session in store.iter_sessions():
        if expire_session(session, store.stats, now):
            expired += 1
    return expired
