from .async_engine import get_async_engine, get_async_session_factory, normalize_async_url
from .models import Base, CounterORM, SyncRecordORM
from .stores import AsyncSqlAlchemySequenceStore, AsyncSqlAlchemySyncKeyStore
from .uow import AsyncSqlAlchemyUnitOfWork

__all__ = [
    "get_async_engine",
    "get_async_session_factory",
    "normalize_async_url",
    "Base",
    "CounterORM",
    "SyncRecordORM",
    "AsyncSqlAlchemySequenceStore",
    "AsyncSqlAlchemySyncKeyStore",
    "AsyncSqlAlchemyUnitOfWork",
]
