"""
数据库配置和连接管理
"""
from typing import Any, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from core.config import DatabaseSettings, settings
from infrastructure.models import Base


def _build_async_url(database_url: str) -> str:
    """确保数据库URL使用异步驱动"""
    url = make_url(database_url)
    drivername = url.drivername

    if "+" in drivername:
        return database_url

    driver_map = {
        "postgresql": "postgresql+asyncpg",
        "postgres": "postgresql+asyncpg",
        "mysql": "mysql+aiomysql",
        "sqlite": "sqlite+aiosqlite",
    }

    if drivername not in driver_map:
        raise ValueError(f"Unsupported database driver: {drivername}. Use an async driver or update DATABASE__URL")

    async_driver = driver_map[drivername]
    return url.set(drivername=async_driver).render_as_string(hide_password=False)


def build_engine(db: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """根据配置创建异步引擎

    未开启连接池时使用 NullPool：每次操作都打开新连接，结束即关闭。
    """
    db = db or settings.database
    kwargs: Dict[str, Any] = {"echo": db.echo}
    if db.pool_enabled:
        url = make_url(_build_async_url(db.url))
        # SQLite 的默认池不接受 pool_size
        if not url.drivername.startswith("sqlite"):
            kwargs["pool_size"] = db.pool_size
    else:
        kwargs["poolclass"] = NullPool
    return create_async_engine(_build_async_url(db.url), **kwargs)


engine = build_engine()

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)


async def create_tables(bind: Optional[AsyncEngine] = None) -> None:
    """
    创建所有表

    不做迁移：表已存在时跳过
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

