import asyncio
from typing import Any, Dict

from core.config import settings
from core.logging_config import get_logger
from grpc_app.server import create_server
from infrastructure.database import create_tables, engine


logger = get_logger(__name__)


def startup_info() -> Dict[str, Any]:
    """启动日志字段"""
    return {
        "project": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "address": f"{settings.grpc.host}:{settings.grpc.port}",
        "provider": settings.provider.id,
        "pool_enabled": settings.database.pool_enabled,
    }


async def main() -> None:
    if not settings.grpc.enabled:
        logger.warning("grpc_disabled", message="gRPC disabled by config (GRPC__ENABLED=false)")
        return

    # 无迁移：启动时按模型建表（已存在则跳过）
    await create_tables()

    server = await create_server()
    info = startup_info()
    logger.info("grpc_starting", **info)
    await server.start()
    logger.info("grpc_started", address=info["address"])
    try:
        await server.wait_for_termination()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("grpc_stopping")
        await server.stop(grace=None)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
