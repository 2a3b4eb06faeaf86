"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional


class GrpcTlsSettings(BaseModel):
    enabled: bool = False
    cert: Optional[str] = None
    key: Optional[str] = None
    ca: Optional[str] = None


class GrpcSettings(BaseModel):
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 50051
    # This maps to GRPC option grpc.max_concurrent_streams
    max_concurrent_streams: int = 100
    # Capacity of the queue between a streaming producer and the RPC
    stream_buffer_size: int = 4
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)

    @field_validator("stream_buffer_size")
    @classmethod
    def _positive_buffer(cls, v: int) -> int:
        if v < 1:
            raise ValueError("stream_buffer_size must be >= 1")
        return v


class DatabaseSettings(BaseModel):
    url: str = "sqlite+aiosqlite:///./provider.db"
    echo: bool = False
    # 默认每次操作新建连接（NullPool），开启后使用 SQLAlchemy 默认连接池
    pool_enabled: bool = False
    pool_size: int = 5


class ProviderSettings(BaseModel):
    """Identity reported by the metadata RPCs."""

    id: str = "local"
    name: str = "Local"
    description: str = "Local tasks are stored on this device."
    icon_name: str = "user-home-symbolic"
    # Column used by ReadTaskCountFromList
    count_tasks_by: Literal["id_task", "parent_list"] = "id_task"


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Local Task Provider")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    # 未设置时 DEBUG 下为 DEBUG，否则为 INFO
    LOG_LEVEL: Optional[str] = Field(default=None)

    # 分组配置：嵌套模型，环境变量形如 DATABASE__URL / GRPC__PORT
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    grpc: GrpcSettings = Field(default_factory=GrpcSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
