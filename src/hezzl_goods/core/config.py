"""配置模块 -- 从环境变量加载

包含数据库路径、缓存/总线后端选择、审计批量参数等可配置项。
非法的整数/浮点值记录告警后回退为默认值，不阻塞启动。
"""

import os
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

# 缓存 TTL（秒）：单条商品与列表响应共用
CACHE_TTL_SECONDS: int = 60

# 审计事件总线 subject 默认值
DEFAULT_AUDIT_SUBJECT = "goods.logs"

# 优雅关闭窗口（秒）
GRACEFUL_SHUTDOWN_TIMEOUT_S: int = 10


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("HEZZL_DATA_DIR", "data"))


class Settings(BaseModel):
    """服务配置

    环境变量:
        LOG_LEVEL / LOG_FORMAT: 日志级别与渲染模式（dev/json）
        BIND_ADDRESS: HTTP 监听地址 host:port
        GOODS_DB_PATH / GOODS_LOGS_DB_PATH: 主库与分析库 SQLite 路径
        CACHE_BACKEND: redis / memory
        REDIS_ADDR / REDIS_PASSWORD / REDIS_DB: Redis 连接
        BUS_BACKEND: nats / memory
        NATS_URL / NATS_SUBJECT: NATS 连接与审计 subject
        AUDIT_BATCH_SIZE / AUDIT_FLUSH_INTERVAL_S: 审计批量阈值与定时间隔
        REQUEST_TIMEOUT_S: 单次存储调用超时
        AUTH_PUBLIC_KEY_PATH: JWT 验签公钥（PEM）
    """

    log_level: str = Field(default="INFO", description="日志级别")
    log_format: Literal["dev", "json"] = Field(default="dev", description="日志渲染模式")
    bind_address: str = Field(default="0.0.0.0:8081", description="HTTP 监听地址")

    goods_db_path: str = Field(
        default_factory=lambda: str(_get_base_dir() / "sqlite" / "goods.db"),
        description="主库（goods / projects）路径",
    )
    goods_logs_db_path: str = Field(
        default_factory=lambda: str(_get_base_dir() / "sqlite" / "goods_logs.db"),
        description="分析库（goods_logs）路径",
    )
    db_pool_size: int = Field(default=4, ge=1, description="主库连接池大小")

    cache_backend: Literal["redis", "memory"] = Field(default="redis")
    redis_addr: str = Field(default="localhost:6379")
    redis_password: SecretStr = Field(default=SecretStr(""))
    redis_db: int = Field(default=0, ge=0)

    bus_backend: Literal["nats", "memory"] = Field(default="nats")
    nats_url: str = Field(default="nats://localhost:4222")
    nats_subject: str = Field(default=DEFAULT_AUDIT_SUBJECT)

    audit_batch_size: int = Field(default=30, ge=1, description="审计批量阈值")
    audit_flush_interval_s: float = Field(default=5.0, gt=0, description="审计定时刷写间隔")

    request_timeout_s: float = Field(default=5.0, gt=0, description="存储调用超时")
    auth_public_key_path: str | None = Field(
        default=None,
        description="JWT 公钥路径，None 使用包内置公钥",
    )

    @property
    def redis_host_port(self) -> tuple[str, int]:
        """拆分 REDIS_ADDR 为 (host, port)"""
        host, _, port = self.redis_addr.rpartition(":")
        if not host:
            return self.redis_addr, 6379
        return host, int(port)

    @property
    def bind_host_port(self) -> tuple[str, int]:
        """拆分 BIND_ADDRESS 为 (host, port)，":8081" 视为监听全部地址"""
        host, _, port = self.bind_address.rpartition(":")
        return host or "0.0.0.0", int(port)


# 字符串类环境变量 -> 字段名
_STR_ENV = {
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
    "BIND_ADDRESS": "bind_address",
    "GOODS_DB_PATH": "goods_db_path",
    "GOODS_LOGS_DB_PATH": "goods_logs_db_path",
    "CACHE_BACKEND": "cache_backend",
    "REDIS_ADDR": "redis_addr",
    "BUS_BACKEND": "bus_backend",
    "NATS_URL": "nats_url",
    "NATS_SUBJECT": "nats_subject",
    "AUTH_PUBLIC_KEY_PATH": "auth_public_key_path",
}

# 数值类环境变量 -> (字段名, 类型)
_NUM_ENV = {
    "DB_POOL_SIZE": ("db_pool_size", int),
    "REDIS_DB": ("redis_db", int),
    "AUDIT_BATCH_SIZE": ("audit_batch_size", int),
    "AUDIT_FLUSH_INTERVAL_S": ("audit_flush_interval_s", float),
    "REQUEST_TIMEOUT_S": ("request_timeout_s", float),
}


def load_settings() -> Settings:
    """从环境变量加载 Settings

    Returns:
        Settings 实例
    """
    kwargs: dict = {}

    for env_var, field in _STR_ENV.items():
        if val := os.environ.get(env_var):
            kwargs[field] = val

    if val := os.environ.get("REDIS_PASSWORD"):
        kwargs["redis_password"] = SecretStr(val)

    for env_var, (field, cast) in _NUM_ENV.items():
        if val := os.environ.get(env_var):
            try:
                kwargs[field] = cast(val)
            except ValueError:
                log.warning(
                    "invalid_numeric_config",
                    env_var=env_var,
                    value=val,
                    fallback=Settings.model_fields[field].default,
                )

    return Settings(**kwargs)
