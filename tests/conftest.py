"""全局 pytest 配置 -- 临时 SQLite、进程内缓存/总线、RSA 密钥与令牌 fixture"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient

from hezzl_goods.core.config import Settings
from hezzl_goods.core.store import StoreGroup, create_store_group


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """测试用 RSA 私钥（会话级，只生成一次）"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key(rsa_private_key: rsa.RSAPrivateKey) -> rsa.RSAPublicKey:
    return rsa_private_key.public_key()


@pytest.fixture
def make_token(rsa_private_key) -> Callable[..., str]:
    """签发测试令牌；关键字参数覆盖默认 claims，expires_in=None 表示不带 exp"""

    def _make(
        algorithm: str = "RS256",
        key=None,
        expires_in: timedelta | None = timedelta(hours=1),
        **claims,
    ) -> str:
        payload = {
            "userId": "8f7f3b9e-2c5c-4b7e-9a55-0d7c6d1e4a11",
            "email": "tester@example.com",
            "role": "admin",
        }
        payload.update(claims)
        if expires_in is not None:
            payload["exp"] = datetime.now(UTC) + expires_in
        return jwt.encode(payload, key or rsa_private_key, algorithm=algorithm)

    return _make


@pytest.fixture
def auth_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """进程内缓存与总线 + 临时 SQLite 文件"""
    return Settings(
        goods_db_path=str(tmp_path / "sqlite" / "goods.db"),
        goods_logs_db_path=str(tmp_path / "sqlite" / "goods_logs.db"),
        cache_backend="memory",
        bus_backend="memory",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """已建表的主库 + 分析库"""
    group = await create_store_group(
        str(tmp_path / "goods.db"),
        str(tmp_path / "goods_logs.db"),
        pool_size=4,
    )
    yield group
    await group.close()


@pytest_asyncio.fixture
async def app(settings: Settings, rsa_public_key):
    """完整装配的 FastAPI app，手动执行 startup/shutdown（模拟 lifespan）"""
    from hezzl_goods.gateway.main import create_app, shutdown, startup

    application = create_app(settings, public_key=rsa_public_key)
    await startup(application)
    yield application
    await shutdown(application)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
