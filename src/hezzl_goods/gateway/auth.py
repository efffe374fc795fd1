"""Bearer 令牌认证 -- RSA 签名的 JWT

Authorization: Bearer <header.payload.signature>
- 仅接受 RS256 / RS384 / RS512
- exp 必须存在且未过期
- claims.userId 必须存在；email / role 可选

验签公钥（PEM）在 lifespan 中加载到 app.state.public_key。
"""

from importlib import resources
from pathlib import Path

import jwt
import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from fastapi import Header, Request

from ..core.exceptions import UnauthorizedError
from ..core.models import UserInfo

log = structlog.get_logger()

RSA_ALGORITHMS = ["RS256", "RS384", "RS512"]

_BEARER_PREFIX = "Bearer "


def load_public_key(path: str | None = None) -> RSAPublicKey:
    """加载 RSA 公钥；path 为空时读取包内置的 keys/public_key.pem

    Raises:
        ValueError: 文件内容不是 RSA 公钥
    """
    if path is None:
        pem = (
            resources.files("hezzl_goods.gateway")
            .joinpath("keys/public_key.pem")
            .read_bytes()
        )
    else:
        pem = Path(path).read_bytes()

    key = serialization.load_pem_public_key(pem)
    if not isinstance(key, RSAPublicKey):
        raise ValueError("auth public key must be an RSA key")
    return key


def decode_token(token: str, public_key: RSAPublicKey) -> UserInfo:
    """验签并解析 claims

    Raises:
        UnauthorizedError: 结构、签名、算法、过期或 claims 任一不合法
    """
    if token.count(".") != 2:
        raise UnauthorizedError("malformed token")

    try:
        claims = jwt.decode(
            token,
            public_key,
            algorithms=RSA_ALGORITHMS,
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("token expired") from e
    except jwt.PyJWTError as e:
        raise UnauthorizedError(str(e)) from e

    user_id = claims.get("userId")
    if not user_id:
        raise UnauthorizedError("missing userId claim")

    return UserInfo(
        user_id=str(user_id),
        email=claims.get("email") or "",
        role=claims.get("role") or "",
    )


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> UserInfo:
    """FastAPI 依赖：解析 Authorization 头并绑定调用方到日志上下文"""
    if not authorization:
        raise UnauthorizedError("missing authorization header")
    if not authorization.startswith(_BEARER_PREFIX):
        raise UnauthorizedError("authorization scheme must be Bearer")

    token = authorization[len(_BEARER_PREFIX):].strip()
    user = decode_token(token, request.app.state.public_key)

    structlog.contextvars.bind_contextvars(user_id=user.user_id, role=user.role)
    return user
