"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request

from .services.goods_service import GoodsService


def get_goods_service(request: Request) -> GoodsService:
    """从 app.state 获取 GoodsService 实例"""
    return request.app.state.goods_service
