"""Gateway 业务服务"""

from .goods_service import GoodsService

__all__ = ["GoodsService"]
