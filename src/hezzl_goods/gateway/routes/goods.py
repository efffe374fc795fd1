"""商品路由 -- /api/v1 下的全部业务接口，均需 Bearer 认证

POST   /api/v1/good/create?projectId=        创建，201
GET    /api/v1/good/get?id=&projectId=       单条读取
PATCH  /api/v1/good/update?id=&projectId=    更新名称/描述
DELETE /api/v1/good/remove?id=&projectId=    软删除，回执字段为 campaignId
GET    /api/v1/goods/list?limit=&offset=     分页列表
PATCH  /api/v1/good/reprioritize?id=&projectId=  重排优先级
"""

from fastapi import APIRouter, Depends, Query

from ...core.models import (
    DEFAULT_LIST_LIMIT,
    Good,
    GoodCreateRequest,
    GoodsListResponse,
    GoodUpdateRequest,
    ListRequest,
    PriorityResponse,
    ReprioritizeRequest,
)
from ..auth import get_current_user
from ..deps import get_goods_service
from ..services.goods_service import GoodsService

router = APIRouter(prefix="/api/v1", dependencies=[Depends(get_current_user)])


@router.post("/good/create", response_model=Good, status_code=201)
async def create_good(
    body: GoodCreateRequest,
    project_id: int = Query(alias="projectId", description="项目 ID"),
    service: GoodsService = Depends(get_goods_service),
):
    """创建商品，priority 自动取当前最大值 + 1"""
    return await service.create_good(project_id, body)


@router.get("/good/get", response_model=Good)
async def get_good(
    good_id: int = Query(alias="id", description="商品 ID"),
    project_id: int = Query(alias="projectId", description="项目 ID"),
    service: GoodsService = Depends(get_goods_service),
):
    """读取单个商品（含已软删除的）"""
    return await service.get_good(good_id, project_id)


@router.patch("/good/update", response_model=Good)
async def update_good(
    body: GoodUpdateRequest,
    good_id: int = Query(alias="id", description="商品 ID"),
    project_id: int = Query(alias="projectId", description="项目 ID"),
    service: GoodsService = Depends(get_goods_service),
):
    """更新名称，description 缺省或为 null 时保持不变"""
    return await service.update_good(good_id, project_id, body)


@router.delete("/good/remove")
async def remove_good(
    good_id: int = Query(alias="id", description="商品 ID"),
    project_id: int = Query(alias="projectId", description="项目 ID"),
    service: GoodsService = Depends(get_goods_service),
):
    """软删除，返回 {"id", "campaignId", "removed"}"""
    receipt = await service.delete_good(good_id, project_id)
    return receipt.model_dump(by_alias=True)


@router.get("/goods/list", response_model=GoodsListResponse)
async def list_goods(
    limit: int = Query(default=DEFAULT_LIST_LIMIT, description="每页条数，<=0 取默认值"),
    offset: int = Query(default=0, description="偏移量，<0 取 0"),
    service: GoodsService = Depends(get_goods_service),
):
    """分页列表，按创建时间倒序"""
    return await service.list_goods(ListRequest(limit=limit, offset=offset))


@router.patch("/good/reprioritize", response_model=PriorityResponse)
async def reprioritize_good(
    body: ReprioritizeRequest,
    good_id: int = Query(alias="id", description="商品 ID"),
    project_id: int = Query(alias="projectId", description="项目 ID"),
    service: GoodsService = Depends(get_goods_service),
):
    """重排优先级，返回目标与所有被挪动商品的新优先级"""
    priorities = await service.reprioritize(good_id, project_id, body.new_priority)
    return PriorityResponse(priorities=priorities)
