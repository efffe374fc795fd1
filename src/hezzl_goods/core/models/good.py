"""Good Domain Model

goods 表的行模型及其请求/响应载体。
线上 JSON 统一使用 camelCase（projectId / createdAt / newPriority），
Python 侧使用 snake_case 字段名，两者均可用于构造。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# 列表分页默认值
DEFAULT_LIST_LIMIT = 10


class CamelModel(BaseModel):
    """camelCase 线上格式的基类"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        """按线上格式（camelCase）序列化为 JSON 字符串"""
        return self.model_dump_json(by_alias=True)


class Good(CamelModel):
    """商品 -- 以 (id, project_id) 寻址，软删除"""

    id: int = Field(description="商品 ID，由存储单调分配")
    project_id: int = Field(description="所属项目 ID")
    name: str = Field(description="商品名称，非空")
    description: str = Field(default="", description="描述，缺省为空字符串")
    priority: int = Field(ge=1, description="全局优先级，越小越靠前")
    removed: bool = Field(default=False, description="软删除标记")
    created_at: datetime = Field(description="创建时间（UTC）")


class Project(CamelModel):
    """项目（预留表，当前无业务消费者）"""

    id: int
    name: str
    created_at: datetime


class GoodCreateRequest(CamelModel):
    """创建请求体；name 的非空校验由 GoodsService 负责"""

    name: str = Field(default="", description="商品名称")
    description: str | None = Field(default=None, description="描述，可省略")


class GoodUpdateRequest(CamelModel):
    """更新请求体；description 为 null 时保留原值"""

    name: str = Field(default="", description="新名称")
    description: str | None = Field(default=None, description="新描述，null 表示不变")


class GoodDeleteReceipt(BaseModel):
    """删除回执

    线上字段名 campaignId 对应 project_id，为保持兼容必须保留。
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    project_id: int = Field(alias="campaignId")
    removed: bool = True

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ReprioritizeRequest(CamelModel):
    """重排请求体"""

    new_priority: int = Field(description="目标优先级，必须为正")


class GoodPriority(CamelModel):
    """重排结果项

    project_id 仅用于服务内部的缓存失效，不出现在响应中。
    """

    id: int
    priority: int
    project_id: int = Field(default=0, exclude=True)


class PriorityResponse(CamelModel):
    """重排响应：目标与被挪动的商品，按新优先级升序"""

    priorities: list[GoodPriority] = Field(default_factory=list)


class ListRequest(CamelModel):
    """列表分页参数"""

    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0

    def normalized(self) -> "ListRequest":
        """limit <= 0 回退为默认值，offset < 0 回退为 0"""
        return ListRequest(
            limit=self.limit if self.limit > 0 else DEFAULT_LIST_LIMIT,
            offset=self.offset if self.offset >= 0 else 0,
        )


class ListMeta(CamelModel):
    """列表元信息：总数、已删除数、实际生效的分页参数"""

    total: int = 0
    removed: int = 0
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0


class GoodsListResponse(CamelModel):
    """列表响应"""

    meta: ListMeta = Field(default_factory=ListMeta)
    goods: list[Good] = Field(default_factory=list)
