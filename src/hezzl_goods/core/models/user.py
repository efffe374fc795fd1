"""UserInfo -- 从 JWT claims 解析出的调用方身份"""

from pydantic import Field

from .good import CamelModel


class UserInfo(CamelModel):
    """已认证用户"""

    user_id: str = Field(description="用户 ID（claims.userId）")
    email: str = Field(default="", description="邮箱")
    role: str = Field(default="", description="角色")
