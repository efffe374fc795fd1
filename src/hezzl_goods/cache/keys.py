"""缓存键空间

good:{id}:{project_id}          单条商品快照
goods:list:{limit}:{offset}     列表响应
goods:list:index                已缓存列表键的索引集合，用于整体失效
"""

GOODS_LIST_INDEX_KEY = "goods:list:index"


def good_key(good_id: int, project_id: int) -> str:
    return f"good:{good_id}:{project_id}"


def goods_list_key(limit: int, offset: int) -> str:
    return f"goods:list:{limit}:{offset}"
