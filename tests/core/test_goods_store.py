"""SqliteGoodsStore 单元测试

测试内容：
1. 创建：优先级 = 未删除商品最大值 + 1，description 缺省为空串
2. 读取 / 更新 / 软删除的寻址与不存在语义
3. 列表：created_at 倒序、计数、分页参数归一化
4. 重排：提升 / 下调 / 同值 / 不存在
"""

import pytest

from hezzl_goods.core.exceptions import GoodNotFoundError, SamePriorityError
from hezzl_goods.core.models import (
    GoodCreateRequest,
    GoodUpdateRequest,
    ListRequest,
)


async def _create(store, name: str, project_id: int = 1, description: str | None = None):
    return await store.create_good(
        project_id, GoodCreateRequest(name=name, description=description)
    )


class TestCreate:
    """创建商品"""

    async def test_first_good_gets_priority_one(self, store_group):
        """空库第一个商品优先级为 1，removed=false"""
        good = await _create(store_group.goods_store, "apple")
        assert good.id > 0
        assert good.project_id == 1
        assert good.name == "apple"
        assert good.description == ""
        assert good.priority == 1
        assert good.removed is False
        assert good.created_at is not None

    async def test_priority_increments(self, store_group):
        """连续创建，优先级依次 +1（跨项目共享同一优先级空间）"""
        store = store_group.goods_store
        first = await _create(store, "a", project_id=1)
        second = await _create(store, "b", project_id=2)
        third = await _create(store, "c", project_id=1)
        assert [first.priority, second.priority, third.priority] == [1, 2, 3]

    async def test_removed_goods_excluded_from_max(self, store_group):
        """最大优先级只统计未删除商品"""
        store = store_group.goods_store
        await _create(store, "a")
        last = await _create(store, "b")
        await store.delete_good(last.id, 1)

        created = await _create(store, "c")
        assert created.priority == 2
        assert await store.get_max_priority() == 2

    async def test_description_kept(self, store_group):
        good = await _create(store_group.goods_store, "pear", description="green")
        assert good.description == "green"


class TestGetUpdateDelete:
    """读取 / 更新 / 软删除"""

    async def test_get_returns_created_good(self, store_group):
        store = store_group.goods_store
        created = await _create(store, "apple", description="red")
        fetched = await store.get_good(created.id, 1)
        assert fetched == created

    async def test_get_wrong_project_not_found(self, store_group):
        """id 正确但 project_id 不匹配视为不存在"""
        store = store_group.goods_store
        created = await _create(store, "apple", project_id=1)
        with pytest.raises(GoodNotFoundError):
            await store.get_good(created.id, 2)

    async def test_get_missing_not_found(self, store_group):
        with pytest.raises(GoodNotFoundError) as exc_info:
            await store_group.goods_store.get_good(999, 1)
        assert exc_info.value.good_id == 999
        assert exc_info.value.project_id == 1

    async def test_update_without_description_keeps_it(self, store_group):
        """description 为 None 时保留原值，priority 不变"""
        store = store_group.goods_store
        created = await _create(store, "old", description="keep me")
        updated = await store.update_good(created.id, 1, GoodUpdateRequest(name="new"))
        assert updated.name == "new"
        assert updated.description == "keep me"
        assert updated.priority == created.priority
        assert updated.created_at == created.created_at

    async def test_update_with_description_replaces_it(self, store_group):
        store = store_group.goods_store
        created = await _create(store, "old", description="before")
        updated = await store.update_good(
            created.id, 1, GoodUpdateRequest(name="new", description="after")
        )
        assert updated.description == "after"

    async def test_update_missing_not_found(self, store_group):
        with pytest.raises(GoodNotFoundError):
            await store_group.goods_store.update_good(42, 1, GoodUpdateRequest(name="x"))

    async def test_delete_sets_removed(self, store_group):
        """软删除后 get 仍可读到，removed=true"""
        store = store_group.goods_store
        created = await _create(store, "apple")
        receipt = await store.delete_good(created.id, 1)
        assert receipt.id == created.id
        assert receipt.project_id == 1
        assert receipt.removed is True

        fetched = await store.get_good(created.id, 1)
        assert fetched.removed is True

    async def test_delete_twice_not_found(self, store_group):
        """已删除的商品再次删除视为不存在"""
        store = store_group.goods_store
        created = await _create(store, "apple")
        await store.delete_good(created.id, 1)
        with pytest.raises(GoodNotFoundError):
            await store.delete_good(created.id, 1)

    async def test_update_removed_not_found(self, store_group):
        store = store_group.goods_store
        created = await _create(store, "apple")
        await store.delete_good(created.id, 1)
        with pytest.raises(GoodNotFoundError):
            await store.update_good(created.id, 1, GoodUpdateRequest(name="x"))


class TestList:
    """分页列表"""

    async def test_list_newest_first_with_counts(self, store_group):
        store = store_group.goods_store
        created = [await _create(store, f"g{i}") for i in range(5)]
        await store.delete_good(created[0].id, 1)

        goods, meta = await store.list_goods(ListRequest(limit=3, offset=0))
        assert [g.id for g in goods] == [c.id for c in reversed(created)][:3]
        assert meta.total == 5
        assert meta.removed == 1
        assert meta.limit == 3
        assert meta.offset == 0

    async def test_list_offset(self, store_group):
        store = store_group.goods_store
        created = [await _create(store, f"g{i}") for i in range(4)]
        goods, meta = await store.list_goods(ListRequest(limit=2, offset=2))
        assert [g.id for g in goods] == [created[1].id, created[0].id]
        assert meta.offset == 2

    async def test_list_normalizes_paging(self, store_group):
        """limit<=0 取 10，offset<0 取 0，meta 回显生效值"""
        store = store_group.goods_store
        for i in range(12):
            await _create(store, f"g{i}")
        goods, meta = await store.list_goods(ListRequest(limit=0, offset=-5))
        assert len(goods) == 10
        assert meta.limit == 10
        assert meta.offset == 0

    async def test_list_includes_removed(self, store_group):
        store = store_group.goods_store
        created = await _create(store, "gone")
        await store.delete_good(created.id, 1)
        goods, _ = await store.list_goods(ListRequest())
        assert goods[0].removed is True


class TestReprioritize:
    """优先级重排"""

    async def _three(self, store):
        a = await _create(store, "A")
        b = await _create(store, "B")
        c = await _create(store, "C")
        return a, b, c

    async def _priorities(self, store, *goods) -> list[int]:
        return [(await store.get_good(g.id, g.project_id)).priority for g in goods]

    async def test_promotion_shifts_range_down(self, store_group):
        """C(3) -> 1：A、B 各 +1，返回按新优先级升序"""
        store = store_group.goods_store
        a, b, c = await self._three(store)

        result = await store.reprioritize(c.id, 1, 1)
        assert [(p.id, p.priority) for p in result] == [(c.id, 1), (a.id, 2), (b.id, 3)]
        assert await self._priorities(store, a, b, c) == [2, 3, 1]

    async def test_demotion_shifts_range_up(self, store_group):
        """A(1) -> 3：B、C 各 -1"""
        store = store_group.goods_store
        a, b, c = await self._three(store)

        result = await store.reprioritize(a.id, 1, 3)
        assert [(p.id, p.priority) for p in result] == [(b.id, 1), (c.id, 2), (a.id, 3)]
        assert await self._priorities(store, a, b, c) == [3, 1, 2]

    async def test_partial_range_only_touches_interval(self, store_group):
        """B(2) -> 1：只有 A 被挪动，C 不在区间内"""
        store = store_group.goods_store
        a, b, c = await self._three(store)

        result = await store.reprioritize(b.id, 1, 1)
        assert {p.id for p in result} == {a.id, b.id}
        assert await self._priorities(store, a, b, c) == [2, 1, 3]

    async def test_result_carries_project_id(self, store_group):
        """结果项携带 project_id，供缓存失效使用"""
        store = store_group.goods_store
        a = await _create(store, "A", project_id=7)
        b = await _create(store, "B", project_id=8)
        result = await store.reprioritize(b.id, 8, 1)
        assert {(p.id, p.project_id) for p in result} == {(a.id, 7), (b.id, 8)}

    async def test_same_priority_rejected(self, store_group):
        store = store_group.goods_store
        a, _, _ = await self._three(store)
        with pytest.raises(SamePriorityError):
            await store.reprioritize(a.id, 1, 1)

    async def test_missing_target_not_found(self, store_group):
        store = store_group.goods_store
        await self._three(store)
        with pytest.raises(GoodNotFoundError):
            await store.reprioritize(999, 1, 1)

    async def test_removed_goods_not_shifted(self, store_group):
        """软删除的商品不参与挪动"""
        store = store_group.goods_store
        a, b, c = await self._three(store)
        await store.delete_good(b.id, 1)

        result = await store.reprioritize(c.id, 1, 1)
        assert {p.id for p in result} == {a.id, c.id}
        assert (await store.get_good(b.id, 1)).priority == 2

    async def test_priorities_stay_distinct(self, store_group):
        """多次重排后未删除商品的优先级仍两两不同"""
        store = store_group.goods_store
        goods = [await _create(store, f"g{i}") for i in range(6)]
        for good_id, target in [
            (goods[5].id, 1),
            (goods[0].id, 6),
            (goods[3].id, 2),
            (goods[1].id, 5),
        ]:
            await store.reprioritize(good_id, 1, target)

        priorities = await self._priorities(store, *goods)
        assert sorted(priorities) == [1, 2, 3, 4, 5, 6]
