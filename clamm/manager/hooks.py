"""
Hooks - 풀 연산 전후 확장 지점

PoolKey.hooks 에 BaseHooks 하위 클래스 인스턴스를 지정하면 PoolManager가
각 연산 전후로 해당 메서드를 호출합니다. 기본 구현은 아무것도 하지 않습니다.

before_swap 의 반환값만 사용됩니다: None이 아니면 이번 스왑의 LP 수수료를
대체합니다 (동적 수수료).
"""

from typing import Hashable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..pool.types import PoolKey, ModifyLiquidityParams, SwapParams, BalanceDelta


class BaseHooks:

    def before_modify_liquidity(self, sender: Hashable, key: "PoolKey", params: "ModifyLiquidityParams") -> None:
        pass

    def after_modify_liquidity(
        self,
        sender: Hashable,
        key: "PoolKey",
        params: "ModifyLiquidityParams",
        delta: "BalanceDelta",
        fees_accrued: "BalanceDelta",
    ) -> None:
        pass

    def before_swap(self, sender: Hashable, key: "PoolKey", params: "SwapParams") -> Optional[int]:
        """LP 수수료 대체값 (pips) 또는 None"""
        return None

    def after_swap(self, sender: Hashable, key: "PoolKey", params: "SwapParams", delta: "BalanceDelta") -> None:
        pass

    def before_donate(self, sender: Hashable, key: "PoolKey", amount0: int, amount1: int) -> None:
        pass

    def after_donate(self, sender: Hashable, key: "PoolKey", amount0: int, amount1: int) -> None:
        pass
