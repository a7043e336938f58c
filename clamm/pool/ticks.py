"""
Tick Index - 틱별 유동성/수수료 상태

희소 dict(tick → TickInfo)와 TickBitmap을 함께 관리합니다.
TickInfo의 활성 상태(liquidity_gross != 0)가 바뀌면 같은 호출 안에서
비트맵도 반전되므로 두 구조는 항상 일치합니다.
"""

from typing import Dict, Tuple

from ..constants import MIN_TICK, MAX_TICK, UINT128_MAX
from ..exceptions import TickLiquidityOverflowError, CLAMMError
from ..math.full_math import wrap_uint256, to_int128
from ..math.liquidity_math import add_delta
from ..math.fee_math import fee_growth_inside
from .tick_bitmap import TickBitmap
from .types import TickInfo


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    """틱 간격에 따른 틱당 최대 유동성

    사용 가능한 모든 틱에 최대 유동성이 걸려도 활성 유동성 합이
    uint128을 넘지 않도록 합니다.
    """
    # 0 방향 절삭
    min_tick = -(-MIN_TICK // tick_spacing) * tick_spacing
    max_tick = (MAX_TICK // tick_spacing) * tick_spacing
    num_ticks = (max_tick - min_tick) // tick_spacing + 1
    return UINT128_MAX // num_ticks


class TickIndex:
    """틱 상태 저장소

    사용법:
        ticks = TickIndex(tick_spacing=60)
        flipped, gross = ticks.update_tick(-600, tick_current=0, liquidity_delta=1000,
                                           upper=False, fee_growth_global_0=0,
                                           fee_growth_global_1=0)
    """

    def __init__(self, tick_spacing: int):
        self.tick_spacing = tick_spacing
        self.max_liquidity_per_tick = tick_spacing_to_max_liquidity_per_tick(tick_spacing)
        self.ticks: Dict[int, TickInfo] = {}
        self.bitmap = TickBitmap(tick_spacing)

    def get(self, tick: int) -> TickInfo:
        """틱 정보 조회 (없으면 빈 TickInfo, 저장하지 않음)"""
        return self.ticks.get(tick) or TickInfo()

    def __contains__(self, tick: int) -> bool:
        return tick in self.ticks

    def __len__(self) -> int:
        return len(self.ticks)

    def peek_liquidity_gross_after(self, tick: int, liquidity_delta: int) -> int:
        """update_tick 적용 후 liquidity_gross (상태 변경 없음)"""
        return add_delta(self.get(tick).liquidity_gross, liquidity_delta)

    def update_tick(
        self,
        tick: int,
        tick_current: int,
        liquidity_delta: int,
        upper: bool,
        fee_growth_global_0: int,
        fee_growth_global_1: int,
    ) -> Tuple[bool, int]:
        """틱에 유동성 변화 적용

        Args:
            tick: 갱신할 틱
            tick_current: 풀의 현재 틱
            liquidity_delta: 유동성 변화량 (부호 있음)
            upper: 포지션의 상한 경계면 True
            fee_growth_global_0: 현재 token0 전역 fee growth
            fee_growth_global_1: 현재 token1 전역 fee growth

        Returns:
            (flipped, liquidity_gross_after)

        Raises:
            NumericUnderflowError: liquidity_gross가 음수가 되는 경우
            TickLiquidityOverflowError: 틱당 최대 유동성 초과
        """
        info = self.get(tick)
        gross_before = info.liquidity_gross
        gross_after = add_delta(gross_before, liquidity_delta)

        if liquidity_delta > 0 and gross_after > self.max_liquidity_per_tick:
            raise TickLiquidityOverflowError(tick, gross_after, self.max_liquidity_per_tick)

        if upper:
            net_after = to_int128(info.liquidity_net - liquidity_delta)
        else:
            net_after = to_int128(info.liquidity_net + liquidity_delta)

        flipped = (gross_after == 0) != (gross_before == 0)

        if gross_before == 0 and tick <= tick_current:
            # 초기화 이전의 모든 수수료는 틱 아래에서 발생했다고 가정
            info.fee_growth_outside_0_x128 = fee_growth_global_0
            info.fee_growth_outside_1_x128 = fee_growth_global_1

        info.liquidity_gross = gross_after
        info.liquidity_net = net_after
        self.ticks[tick] = info

        if flipped:
            self.bitmap.flip_tick(tick)

        return flipped, gross_after

    def cross_tick(self, tick: int, fee_growth_global_0: int, fee_growth_global_1: int) -> int:
        """가격이 틱을 지날 때 outside 누적값을 반대편 기준으로 전환

        Returns:
            틱의 liquidity_net (방향에 따른 부호 조정은 호출자 몫)
        """
        info = self.ticks.get(tick)
        if info is None:
            return 0
        info.fee_growth_outside_0_x128 = wrap_uint256(fee_growth_global_0 - info.fee_growth_outside_0_x128)
        info.fee_growth_outside_1_x128 = wrap_uint256(fee_growth_global_1 - info.fee_growth_outside_1_x128)
        return info.liquidity_net

    def clear_tick(self, tick: int) -> None:
        """비활성화된 틱 저장소 삭제"""
        info = self.ticks.get(tick)
        if info is None:
            return
        if info.liquidity_gross != 0:
            raise CLAMMError(f"활성 틱은 삭제할 수 없습니다: {tick} (gross={info.liquidity_gross})")
        del self.ticks[tick]

    def next_initialized_tick(self, tick: int, lte: bool) -> Tuple[int, bool]:
        """비트맵에서 같은 워드 안의 다음 초기화된 틱 검색"""
        return self.bitmap.next_initialized_tick_within_one_word(tick, lte)

    def get_fee_growth_inside(
        self,
        tick_lower: int,
        tick_upper: int,
        tick_current: int,
        fee_growth_global_0: int,
        fee_growth_global_1: int,
    ) -> Tuple[int, int]:
        """범위 [tick_lower, tick_upper) 내 fee growth (token0, token1)"""
        lower = self.get(tick_lower)
        upper = self.get(tick_upper)

        inside_0 = fee_growth_inside(
            tick_lower, tick_upper, tick_current,
            fee_growth_global_0,
            lower.fee_growth_outside_0_x128,
            upper.fee_growth_outside_0_x128,
        )
        inside_1 = fee_growth_inside(
            tick_lower, tick_upper, tick_current,
            fee_growth_global_1,
            lower.fee_growth_outside_1_x128,
            upper.fee_growth_outside_1_x128,
        )
        return inside_0, inside_1
