"""
Position Ledger - 포지션별 유동성과 수수료 스냅샷

키: (owner, tick_lower, tick_upper, salt). 포지션은 삭제되지 않으며
유동성이 0이 되어도 스냅샷은 남습니다.
"""

from typing import Dict, Iterator, Tuple

from ..math.fee_math import calculate_uncollected_fees
from ..math.liquidity_math import add_delta
from .types import PositionInfo, PositionKey


class PositionLedger:

    def __init__(self):
        self.positions: Dict[PositionKey, PositionInfo] = {}

    def get(self, key: PositionKey) -> PositionInfo:
        return self.positions.get(key) or PositionInfo()

    def __contains__(self, key: PositionKey) -> bool:
        return key in self.positions

    def __len__(self) -> int:
        return len(self.positions)

    def items(self) -> Iterator[Tuple[PositionKey, PositionInfo]]:
        return iter(self.positions.items())

    def update(
        self,
        key: PositionKey,
        liquidity_delta: int,
        fee_growth_inside_0: int,
        fee_growth_inside_1: int,
    ) -> Tuple[int, int]:
        """포지션 갱신 후 정산할 수수료 반환

        수수료는 변경 *이전* 유동성 기준으로 계산합니다. 누적 기간 동안
        존재했던 포지션 크기에 대해서만 수수료가 발생하기 때문입니다.

        Args:
            key: 포지션 키
            liquidity_delta: 유동성 변화량 (부호 있음)
            fee_growth_inside_0: 현재 범위 내 token0 fee growth
            fee_growth_inside_1: 현재 범위 내 token1 fee growth

        Returns:
            (fees_owed_0, fees_owed_1)

        Raises:
            NumericUnderflowError: 유동성이 음수가 되는 경우
        """
        position = self.get(key)
        liquidity_before = position.liquidity

        if liquidity_before == 0 and liquidity_delta == 0:
            return 0, 0

        liquidity_after = add_delta(liquidity_before, liquidity_delta)

        fees_owed_0 = calculate_uncollected_fees(
            liquidity_before, fee_growth_inside_0, position.fee_growth_inside_0_last_x128
        )
        fees_owed_1 = calculate_uncollected_fees(
            liquidity_before, fee_growth_inside_1, position.fee_growth_inside_1_last_x128
        )

        position.liquidity = liquidity_after
        position.fee_growth_inside_0_last_x128 = fee_growth_inside_0
        position.fee_growth_inside_1_last_x128 = fee_growth_inside_1
        self.positions[key] = position

        return fees_owed_0, fees_owed_1
