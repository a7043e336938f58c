"""
Tick Index 테스트

틱 상태 갱신, 교차, 범위 내 fee growth 계산을 테스트합니다.
"""

import pytest

from ..constants import Q128, UINT128_MAX
from ..exceptions import CLAMMError, NumericUnderflowError, TickLiquidityOverflowError
from ..pool.ticks import TickIndex, tick_spacing_to_max_liquidity_per_tick


class TestMaxLiquidityPerTick:

    def test_spacing_1(self):
        # 887272 * 2 + 1 틱
        assert tick_spacing_to_max_liquidity_per_tick(1) == UINT128_MAX // 1774545

    def test_spacing_60(self):
        # -887220 ~ 887220, 60 간격 → 29575 틱
        assert tick_spacing_to_max_liquidity_per_tick(60) == UINT128_MAX // 29575

    def test_spacing_200(self):
        assert tick_spacing_to_max_liquidity_per_tick(200) == UINT128_MAX // 8873


class TestUpdateTick:

    def test_flips_from_zero(self):
        ticks = TickIndex(tick_spacing=60)
        flipped, gross = ticks.update_tick(-600, 0, 1000, False, 0, 0)
        assert flipped
        assert gross == 1000
        assert ticks.bitmap.is_initialized(-600)

    def test_does_not_flip_when_adding_more(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(-600, 0, 1000, False, 0, 0)
        flipped, gross = ticks.update_tick(-600, 0, 500, True, 0, 0)
        assert not flipped
        assert gross == 1500
        # 하한 +1000, 상한 -500
        assert ticks.get(-600).liquidity_net == 500

    def test_flips_to_zero(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(600, 0, 1000, True, 0, 0)
        flipped, gross = ticks.update_tick(600, 0, -1000, True, 0, 0)
        assert flipped
        assert gross == 0
        assert not ticks.bitmap.is_initialized(600)

    def test_net_sign_for_upper(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(600, 0, 1000, True, 0, 0)
        assert ticks.get(600).liquidity_net == -1000

    def test_outside_seeded_when_at_or_below_current(self):
        """현재 틱 이하의 틱은 초기화 시 outside = global"""
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(0, 0, 1, False, 15, 2)
        ticks.update_tick(60, 0, 1, True, 15, 2)
        assert ticks.get(0).fee_growth_outside_0_x128 == 15
        assert ticks.get(0).fee_growth_outside_1_x128 == 2
        assert ticks.get(60).fee_growth_outside_0_x128 == 0

    def test_outside_not_reseeded(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(0, 0, 1, False, 15, 2)
        ticks.update_tick(0, 0, 1, False, 99, 99)
        assert ticks.get(0).fee_growth_outside_0_x128 == 15

    def test_max_liquidity_per_tick(self):
        ticks = TickIndex(tick_spacing=200)
        ticks.update_tick(0, 0, ticks.max_liquidity_per_tick, False, 0, 0)
        with pytest.raises(TickLiquidityOverflowError):
            ticks.update_tick(0, 0, 1, False, 0, 0)
        assert ticks.get(0).liquidity_gross == ticks.max_liquidity_per_tick

    def test_gross_underflow(self):
        ticks = TickIndex(tick_spacing=60)
        with pytest.raises(NumericUnderflowError):
            ticks.update_tick(0, 0, -1, False, 0, 0)

    def test_get_missing_does_not_store(self):
        ticks = TickIndex(tick_spacing=60)
        assert ticks.get(120).liquidity_gross == 0
        assert 120 not in ticks
        assert len(ticks) == 0


class TestCrossTick:

    def test_flips_outside(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(60, 0, 1000, True, 0, 0)
        net = ticks.cross_tick(60, 7, 9)
        assert net == -1000
        assert ticks.get(60).fee_growth_outside_0_x128 == 7
        assert ticks.get(60).fee_growth_outside_1_x128 == 9

    def test_wraps(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(0, 0, 1000, False, 10, 10)
        ticks.cross_tick(0, 3, 3)
        assert ticks.get(0).fee_growth_outside_0_x128 == 2 ** 256 - 7

    def test_missing_tick(self):
        ticks = TickIndex(tick_spacing=60)
        assert ticks.cross_tick(120, 1, 1) == 0


class TestClearTick:

    def test_clear_inactive(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(0, 0, 5, False, 0, 0)
        ticks.update_tick(0, 0, -5, False, 0, 0)
        ticks.clear_tick(0)
        assert 0 not in ticks

    def test_clear_active_rejected(self):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(0, 0, 5, False, 0, 0)
        with pytest.raises(CLAMMError):
            ticks.clear_tick(0)


class TestFeeGrowthInside:
    """outside 누적값에서 범위 내 fee growth 복원"""

    def _range(self, tick_current, fg0):
        ticks = TickIndex(tick_spacing=60)
        ticks.update_tick(-600, tick_current, 1, False, fg0, 0)
        ticks.update_tick(600, tick_current, 1, True, fg0, 0)
        return ticks

    def test_in_range_starts_at_zero(self):
        ticks = self._range(0, 5 * Q128)
        assert ticks.get_fee_growth_inside(-600, 600, 0, 5 * Q128, 0) == (0, 0)

    def test_in_range_accumulates(self):
        ticks = self._range(0, 5 * Q128)
        assert ticks.get_fee_growth_inside(-600, 600, 0, 8 * Q128, 0) == (3 * Q128, 0)

    def test_below_range_frozen(self):
        """가격이 범위 아래로 나간 뒤 전역 성장은 범위에 반영되지 않음"""
        ticks = self._range(0, 0)
        # 0 → 2 Q128 누적 후 -600 교차 (아래로)
        ticks.cross_tick(-600, 2 * Q128, 0)
        inside = ticks.get_fee_growth_inside(-600, 600, -601, 10 * Q128, 0)
        assert inside == (2 * Q128, 0)

    def test_above_range_frozen(self):
        ticks = self._range(0, 0)
        ticks.cross_tick(600, 4 * Q128, 0)
        inside = ticks.get_fee_growth_inside(-600, 600, 600, 10 * Q128, 0)
        assert inside == (4 * Q128, 0)
