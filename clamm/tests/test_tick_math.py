"""
Tick Math 테스트

tick_math.py의 함수들을 테스트합니다.
온체인 값과 비교하여 정확도를 검증합니다.
"""

import pytest

from ..exceptions import (
    TickRangeError,
    SqrtPriceRangeError,
    TicksMisorderedError,
    TickMisalignedError,
    InvalidFeeError,
)
from ..math.tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    tick_to_price,
    price_to_tick,
    round_tick_to_spacing,
    get_tick_spacing_for_fee,
    min_usable_tick,
    max_usable_tick,
    check_ticks,
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO
)


class TestGetSqrtRatioAtTick:
    """get_sqrt_ratio_at_tick 테스트"""

    def test_min_tick(self):
        """최소 틱에서의 sqrtPrice"""
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO

    def test_max_tick(self):
        """최대 틱에서의 sqrtPrice"""
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    def test_tick_0(self):
        """틱 0에서의 sqrtPrice (price = 1)"""
        assert get_sqrt_ratio_at_tick(0) == 2 ** 96

    def test_positive_tick(self):
        result = get_sqrt_ratio_at_tick(100)
        assert result > 2 ** 96

    def test_negative_tick(self):
        result = get_sqrt_ratio_at_tick(-100)
        assert result < 2 ** 96

    def test_strictly_increasing(self):
        """틱이 증가하면 sqrtPrice도 증가"""
        ticks = [MIN_TICK, -500000, -60, -1, 0, 1, 60, 500000, MAX_TICK]
        prices = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert prices == sorted(prices)
        assert len(set(prices)) == len(prices)

    def test_close_to_float_formula(self):
        """1.0001^(tick/2) * 2^96 와 상대오차 1e-9 이내"""
        for tick in [-100000, -600, 600, 100000]:
            expected = 1.0001 ** (tick / 2) * 2 ** 96
            assert abs(get_sqrt_ratio_at_tick(tick) - expected) / expected < 1e-9

    def test_invalid_tick_too_low(self):
        """유효 범위를 벗어난 틱 (너무 낮음)"""
        with pytest.raises(TickRangeError):
            get_sqrt_ratio_at_tick(MIN_TICK - 1)

    def test_invalid_tick_too_high(self):
        """유효 범위를 벗어난 틱 (너무 높음). ValueError로도 잡힘"""
        with pytest.raises(ValueError):
            get_sqrt_ratio_at_tick(MAX_TICK + 1)


class TestGetTickAtSqrtRatio:
    """get_tick_at_sqrt_ratio 테스트"""

    def test_min_sqrt_ratio(self):
        """최소 sqrtRatio에서의 틱"""
        assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK

    def test_max_sqrt_ratio_minus_one(self):
        """MAX_SQRT_RATIO - 1 은 MAX_TICK - 1"""
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    def test_sqrt_ratio_at_tick_0(self):
        """sqrtPrice 2^96에서의 틱"""
        assert get_tick_at_sqrt_ratio(2 ** 96) == 0

    def test_roundtrip(self):
        """틱 -> sqrtPrice -> 틱 왕복 테스트"""
        for tick in [MIN_TICK + 1, -50000, -1000, -1, 0, 1, 1000, 50000, MAX_TICK - 1]:
            sqrt_price = get_sqrt_ratio_at_tick(tick)
            assert get_tick_at_sqrt_ratio(sqrt_price) == tick

    def test_floor_between_ticks(self):
        """두 틱 사이 가격은 아래 틱으로 내림"""
        for tick in [-887000, -200, -1, 0, 5, 123456]:
            just_below_next = get_sqrt_ratio_at_tick(tick + 1) - 1
            assert get_tick_at_sqrt_ratio(just_below_next) == tick

    def test_floor_invariant(self):
        """sqrt(t) <= p < sqrt(t + 1)"""
        for p in [MIN_SQRT_RATIO + 12345, 2 ** 90, 2 ** 96 + 1, 3 * 2 ** 100, MAX_SQRT_RATIO - 10 ** 20]:
            t = get_tick_at_sqrt_ratio(p)
            assert get_sqrt_ratio_at_tick(t) <= p < get_sqrt_ratio_at_tick(t + 1)

    def test_invalid_sqrt_ratio_too_low(self):
        """유효 범위를 벗어난 sqrtRatio (너무 낮음)"""
        with pytest.raises(SqrtPriceRangeError):
            get_tick_at_sqrt_ratio(MIN_SQRT_RATIO - 1)

    def test_invalid_sqrt_ratio_at_max(self):
        """MAX_SQRT_RATIO 자체는 범위 밖"""
        with pytest.raises(SqrtPriceRangeError):
            get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)


class TestTickToPrice:
    """tick_to_price 테스트"""

    def test_tick_0_same_decimals(self):
        """틱 0, 동일 소수점 (가격 = 1)"""
        result = tick_to_price(0, 18, 18)
        assert abs(result - 1.0) < 1e-10

    def test_tick_0_different_decimals(self):
        """틱 0, 다른 소수점 (USDC/WETH 예시)"""
        # USDC: 6 decimals, WETH: 18 decimals
        result = tick_to_price(0, 6, 18)
        # price = 1.0001^0 × 10^(6-18) = 10^(-12)
        expected = 1e-12
        assert abs(result - expected) / expected < 1e-9

    def test_positive_tick(self):
        result = tick_to_price(1000, 18, 18)
        expected = 1.0001 ** 1000
        assert abs(result - expected) / expected < 1e-6

    def test_negative_tick(self):
        result = tick_to_price(-1000, 18, 18)
        expected = 1.0001 ** (-1000)
        assert abs(result - expected) / expected < 1e-6


class TestPriceToTick:
    """price_to_tick 테스트"""

    def test_price_1_same_decimals(self):
        """가격 1, 동일 소수점"""
        assert price_to_tick(1.0, 18, 18) == 0

    def test_floor_below_one(self):
        """1보다 약간 작은 가격은 -1 틱"""
        assert price_to_tick(0.99995, 18, 18) == -1

    def test_roundtrip(self):
        """가격 -> 틱 -> 가격 왕복 테스트"""
        for price in [0.001, 0.1, 1.0, 10.0, 1000.0]:
            tick = price_to_tick(price, 18, 18)
            result_price = tick_to_price(tick, 18, 18)
            # 틱 내림으로 인한 오차 허용
            assert result_price <= price * (1 + 1e-9)
            assert abs(result_price - price) / price < 0.01

    def test_invalid_price_zero(self):
        """가격 0은 유효하지 않음"""
        with pytest.raises(ValueError):
            price_to_tick(0, 18, 18)

    def test_invalid_price_negative(self):
        """음수 가격은 유효하지 않음"""
        with pytest.raises(ValueError):
            price_to_tick(-1.0, 18, 18)


class TestRoundTickToSpacing:
    """round_tick_to_spacing 테스트

    가장 가까운 유효 틱으로 반올림합니다.
    """

    def test_already_aligned(self):
        """이미 정렬된 틱"""
        assert round_tick_to_spacing(60, 60) == 60
        assert round_tick_to_spacing(120, 60) == 120
        assert round_tick_to_spacing(-60, 60) == -60
        assert round_tick_to_spacing(0, 60) == 0

    def test_round_nearest_positive(self):
        """양수 틱 - 가장 가까운 틱으로"""
        assert round_tick_to_spacing(65, 60) == 60
        # 89-60=29 < 120-89=31
        assert round_tick_to_spacing(89, 60) == 60
        assert round_tick_to_spacing(91, 60) == 120
        # 정확히 중간인 경우 올림
        assert round_tick_to_spacing(90, 60) == 120

    def test_round_nearest_negative(self):
        """음수 틱 - 가장 가까운 틱으로"""
        assert round_tick_to_spacing(-65, 60) == -60
        assert round_tick_to_spacing(-1, 60) == 0
        assert round_tick_to_spacing(-31, 60) == -60
        assert round_tick_to_spacing(-29, 60) == 0


class TestTickSpacingHelpers:
    """수수료 티어/사용 가능 틱 헬퍼"""

    def test_spacing_for_standard_tiers(self):
        assert get_tick_spacing_for_fee(500) == 10
        assert get_tick_spacing_for_fee(3000) == 60
        assert get_tick_spacing_for_fee(10000) == 200

    def test_unknown_tier(self):
        with pytest.raises(InvalidFeeError):
            get_tick_spacing_for_fee(1234)

    def test_usable_ticks(self):
        assert min_usable_tick(60) == -887220
        assert max_usable_tick(60) == 887220
        assert min_usable_tick(1) == MIN_TICK
        assert max_usable_tick(200) == 887200


class TestCheckTicks:
    """포지션 범위 검증"""

    def test_valid_range(self):
        check_ticks(-600, 600, 60)

    def test_misordered(self):
        with pytest.raises(TicksMisorderedError):
            check_ticks(600, 600, 60)
        with pytest.raises(TicksMisorderedError):
            check_ticks(600, -600, 60)

    def test_out_of_range(self):
        with pytest.raises(TickRangeError):
            check_ticks(MIN_TICK - 1, 0)
        with pytest.raises(TickRangeError):
            check_ticks(0, MAX_TICK + 1)

    def test_misaligned(self):
        with pytest.raises(TickMisalignedError):
            check_ticks(-600, 610, 60)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
