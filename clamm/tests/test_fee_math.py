"""
Fee Math 테스트

백서 Section 6.3, 6.4 기반 수수료 계산 함수들을 테스트합니다.
"""

import pytest

from ..exceptions import InvalidFeeError
from ..math.fee_math import (
    fee_growth_above,
    fee_growth_below,
    fee_growth_inside,
    calculate_uncollected_fees,
    calculate_fee_growth_delta,
    fee_growth_increment,
    validate_lp_fee,
    validate_protocol_fee,
    calculate_swap_fee,
    protocol_fee_for_step,
)
from ..constants import Q128, MAX_LP_FEE, MAX_PROTOCOL_FEE


class TestFeeGrowthAbove:
    """fee_growth_above 테스트 (f_a)"""

    def test_current_tick_above_target(self):
        """현재 틱이 타겟 틱 위에 있을 때: f_a = f_g - f_o"""
        # i_c >= i 이면 f_a = f_g - f_o
        f_g = 1000
        f_o = 300
        result = fee_growth_above(tick_idx=100, current_tick=150,
                                   fee_growth_global=f_g, fee_growth_outside=f_o)
        assert result == f_g - f_o  # 700

    def test_current_tick_at_target(self):
        """현재 틱이 타겟 틱과 같을 때: f_a = f_g - f_o"""
        f_g = 1000
        f_o = 300
        result = fee_growth_above(tick_idx=100, current_tick=100,
                                   fee_growth_global=f_g, fee_growth_outside=f_o)
        assert result == f_g - f_o  # 700

    def test_current_tick_below_target(self):
        """현재 틱이 타겟 틱 아래에 있을 때: f_a = f_o"""
        f_g = 1000
        f_o = 300
        result = fee_growth_above(tick_idx=100, current_tick=50,
                                   fee_growth_global=f_g, fee_growth_outside=f_o)
        assert result == f_o  # 300


class TestFeeGrowthBelow:
    """fee_growth_below 테스트 (f_b)"""

    def test_current_tick_above_target(self):
        """현재 틱이 타겟 틱 위에 있을 때: f_b = f_o"""
        f_g = 1000
        f_o = 300
        result = fee_growth_below(tick_idx=100, current_tick=150,
                                   fee_growth_global=f_g, fee_growth_outside=f_o)
        assert result == f_o  # 300

    def test_current_tick_at_target(self):
        """현재 틱이 타겟 틱과 같을 때: f_b = f_o"""
        f_g = 1000
        f_o = 300
        result = fee_growth_below(tick_idx=100, current_tick=100,
                                   fee_growth_global=f_g, fee_growth_outside=f_o)
        assert result == f_o  # 300

    def test_current_tick_below_target(self):
        """현재 틱이 타겟 틱 아래에 있을 때: f_b = f_g - f_o"""
        f_g = 1000
        f_o = 300
        result = fee_growth_below(tick_idx=100, current_tick=50,
                                   fee_growth_global=f_g, fee_growth_outside=f_o)
        assert result == f_g - f_o  # 700


class TestFeeGrowthInside:
    """fee_growth_inside 테스트 (f_r)

    f_r = f_g - f_b(i_l) - f_a(i_u)
    """

    def test_current_tick_in_range(self):
        """현재 틱이 범위 내에 있을 때"""
        # tick_lower = 100, tick_upper = 200, current_tick = 150
        # f_b(100) = f_o_lower (i_c >= i_l)
        # f_a(200) = f_o_upper (i_c < i_u)
        f_g = 1000
        f_o_lower = 100
        f_o_upper = 200

        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=150,
            fee_growth_global=f_g,
            fee_growth_outside_lower=f_o_lower,
            fee_growth_outside_upper=f_o_upper
        )
        # f_b = f_o_lower = 100
        # f_a = f_o_upper = 200
        # f_r = 1000 - 100 - 200 = 700
        assert result == 700

    def test_current_tick_below_range(self):
        """현재 틱이 범위 아래에 있을 때"""
        # tick_lower = 100, tick_upper = 200, current_tick = 50
        f_g = 1000
        f_o_lower = 100
        f_o_upper = 200

        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=50,
            fee_growth_global=f_g,
            fee_growth_outside_lower=f_o_lower,
            fee_growth_outside_upper=f_o_upper
        )
        # f_b(100) = f_g - f_o_lower = 900 (i_c < i_l)
        # f_a(200) = f_o_upper = 200 (i_c < i_u)
        # f_r = 1000 - 900 - 200 = -100 (언더플로우 처리됨)
        # Python에서는 음수가 되므로 2^256 래핑
        expected = 2**256 - 100
        assert result == expected

    def test_current_tick_above_range(self):
        """현재 틱이 범위 위에 있을 때"""
        # tick_lower = 100, tick_upper = 200, current_tick = 250
        f_g = 1000
        f_o_lower = 100
        f_o_upper = 200

        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=250,
            fee_growth_global=f_g,
            fee_growth_outside_lower=f_o_lower,
            fee_growth_outside_upper=f_o_upper
        )
        # f_b(100) = f_o_lower = 100 (i_c >= i_l)
        # f_a(200) = f_g - f_o_upper = 800 (i_c >= i_u)
        # f_r = 1000 - 100 - 800 = 100
        assert result == 100


class TestCalculateUncollectedFees:
    """calculate_uncollected_fees 테스트 (f_u)

    f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128
    """

    def test_basic_calculation(self):
        """기본 수수료 계산"""
        liquidity = 1000000
        f_r_current = 500 * Q128  # Q128 인코딩
        f_r_last = 100 * Q128

        result = calculate_uncollected_fees(liquidity, f_r_current, f_r_last)
        # f_u = 1000000 × (500 - 100)
        assert result == 400_000_000

    def test_rounds_down(self):
        """토큰 단위 미만은 버림"""
        result = calculate_uncollected_fees(3, Q128 // 2, 0)
        assert result == 1

    def test_zero_delta(self):
        """수수료 변화 없음"""
        liquidity = 1000000
        f_r = 100 * Q128

        result = calculate_uncollected_fees(liquidity, f_r, f_r)
        assert result == 0

    def test_underflow_handling(self):
        """언더플로우 처리 (fee growth가 래핑된 경우)"""
        liquidity = 1000000
        f_r_current = 100 * Q128
        f_r_last = 200 * Q128  # current < last (래핑 발생)

        result = calculate_uncollected_fees(liquidity, f_r_current, f_r_last)
        # 래핑 처리됨
        assert result > 0


class TestCalculateFeeGrowthDelta:
    """calculate_fee_growth_delta 테스트"""

    def test_normal_delta(self):
        """일반적인 델타 계산"""
        result = calculate_fee_growth_delta(1000, 500)
        assert result == 500

    def test_underflow_wraparound(self):
        """언더플로우 래핑"""
        result = calculate_fee_growth_delta(100, 200)
        expected = 2**256 - 100
        assert result == expected


class TestFeeGrowthIncrement:
    """fee_growth_increment 테스트"""

    def test_per_unit_liquidity(self):
        assert fee_growth_increment(1000, 100) == 10 * Q128

    def test_zero_liquidity(self):
        """유동성이 없으면 누적하지 않음"""
        assert fee_growth_increment(1000, 0) == 0

    def test_increment_then_collect(self):
        """성장률 누적 후 포지션 수수료 = 원래 수수료 (내림)"""
        growth = fee_growth_increment(999, 7)
        assert calculate_uncollected_fees(7, growth, 0) in (998, 999)


class TestFeeValidation:
    """수수료 범위 검증"""

    def test_lp_fee_bounds(self):
        assert validate_lp_fee(0) == 0
        assert validate_lp_fee(MAX_LP_FEE) == MAX_LP_FEE
        with pytest.raises(InvalidFeeError):
            validate_lp_fee(MAX_LP_FEE + 1)
        with pytest.raises(InvalidFeeError):
            validate_lp_fee(-1)

    def test_protocol_fee_bounds(self):
        assert validate_protocol_fee(MAX_PROTOCOL_FEE) == MAX_PROTOCOL_FEE
        with pytest.raises(InvalidFeeError):
            validate_protocol_fee(MAX_PROTOCOL_FEE + 1)


class TestSwapFee:
    """calculate_swap_fee / protocol_fee_for_step 테스트"""

    def test_no_protocol_fee(self):
        assert calculate_swap_fee(0, 3000) == 3000

    def test_combined_fee(self):
        # 1000 + 3000 - 1000 * 3000 / 1e6 = 3997
        assert calculate_swap_fee(1000, 3000) == 3997

    def test_protocol_only(self):
        """LP 수수료 0이면 총 수수료 = 프로토콜 수수료"""
        assert calculate_swap_fee(500, 0) == 500

    def test_step_protocol_share_proportional(self):
        """일반 경우: (입력 + 수수료) × 프로토콜 요율"""
        swap_fee = calculate_swap_fee(1000, 3000)
        assert protocol_fee_for_step(swap_fee, 1000, 996_003, 3_997) == 1000

    def test_step_protocol_share_whole_fee(self):
        """swap_fee == protocol_fee 이면 스텝 수수료 전체가 프로토콜 몫"""
        assert protocol_fee_for_step(500, 500, 10_000, 5) == 5

    def test_step_no_protocol_fee(self):
        assert protocol_fee_for_step(3000, 0, 10_000, 30) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
