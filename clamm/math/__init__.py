"""
Math layer for CLAMM

정수 고정소수점 수학 함수들:
- full_math: mul_div / 반올림 / 정수 폭 검사
- tick_math: Tick ↔ sqrtPrice 변환
- sqrt_price_math: 수량 변화에 따른 다음 sqrtPrice
- liquidity_math: 유동성 ↔ 토큰 수량
- fee_math: fee growth 누적과 수수료 분할
- swap_math: 단일 스왑 스텝
"""

from .tick_math import (
    get_tick_at_sqrt_ratio,
    get_sqrt_ratio_at_tick,
    tick_to_price,
    price_to_tick,
    round_tick_to_spacing,
    check_ticks,
)
from .liquidity_math import (
    add_delta,
    get_amount0_delta,
    get_amount1_delta,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from .fee_math import (
    fee_growth_inside,
    calculate_uncollected_fees,
    calculate_fee_growth_delta,
    calculate_swap_fee,
)
from .swap_math import compute_swap_step, SwapStep
