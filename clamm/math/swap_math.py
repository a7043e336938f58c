"""
Swap Math - 단일 스왑 스텝 계산

현재 가격에서 목표 가격까지, 현재 활성 유동성으로 소비/생성되는
입력·출력 수량과 수수료를 계산합니다. 수수료는 스왑 수학 이전에
입력에서 차감되며 스왑되지 않습니다.
"""

from typing import NamedTuple

from ..constants import MAX_SWAP_FEE
from .full_math import mul_div, mul_div_rounding_up
from .liquidity_math import get_amount0_delta, get_amount1_delta
from .sqrt_price_math import get_next_sqrt_price_from_input, get_next_sqrt_price_from_output


class SwapStep(NamedTuple):
    """compute_swap_step 결과"""
    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


def get_sqrt_price_target(
    zero_for_one: bool,
    sqrt_price_next_x96: int,
    sqrt_price_limit_x96: int
) -> int:
    """다음 틱 가격과 가격 제한 중 스왑 방향 기준으로 더 가까운 쪽"""
    if zero_for_one:
        return max(sqrt_price_next_x96, sqrt_price_limit_x96)
    return min(sqrt_price_next_x96, sqrt_price_limit_x96)


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int
) -> SwapStep:
    """한 스텝의 스왑 결과 계산

    Args:
        sqrt_price_current_x96: 현재 sqrtPriceX96
        sqrt_price_target_x96: 이 스텝에서 넘지 않을 목표 sqrtPriceX96
        liquidity: 활성 유동성
        amount_remaining: 남은 수량. 음수면 exact input, 양수면 exact output
        fee_pips: 스왑 수수료 (pips)

    Returns:
        SwapStep(다음 가격, 입력, 출력, 수수료)
    """
    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining < 0

    if exact_in:
        amount_remaining_less_fee = mul_div(-amount_remaining, MAX_SWAP_FEE - fee_pips, MAX_SWAP_FEE)
        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True)

        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
            if fee_pips == MAX_SWAP_FEE:
                fee_amount = amount_in
            else:
                fee_amount = mul_div_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)
        else:
            amount_in = amount_remaining_less_fee
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
            # 목표에 도달하지 못했으면 남은 입력 전부가 수수료
            fee_amount = -amount_remaining - amount_in

        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False)
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False)

        if amount_remaining >= amount_out:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            amount_out = amount_remaining
            sqrt_price_next_x96 = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, amount_out, zero_for_one
            )

        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True)
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)

    return SwapStep(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
