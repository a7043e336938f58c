"""
Fee Math - 수수료 누적 및 분배 계산

틱 단위 "outside" 누적값으로 범위 내 수수료 성장률을 구하고,
포지션별 미수령 수수료와 스왑 수수료/프로토콜 수수료 분할을 계산합니다.
모든 누적값은 Q128 고정소수점이며 uint256에서 랩어라운드됩니다.
차이값만 의미가 있습니다.

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # 범위 내 수수료
    f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128             # 미수령 수수료
"""

from ..constants import Q128, PIPS_DENOMINATOR, MAX_LP_FEE, MAX_PROTOCOL_FEE
from ..exceptions import InvalidFeeError
from .full_math import mul_div, wrap_uint256


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 수수료 성장률 (f_a)

    Args:
        tick_idx: 틱 인덱스 (i)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside: 틱의 fee growth outside (f_o)
    """
    if current_tick >= tick_idx:
        return wrap_uint256(fee_growth_global - fee_growth_outside)
    return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 수수료 성장률 (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    return wrap_uint256(fee_growth_global - fee_growth_outside)


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """범위 내 fee growth 계산 (f_r)

    f_r = f_g - f_b(i_l) - f_a(i_u) 는 다음 세 경우와 같습니다 (mod 2^256):
        i_c < i_l:         f_o(i_l) - f_o(i_u)
        i_c >= i_u:        f_o(i_u) - f_o(i_l)
        i_l <= i_c < i_u:  f_g - f_o(i_l) - f_o(i_u)

    Args:
        tick_lower: 하한 틱 (i_l)
        tick_upper: 상한 틱 (i_u)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside_lower: 하한 틱의 fee growth outside
        fee_growth_outside_upper: 상한 틱의 fee growth outside

    Returns:
        범위 내 fee growth (f_r), uint256
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)
    return wrap_uint256(fee_growth_global - f_b - f_a)


def calculate_fee_growth_delta(fee_growth_current: int, fee_growth_previous: int) -> int:
    """두 시점 간 fee growth 변화량 (uint256 랩어라운드)"""
    return wrap_uint256(fee_growth_current - fee_growth_previous)


def calculate_uncollected_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> int:
    """미수령 수수료 (토큰 최소 단위, 내림)

    f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128
    """
    delta = calculate_fee_growth_delta(fee_growth_inside_current, fee_growth_inside_last)
    return mul_div(delta, liquidity, Q128)


def fee_growth_increment(fee_amount: int, liquidity: int) -> int:
    """수수료를 단위 유동성당 Q128 성장률로 변환. 유동성 0이면 0."""
    if liquidity <= 0:
        return 0
    return mul_div(fee_amount, Q128, liquidity)


def validate_lp_fee(lp_fee: int) -> int:
    if not 0 <= lp_fee <= MAX_LP_FEE:
        raise InvalidFeeError(f"LP 수수료가 범위를 벗어났습니다: {lp_fee}")
    return lp_fee


def validate_protocol_fee(protocol_fee: int) -> int:
    if not 0 <= protocol_fee <= MAX_PROTOCOL_FEE:
        raise InvalidFeeError(f"프로토콜 수수료가 범위를 벗어났습니다: {protocol_fee}")
    return protocol_fee


def calculate_swap_fee(protocol_fee: int, lp_fee: int) -> int:
    """프로토콜 수수료와 LP 수수료를 합친 총 스왑 수수료 (pips)

    protocol_fee + lp_fee - protocol_fee * lp_fee / 1e6
    LP 수수료는 프로토콜 몫을 뗀 나머지 입력에 부과됩니다.
    """
    if protocol_fee == 0:
        return lp_fee
    return protocol_fee + lp_fee - (protocol_fee * lp_fee) // PIPS_DENOMINATOR


def protocol_fee_for_step(
    swap_fee: int,
    protocol_fee: int,
    amount_in: int,
    fee_amount: int
) -> int:
    """스왑 한 스텝의 수수료 중 프로토콜 몫

    LP 수수료가 0이면 (swap_fee == protocol_fee) 스텝 수수료 전체가
    프로토콜 몫입니다. 그 외에는 수수료를 포함한 총 입력에 프로토콜
    요율을 곱합니다 (내림, LP에 유리).
    """
    if protocol_fee == 0:
        return 0
    if swap_fee == protocol_fee:
        return fee_amount
    return (amount_in + fee_amount) * protocol_fee // PIPS_DENOMINATOR
