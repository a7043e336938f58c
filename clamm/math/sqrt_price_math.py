"""
Sqrt Price Math - sqrtPriceX96 관련 계산

풀 가격은 sqrtPriceX96 형식으로 저장됩니다.
sqrtPriceX96 = sqrt(price) * 2^96

주어진 유동성에서 token0/token1 수량이 들어오거나 나갈 때의 다음 가격을
계산합니다. 반올림 방향은 항상 풀에 유리한 쪽입니다.
"""

from ..constants import Q96, UINT160_MAX, UINT256_MAX
from ..exceptions import NumericOverflowError, InsufficientLiquidityError
from .full_math import mul_div, mul_div_rounding_up, div_rounding_up


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount0 변화에 따른 다음 sqrtPriceX96 계산 (올림)

    공식: √P' = L·√P / (L ± Δx·√P)

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount0 변화량
        add: True면 풀에 추가 (가격 하락), False면 제거 (가격 상승)

    Returns:
        새로운 sqrtPriceX96
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        # uint256 범위 안에서는 정밀한 공식, 넘으면 대체 공식
        if product <= UINT256_MAX and numerator1 + product <= UINT256_MAX:
            return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 + product)
        return div_rounding_up(numerator1, (numerator1 // sqrt_price_x96) + amount)

    if product > UINT256_MAX or numerator1 <= product:
        raise NumericOverflowError("amount0 출력이 가용 유동성을 초과합니다")
    result = mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 - product)
    if result > UINT160_MAX:
        raise NumericOverflowError(f"sqrtPriceX96 오버플로우: {result}")
    return result


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount1 변화에 따른 다음 sqrtPriceX96 계산 (내림)

    공식: √P' = √P ± Δy / L
    """
    if add:
        quotient = mul_div(amount, Q96, liquidity)
        result = sqrt_price_x96 + quotient
        if result > UINT160_MAX:
            raise NumericOverflowError(f"sqrtPriceX96 오버플로우: {result}")
        return result

    quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise InsufficientLiquidityError("amount1 출력이 가용 유동성을 초과합니다")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """입력 수량만큼 스왑한 뒤의 sqrtPriceX96

    목표 가격을 넘지 않도록 반올림합니다.
    """
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise InsufficientLiquidityError("가격과 유동성은 양수여야 합니다")

    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool
) -> int:
    """출력 수량만큼 스왑한 뒤의 sqrtPriceX96"""
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise InsufficientLiquidityError("가격과 유동성은 양수여야 합니다")

    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, False)
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)
