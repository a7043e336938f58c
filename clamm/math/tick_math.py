"""
Tick Math - Tick ↔ sqrtPrice 변환

틱 인덱스와 Q64.96 sqrt price 사이의 정수 변환. 두 함수는 서로의
근사 역함수이며, sqrtPrice → tick 방향은 항상 내림(floor) 처리합니다.

핵심 공식:
    price = 1.0001^tick
    tick = floor(log₁.₀₀₀₁(price))
    sqrtPriceX96 = sqrt(price) * 2^96
"""

import math

from ..constants import (
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    TICK_SPACINGS,
    UINT256_MAX,
)
from ..exceptions import (
    TickRangeError,
    SqrtPriceRangeError,
    TicksMisorderedError,
    TickMisalignedError,
    InvalidFeeError,
)

# sqrt(1.0001^-(2^i)) * 2^128, i = 1..19
_RATIO_LADDER = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """틱에서 sqrtPriceX96 계산

    매직 넘버 곱셈 사다리로 Q128.128 비율을 만든 뒤 Q64.96으로
    올림 변환합니다. 정수 연산만 사용합니다.

    Args:
        tick: 틱 인덱스 (MIN_TICK ~ MAX_TICK)

    Returns:
        sqrtPriceX96 (Q64.96 형식)

    Raises:
        TickRangeError: 틱이 유효 범위를 벗어난 경우
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickRangeError(tick)

    abs_tick = abs(tick)

    ratio = 0xfffcb933bd6fad37aa2d162d1a594001 if abs_tick & 0x1 \
        else 0x100000000000000000000000000000000
    for bit, multiplier in _RATIO_LADDER:
        if abs_tick & bit:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96 (올림)
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """sqrtPriceX96에서 틱 계산 (floor)

    get_sqrt_ratio_at_tick(tick) <= sqrt_price_x96 를 만족하는 가장 큰 틱.

    Args:
        sqrt_price_x96: sqrtPriceX96 (Q64.96 형식)

    Returns:
        틱 인덱스

    Raises:
        SqrtPriceRangeError: sqrtPriceX96이 유효 범위를 벗어난 경우
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise SqrtPriceRangeError(sqrt_price_x96)

    ratio = sqrt_price_x96 << 32
    msb = ratio.bit_length() - 1

    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 소수부 14비트 (log2 근사)
    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * 255738958999603826347141

    tick_low = (log_sqrt10001 - 3402992956809132418596140100660247210) >> 128
    tick_high = (log_sqrt10001 + 291339464771989622907027621153398088495) >> 128

    if tick_low == tick_high:
        return tick_low

    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def tick_to_price(tick: int, token0_decimals: int = 18, token1_decimals: int = 18) -> float:
    """틱을 human-readable 가격으로 변환

    price = 1.0001^tick × 10^(token0_decimals - token1_decimals)

    Args:
        tick: 틱 인덱스
        token0_decimals: token0 소수점 자릿수
        token1_decimals: token1 소수점 자릿수

    Returns:
        가격 (token1/token0)
    """
    ratio = 1.0001 ** tick
    return ratio * (10 ** (token0_decimals - token1_decimals))


def price_to_tick(price: float, token0_decimals: int = 18, token1_decimals: int = 18) -> int:
    """Human-readable 가격을 틱으로 변환 (floor)

    tick = floor(log₁.₀₀₀₁(price × 10^(token1_decimals - token0_decimals)))
    """
    if price <= 0:
        raise ValueError("가격은 양수여야 합니다")

    ratio = price * (10 ** (token1_decimals - token0_decimals))
    tick = math.log(ratio) / math.log(1.0001)
    # 부동소수점 오차로 정확한 틱 가격이 한 칸 아래로 내려가는 것을 방지
    return math.floor(round(tick, 9))


def round_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """틱을 가장 가까운 유효 틱으로 반올림 (같은 거리면 위쪽)"""
    lower = (tick // tick_spacing) * tick_spacing
    upper = lower + tick_spacing

    dist_lower = abs(tick - lower)
    dist_upper = abs(tick - upper)

    if dist_lower < dist_upper:
        return lower
    return upper


def get_tick_spacing_for_fee(fee_tier: int) -> int:
    """표준 수수료 티어에 해당하는 틱 간격 반환"""
    if fee_tier not in TICK_SPACINGS:
        raise InvalidFeeError(f"지원하지 않는 수수료 티어: {fee_tier}")
    return TICK_SPACINGS[fee_tier]


def min_usable_tick(tick_spacing: int) -> int:
    """tick_spacing 배수 중 MIN_TICK 이상인 가장 작은 틱"""
    return -(-MIN_TICK // tick_spacing) * tick_spacing


def max_usable_tick(tick_spacing: int) -> int:
    """tick_spacing 배수 중 MAX_TICK 이하인 가장 큰 틱"""
    return (MAX_TICK // tick_spacing) * tick_spacing


def check_ticks(tick_lower: int, tick_upper: int, tick_spacing: int = 1) -> None:
    """포지션 범위 검증

    Raises:
        TicksMisorderedError: tick_lower >= tick_upper
        TickRangeError: 틱이 범위를 벗어남
        TickMisalignedError: 틱이 tick_spacing의 배수가 아님
    """
    if tick_lower >= tick_upper:
        raise TicksMisorderedError(tick_lower, tick_upper)
    if tick_lower < MIN_TICK:
        raise TickRangeError(tick_lower)
    if tick_upper > MAX_TICK:
        raise TickRangeError(tick_upper)
    for tick in (tick_lower, tick_upper):
        if tick % tick_spacing:
            raise TickMisalignedError(tick, tick_spacing)
