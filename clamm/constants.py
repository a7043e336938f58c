"""
CLAMM 상수 정의

엔진 전반에서 사용하는 고정소수점/범위 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩에 사용 (2^128)
- MIN_TICK / MAX_TICK: 틱 범위
- PIPS_DENOMINATOR: 수수료 단위 (1 pip = 0.0001%)
- FEE_TIERS / TICK_SPACINGS: 표준 수수료 티어와 틱 간격
"""

from typing import Dict

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128
Q192: int = 2 ** 192

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# sqrtPriceX96 범위 (get_sqrt_ratio_at_tick(MIN_TICK), get_sqrt_ratio_at_tick(MAX_TICK))
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

# 틱 간격 범위
MIN_TICK_SPACING: int = 1
MAX_TICK_SPACING: int = 2 ** 15 - 1

# 비트맵 워드 크기 (워드당 틱 수)
WORD_SIZE: int = 256

# 수수료 단위 (pips): 1_000_000 = 100%
PIPS_DENOMINATOR: int = 1_000_000
MAX_SWAP_FEE: int = PIPS_DENOMINATOR
MAX_LP_FEE: int = PIPS_DENOMINATOR
# 프로토콜 수수료 상한: 0.1%
MAX_PROTOCOL_FEE: int = 1000

# 수수료 티어 (pips)
# 100 = 0.01%, 500 = 0.05%, 3000 = 0.30%, 10000 = 1.00%
FEE_TIERS: Dict[int, str] = {
    100: "0.01%",
    500: "0.05%",
    3000: "0.30%",
    10000: "1.00%",
}

# 각 수수료 티어별 틱 간격
TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# 정수 폭
UINT256_MAX: int = 2 ** 256 - 1
UINT160_MAX: int = 2 ** 160 - 1
UINT128_MAX: int = 2 ** 128 - 1
INT128_MAX: int = 2 ** 127 - 1
INT128_MIN: int = -(2 ** 127)
