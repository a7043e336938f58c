"""
CLAMM - Concentrated Liquidity AMM Engine

정수 고정소수점 수학으로 집중 유동성 풀을 시뮬레이션하는 라이브러리.
틱 범위 유동성, 스텝 단위 스왑, 범위 내 수수료 누적, 작업 단위별
정산(flash accounting)을 구현합니다.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO, FEE_TIERS, TICK_SPACINGS
from .exceptions import CLAMMError
from .pool import (
    Pool,
    PoolKey,
    ProtocolFee,
    BalanceDelta,
    ModifyLiquidityParams,
    SwapParams,
)
from .manager import PoolManager, BaseHooks, SettlementLedger
