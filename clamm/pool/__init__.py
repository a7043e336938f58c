"""
Pool layer for CLAMM

- types: 풀 키/상태/파라미터/결과 타입
- tick_bitmap: 초기화된 틱 비트맵
- ticks: 틱별 유동성/수수료 상태
- positions: 포지션 원장
- pool: 유동성 변경, 스왑, 기부 엔진
"""

from .types import (
    PoolKey,
    PoolState,
    ProtocolFee,
    Slot0,
    TickInfo,
    PositionKey,
    PositionInfo,
    BalanceDelta,
    ZERO_DELTA,
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    SwapParams,
    SwapResult,
    SwapOutcome,
)
from .tick_bitmap import TickBitmap
from .ticks import TickIndex, tick_spacing_to_max_liquidity_per_tick
from .positions import PositionLedger
from .pool import Pool
