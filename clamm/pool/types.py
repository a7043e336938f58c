"""
CLAMM 데이터 타입 정의

풀 설정, 틱/포지션 상태, 스왑/유동성 파라미터와 결과를 dataclass로 정의.
모든 숫자 필드는 정밀도를 위해 int 타입 사용.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Hashable, NamedTuple, Optional, TYPE_CHECKING

from ..constants import MIN_TICK_SPACING, MAX_TICK_SPACING, MAX_LP_FEE
from ..exceptions import TickSpacingError, InvalidFeeError

if TYPE_CHECKING:
    from ..manager.hooks import BaseHooks


@dataclass(frozen=True)
class PoolKey:
    """풀 식별 정보 (풀 수명 동안 불변)

    - currency0 / currency1: 자산 식별자 (currency0 < currency1)
    - fee: 기본 LP 수수료 (pips)
    - tick_spacing: 유효 틱 간격
    - hooks: 확장 지점 구현체 (선택)
    """
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: Optional["BaseHooks"] = None

    def __post_init__(self):
        if not self.currency0 < self.currency1:
            raise ValueError(
                f"currency0은 currency1보다 앞서야 합니다: {self.currency0!r}, {self.currency1!r}"
            )
        if not MIN_TICK_SPACING <= self.tick_spacing <= MAX_TICK_SPACING:
            raise TickSpacingError(f"지원하지 않는 틱 간격: {self.tick_spacing}")
        if not 0 <= self.fee <= MAX_LP_FEE:
            raise InvalidFeeError(f"LP 수수료가 범위를 벗어났습니다: {self.fee}")

    @property
    def pool_id(self) -> str:
        """키 필드의 sha256 (hooks는 클래스 이름으로 구분)"""
        hooks_name = type(self.hooks).__qualname__ if self.hooks is not None else ""
        raw = f"{self.currency0}|{self.currency1}|{self.fee}|{self.tick_spacing}|{hooks_name}"
        return "0x" + hashlib.sha256(raw.encode()).hexdigest()


class ProtocolFee(NamedTuple):
    """방향별 프로토콜 수수료 (pips)"""
    zero_for_one: int = 0
    one_for_zero: int = 0

    def for_direction(self, zero_for_one: bool) -> int:
        return self.zero_for_one if zero_for_one else self.one_for_zero


@dataclass
class PoolState:
    """풀 전역 상태

    - sqrt_price_x96: 현재 √가격 (Q96 인코딩), 0이면 미초기화
    - tick: 현재 틱 (sqrt_price_x96과 일치)
    - liquidity: 현재 가격에서 활성화된 유동성 (L)
    - fee_growth_global_0_x128 / 1: 단위유동성당 누적수수료 (Q128)
    """
    sqrt_price_x96: int = 0
    tick: int = 0
    lp_fee: int = 0
    protocol_fee: ProtocolFee = field(default_factory=ProtocolFee)
    liquidity: int = 0
    fee_growth_global_0_x128: int = 0
    fee_growth_global_1_x128: int = 0

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 != 0


class Slot0(NamedTuple):
    """풀 가격/수수료 요약"""
    sqrt_price_x96: int
    tick: int
    protocol_fee: ProtocolFee
    lp_fee: int


@dataclass
class TickInfo:
    """Tick-Indexed State

    - liquidity_gross: 해당 틱을 경계로 하는 총 유동성
    - liquidity_net: 가격이 위로 틱을 지날 때 활성 유동성 변화량 (ΔL)
    - fee_growth_outside_0_x128: 틱 외부 누적수수료 token0 (f_o,0)
    - fee_growth_outside_1_x128: 틱 외부 누적수수료 token1 (f_o,1)
    """
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0


class PositionKey(NamedTuple):
    owner: str
    tick_lower: int
    tick_upper: int
    salt: Hashable = 0


@dataclass
class PositionInfo:
    """Position-Indexed State

    - liquidity: 포지션의 유동성 (l)
    - fee_growth_inside_0_last_x128: 마지막 변경 시점의 범위 내 수수료 token0 (f_r,0(t_0))
    - fee_growth_inside_1_last_x128: 마지막 변경 시점의 범위 내 수수료 token1 (f_r,1(t_0))
    """
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0


class BalanceDelta(NamedTuple):
    """자산 쌍의 잔액 변화 (호출자 관점)

    음수는 호출자가 지불해야 할 금액, 양수는 받을 금액.
    """
    amount0: int = 0
    amount1: int = 0

    def __add__(self, other):
        return BalanceDelta(self.amount0 + other.amount0, self.amount1 + other.amount1)

    def __neg__(self):
        return BalanceDelta(-self.amount0, -self.amount1)


ZERO_DELTA = BalanceDelta(0, 0)


@dataclass(frozen=True)
class ModifyLiquidityParams:
    owner: str
    tick_lower: int
    tick_upper: int
    liquidity_delta: int
    salt: Hashable = 0

    @property
    def position_key(self) -> PositionKey:
        return PositionKey(self.owner, self.tick_lower, self.tick_upper, self.salt)


class ModifyLiquidityResult(NamedTuple):
    """principal_delta: 원금 변화, fees_accrued: 정산된 수수료"""
    principal_delta: BalanceDelta
    fees_accrued: BalanceDelta

    @property
    def caller_delta(self) -> BalanceDelta:
        return self.principal_delta + self.fees_accrued


@dataclass(frozen=True)
class SwapParams:
    """스왑 요청

    - amount_specified: 음수면 exact input (보낼 양), 양수면 exact output (받을 양)
    - zero_for_one: True면 token0 → token1 (가격 하락)
    - sqrt_price_limit_x96: 가격 제한. None이면 방향별 극한값
    """
    amount_specified: int
    zero_for_one: bool
    sqrt_price_limit_x96: Optional[int] = None

    @property
    def exact_input(self) -> bool:
        return self.amount_specified < 0


@dataclass
class SwapResult:
    """스왑 루프의 진행 상태 (종료 후 풀에 기록됨)"""
    sqrt_price_x96: int
    tick: int
    liquidity: int


class SwapOutcome(NamedTuple):
    delta: BalanceDelta
    amount_to_protocol: int
    swap_fee: int
    result: SwapResult
    steps: int = 0
