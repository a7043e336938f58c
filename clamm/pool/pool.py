"""
Pool - 집중 유동성 풀 엔진

풀 하나의 전역 상태(PoolState), 틱 인덱스(TickIndex), 포지션 원장
(PositionLedger)을 소유하고 세 가지 상태 변경 연산을 제공합니다:

- modify_liquidity: 틱 범위에 유동성 추가/제거, 원금/수수료 변화 계산
- swap: 틱 곡선을 따라 한 스텝씩 이동하며 토큰 교환
- donate: 현재 범위 내 유동성 공급자에게 수수료 직접 분배

모든 결과는 호출자 관점의 BalanceDelta로 반환되며, 실제 자산 이동과
정산은 PoolManager의 몫입니다. 풀은 단일 작성자 모델을 가정합니다.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import settings
from ..constants import MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO, MAX_SWAP_FEE
from ..exceptions import (
    PoolNotInitializedError,
    PoolAlreadyInitializedError,
    PriceLimitAlreadyExceeded,
    PriceLimitOutOfBounds,
    InvalidFeeForExactOutError,
    InsufficientLiquidityError,
    NoLiquidityToReceiveFeesError,
    TickLiquidityOverflowError,
)
from ..math.fee_math import (
    calculate_swap_fee,
    protocol_fee_for_step,
    fee_growth_increment,
    validate_lp_fee,
    validate_protocol_fee,
)
from ..math.full_math import wrap_uint256, to_int128
from ..math.liquidity_math import add_delta, get_amount0_delta_signed, get_amount1_delta_signed
from ..math.swap_math import compute_swap_step, get_sqrt_price_target
from ..math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio, check_ticks
from .positions import PositionLedger
from .ticks import TickIndex
from .types import (
    PoolKey,
    PoolState,
    ProtocolFee,
    BalanceDelta,
    ZERO_DELTA,
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    SwapParams,
    SwapResult,
    SwapOutcome,
)

logger = logging.getLogger(__name__)


@dataclass
class StepComputations:
    sqrt_price_start_x96: int = 0
    tick_next: int = 0
    initialized: bool = False
    sqrt_price_next_x96: int = 0
    amount_in: int = 0
    amount_out: int = 0
    fee_amount: int = 0


class Pool:
    """집중 유동성 풀

    사용법:
        pool = Pool(PoolKey("ETH", "USDC", fee=3000, tick_spacing=60))
        pool.initialize(get_sqrt_ratio_at_tick(0))
        pool.modify_liquidity(ModifyLiquidityParams("alice", -600, 600, 10**18))
        outcome = pool.swap(SwapParams(amount_specified=-10**15, zero_for_one=True))
    """

    def __init__(self, key: PoolKey):
        self.key = key
        self.state = PoolState()
        self.ticks = TickIndex(key.tick_spacing)
        self.positions = PositionLedger()

    def __repr__(self) -> str:
        return (
            f"Pool({self.key.currency0}/{self.key.currency1}, fee={self.state.lp_fee}, "
            f"tick={self.state.tick}, liquidity={self.state.liquidity})"
        )

    @property
    def tick_spacing(self) -> int:
        return self.key.tick_spacing

    @property
    def sqrt_price_x96(self) -> int:
        return self.state.sqrt_price_x96

    @property
    def tick(self) -> int:
        return self.state.tick

    @property
    def liquidity(self) -> int:
        return self.state.liquidity

    # ------------------------------------------------------------------
    # 초기화 / 설정
    # ------------------------------------------------------------------

    def initialize(
        self,
        sqrt_price_x96: int,
        lp_fee: Optional[int] = None,
        protocol_fee: Optional[ProtocolFee] = None,
    ) -> int:
        """초기 가격 설정

        Args:
            sqrt_price_x96: 초기 sqrtPriceX96
            lp_fee: LP 수수료 (pips). None이면 PoolKey.fee
            protocol_fee: 방향별 프로토콜 수수료. None이면 설정의 기본값

        Returns:
            초기 틱
        """
        if self.state.initialized:
            raise PoolAlreadyInitializedError(f"이미 초기화된 풀입니다: {self.key.pool_id}")

        tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        lp_fee = validate_lp_fee(self.key.fee if lp_fee is None else lp_fee)
        if protocol_fee is None:
            protocol_fee = ProtocolFee(settings.DEFAULT_PROTOCOL_FEE, settings.DEFAULT_PROTOCOL_FEE)
        protocol_fee = ProtocolFee(*(validate_protocol_fee(fee) for fee in protocol_fee))

        self.state = PoolState(
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            lp_fee=lp_fee,
            protocol_fee=protocol_fee,
        )
        logger.info(
            "Initialized pool %s (%s/%s) at tick %d, lp_fee=%d",
            self.key.pool_id, self.key.currency0, self.key.currency1, tick, lp_fee,
        )
        return tick

    def check_initialized(self) -> None:
        if not self.state.initialized:
            raise PoolNotInitializedError(f"초기화되지 않은 풀입니다: {self.key.pool_id}")

    def set_protocol_fee(self, protocol_fee: ProtocolFee) -> None:
        self.check_initialized()
        self.state.protocol_fee = ProtocolFee(*(validate_protocol_fee(fee) for fee in protocol_fee))

    def set_lp_fee(self, lp_fee: int) -> None:
        self.check_initialized()
        self.state.lp_fee = validate_lp_fee(lp_fee)

    # ------------------------------------------------------------------
    # 유동성
    # ------------------------------------------------------------------

    def get_fee_growth_inside(self, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        state = self.state
        return self.ticks.get_fee_growth_inside(
            tick_lower, tick_upper, state.tick,
            state.fee_growth_global_0_x128, state.fee_growth_global_1_x128,
        )

    def _validate_liquidity_change(self, params: ModifyLiquidityParams) -> None:
        """상태 변경 전에 실패할 조건을 모두 확인"""
        delta = params.liquidity_delta
        add_delta(self.positions.get(params.position_key).liquidity, delta)
        for tick in (params.tick_lower, params.tick_upper):
            gross_after = self.ticks.peek_liquidity_gross_after(tick, delta)
            if delta > 0 and gross_after > self.ticks.max_liquidity_per_tick:
                raise TickLiquidityOverflowError(tick, gross_after, self.ticks.max_liquidity_per_tick)
        if params.tick_lower <= self.state.tick < params.tick_upper:
            add_delta(self.state.liquidity, delta)

    def modify_liquidity(self, params: ModifyLiquidityParams) -> ModifyLiquidityResult:
        """틱 범위의 유동성 추가/제거

        Args:
            params: 소유자, 범위, 유동성 변화량, salt

        Returns:
            ModifyLiquidityResult(principal_delta, fees_accrued).
            principal_delta는 추가 시 음수(예치 필요), 제거 시 양수(반환).
            fees_accrued는 변경 이전 유동성 기준으로 정산된 수수료.

        Raises:
            PoolNotInitializedError: 초기화되지 않은 풀
            RangeError: 틱 순서/범위/간격 오류
            NumericUnderflowError: 포지션 유동성이 음수가 되는 경우
            TickLiquidityOverflowError: 틱당 최대 유동성 초과
        """
        self.check_initialized()
        tick_lower, tick_upper = params.tick_lower, params.tick_upper
        check_ticks(tick_lower, tick_upper, self.tick_spacing)

        liquidity_delta = params.liquidity_delta
        state = self.state
        fg0, fg1 = state.fee_growth_global_0_x128, state.fee_growth_global_1_x128

        if liquidity_delta != 0:
            self._validate_liquidity_change(params)

        flipped_lower = flipped_upper = False
        if liquidity_delta != 0:
            flipped_lower, _ = self.ticks.update_tick(tick_lower, state.tick, liquidity_delta, False, fg0, fg1)
            flipped_upper, _ = self.ticks.update_tick(tick_upper, state.tick, liquidity_delta, True, fg0, fg1)

        inside_0, inside_1 = self.get_fee_growth_inside(tick_lower, tick_upper)
        fees_owed_0, fees_owed_1 = self.positions.update(
            params.position_key, liquidity_delta, inside_0, inside_1
        )
        fees_accrued = BalanceDelta(to_int128(fees_owed_0), to_int128(fees_owed_1))

        if liquidity_delta < 0:
            if flipped_lower:
                self.ticks.clear_tick(tick_lower)
            if flipped_upper:
                self.ticks.clear_tick(tick_upper)

        principal_delta = ZERO_DELTA
        if liquidity_delta != 0:
            sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
            sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)

            if state.tick < tick_lower:
                # 가격이 범위 아래: token0만 이동
                principal_delta = BalanceDelta(
                    get_amount0_delta_signed(sqrt_lower, sqrt_upper, liquidity_delta), 0
                )
            elif state.tick < tick_upper:
                principal_delta = BalanceDelta(
                    get_amount0_delta_signed(state.sqrt_price_x96, sqrt_upper, liquidity_delta),
                    get_amount1_delta_signed(sqrt_lower, state.sqrt_price_x96, liquidity_delta),
                )
                state.liquidity = add_delta(state.liquidity, liquidity_delta)
            else:
                # 가격이 범위 위: token1만 이동
                principal_delta = BalanceDelta(
                    0, get_amount1_delta_signed(sqrt_lower, sqrt_upper, liquidity_delta)
                )

        logger.debug(
            "modify_liquidity %s [%d, %d) delta=%d principal=%s fees=%s",
            params.owner, tick_lower, tick_upper, liquidity_delta, principal_delta, fees_accrued,
        )
        return ModifyLiquidityResult(principal_delta, fees_accrued)

    # ------------------------------------------------------------------
    # 스왑
    # ------------------------------------------------------------------

    def _resolve_price_limit(self, zero_for_one: bool, sqrt_price_limit_x96: Optional[int]) -> int:
        current = self.state.sqrt_price_x96
        if sqrt_price_limit_x96 is None:
            sqrt_price_limit_x96 = MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1

        if zero_for_one:
            if sqrt_price_limit_x96 >= current:
                raise PriceLimitAlreadyExceeded(current, sqrt_price_limit_x96)
            if sqrt_price_limit_x96 <= MIN_SQRT_RATIO:
                raise PriceLimitOutOfBounds(sqrt_price_limit_x96)
        else:
            if sqrt_price_limit_x96 <= current:
                raise PriceLimitAlreadyExceeded(current, sqrt_price_limit_x96)
            if sqrt_price_limit_x96 >= MAX_SQRT_RATIO:
                raise PriceLimitOutOfBounds(sqrt_price_limit_x96)
        return sqrt_price_limit_x96

    def swap(self, params: SwapParams, lp_fee_override: Optional[int] = None) -> SwapOutcome:
        """틱 곡선을 따라 스왑 실행

        Args:
            params: amount_specified (음수 exact input, 양수 exact output),
                zero_for_one, sqrt_price_limit_x96
            lp_fee_override: 이번 스왑에만 적용할 LP 수수료 (pips)

        Returns:
            SwapOutcome(delta, amount_to_protocol, swap_fee, result, steps).
            delta는 호출자 관점: 입력 자산은 음수, 출력 자산은 양수.

        Raises:
            PriceLimitError: 가격 제한이 잘못된 방향이거나 범위 밖
            InvalidFeeForExactOutError: 수수료 100%에서 exact output
            InsufficientLiquidityError: 스왑이 진행될 수 없는 경우
        """
        self.check_initialized()
        state = self.state
        zero_for_one = params.zero_for_one
        amount_specified = params.amount_specified
        exact_input = amount_specified < 0

        protocol_fee = state.protocol_fee.for_direction(zero_for_one)
        lp_fee = state.lp_fee if lp_fee_override is None else validate_lp_fee(lp_fee_override)
        swap_fee = calculate_swap_fee(protocol_fee, lp_fee)

        if swap_fee >= MAX_SWAP_FEE and amount_specified > 0:
            raise InvalidFeeForExactOutError("수수료 100%에서는 exact output 스왑이 불가능합니다")

        result = SwapResult(state.sqrt_price_x96, state.tick, state.liquidity)
        if amount_specified == 0:
            return SwapOutcome(ZERO_DELTA, 0, swap_fee, result, 0)

        sqrt_price_limit_x96 = self._resolve_price_limit(zero_for_one, params.sqrt_price_limit_x96)

        amount_remaining = amount_specified
        amount_calculated = 0
        amount_to_protocol = 0
        if zero_for_one:
            fee_growth_global = state.fee_growth_global_0_x128
        else:
            fee_growth_global = state.fee_growth_global_1_x128

        step = StepComputations()
        steps = 0

        while amount_remaining != 0 and result.sqrt_price_x96 != sqrt_price_limit_x96:
            steps += 1
            if settings.MAX_SWAP_STEPS and steps > settings.MAX_SWAP_STEPS:
                raise InsufficientLiquidityError(f"스왑 스텝 상한 초과: {settings.MAX_SWAP_STEPS}")

            step.sqrt_price_start_x96 = result.sqrt_price_x96
            tick_start = result.tick
            remaining_start = amount_remaining

            step.tick_next, step.initialized = self.ticks.next_initialized_tick(result.tick, zero_for_one)
            # 비트맵은 MIN/MAX_TICK을 모르므로 여기서 제한
            if zero_for_one:
                step.tick_next = max(MIN_TICK, step.tick_next)
            else:
                step.tick_next = min(MAX_TICK, step.tick_next)
            step.sqrt_price_next_x96 = get_sqrt_ratio_at_tick(step.tick_next)

            result.sqrt_price_x96, step.amount_in, step.amount_out, step.fee_amount = compute_swap_step(
                result.sqrt_price_x96,
                get_sqrt_price_target(zero_for_one, step.sqrt_price_next_x96, sqrt_price_limit_x96),
                result.liquidity,
                amount_remaining,
                swap_fee,
            )

            if exact_input:
                amount_remaining += step.amount_in + step.fee_amount
                amount_calculated += step.amount_out
            else:
                amount_remaining -= step.amount_out
                amount_calculated -= step.amount_in + step.fee_amount

            if protocol_fee > 0:
                to_protocol = protocol_fee_for_step(swap_fee, protocol_fee, step.amount_in, step.fee_amount)
                step.fee_amount -= to_protocol
                amount_to_protocol += to_protocol

            if result.liquidity > 0:
                fee_growth_global = wrap_uint256(
                    fee_growth_global + fee_growth_increment(step.fee_amount, result.liquidity)
                )

            if result.sqrt_price_x96 == step.sqrt_price_next_x96:
                if step.initialized:
                    if zero_for_one:
                        fg0, fg1 = fee_growth_global, state.fee_growth_global_1_x128
                    else:
                        fg0, fg1 = state.fee_growth_global_0_x128, fee_growth_global
                    liquidity_net = self.ticks.cross_tick(step.tick_next, fg0, fg1)
                    if zero_for_one:
                        liquidity_net = -liquidity_net
                    result.liquidity = add_delta(result.liquidity, liquidity_net)
                # 활성 범위는 [tick, tick + 1)
                result.tick = step.tick_next - 1 if zero_for_one else step.tick_next
            elif result.sqrt_price_x96 != step.sqrt_price_start_x96:
                result.tick = get_tick_at_sqrt_ratio(result.sqrt_price_x96)

            if (
                result.sqrt_price_x96 == step.sqrt_price_start_x96
                and result.tick == tick_start
                and amount_remaining == remaining_start
            ):
                raise InsufficientLiquidityError(
                    f"스왑이 진행되지 않습니다: tick={result.tick}, remaining={amount_remaining}"
                )

        state.sqrt_price_x96 = result.sqrt_price_x96
        state.tick = result.tick
        state.liquidity = result.liquidity
        if zero_for_one:
            state.fee_growth_global_0_x128 = fee_growth_global
        else:
            state.fee_growth_global_1_x128 = fee_growth_global

        if zero_for_one != exact_input:
            delta = BalanceDelta(
                to_int128(amount_calculated),
                to_int128(amount_specified - amount_remaining),
            )
        else:
            delta = BalanceDelta(
                to_int128(amount_specified - amount_remaining),
                to_int128(amount_calculated),
            )

        logger.debug(
            "swap zero_for_one=%s specified=%d delta=%s tick=%d steps=%d",
            zero_for_one, amount_specified, delta, state.tick, steps,
        )
        return SwapOutcome(delta, amount_to_protocol, swap_fee, result, steps)

    # ------------------------------------------------------------------
    # 기부
    # ------------------------------------------------------------------

    def donate(self, amount0: int, amount1: int) -> BalanceDelta:
        """현재 범위 내 유동성에 수수료 직접 분배

        Raises:
            NoLiquidityToReceiveFeesError: 활성 유동성이 0
        """
        self.check_initialized()
        if amount0 < 0 or amount1 < 0:
            raise ValueError(f"donate 수량은 음수일 수 없습니다: {amount0}, {amount1}")

        state = self.state
        if state.liquidity == 0:
            raise NoLiquidityToReceiveFeesError("활성 유동성이 없어 수수료를 받을 수 없습니다")

        delta = BalanceDelta(-to_int128(amount0), -to_int128(amount1))
        if amount0:
            state.fee_growth_global_0_x128 = wrap_uint256(
                state.fee_growth_global_0_x128 + fee_growth_increment(amount0, state.liquidity)
            )
        if amount1:
            state.fee_growth_global_1_x128 = wrap_uint256(
                state.fee_growth_global_1_x128 + fee_growth_increment(amount1, state.liquidity)
            )
        return delta

    # ------------------------------------------------------------------
    # 스냅샷
    # ------------------------------------------------------------------

    def snapshot(self):
        """변경 가능한 상태 전체의 깊은 복사본"""
        return copy.deepcopy((self.state, self.ticks, self.positions))

    def restore(self, snapshot) -> None:
        self.state, self.ticks, self.positions = snapshot

    def copy(self) -> "Pool":
        """같은 키, 독립된 상태를 가진 풀 (시뮬레이션용)"""
        scratch = Pool(self.key)
        scratch.restore(self.snapshot())
        return scratch
