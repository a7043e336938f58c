"""
Pool Manager - 풀 레지스트리와 작업 단위(unit of work)

모든 상태 변경(유동성, 스왑, 기부, 프로토콜 수수료 인출)은 작업 단위
안에서만 허용됩니다. 작업 단위는 새 SettlementLedger를 열고, 종료 시
모든 (actor, asset) 잔액이 0인지 검사합니다. 중간에 예외가 발생하거나
잔액이 남으면 작업 단위 동안 건드린 풀과 프로토콜 수수료가 시작 시점
상태로 복원된 뒤 예외가 다시 발생합니다.

사용법:
    manager = PoolManager()
    manager.initialize(key, get_sqrt_ratio_at_tick(0))

    with manager.unlocked():
        result = manager.modify_liquidity("alice", key, params)
        manager.settle("alice", key.currency0, -result.caller_delta.amount0)
        manager.settle("alice", key.currency1, -result.caller_delta.amount1)
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Dict, Hashable, Optional, Tuple

from ..exceptions import (
    AlreadyUnlockedError,
    ManagerLockedError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
    InvalidClearError,
    PositionOwnerMismatchError,
)
from ..pool.pool import Pool
from ..pool.types import (
    PoolKey,
    ProtocolFee,
    Slot0,
    TickInfo,
    PositionKey,
    PositionInfo,
    BalanceDelta,
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    SwapParams,
    SwapOutcome,
)
from .settlement import SettlementLedger

logger = logging.getLogger(__name__)


class PoolManager:

    def __init__(self):
        self.pools: Dict[str, Pool] = {}
        self.protocol_fees_accrued: Dict[Hashable, int] = {}
        self.ledger: Optional[SettlementLedger] = None
        self._unlocked = False
        # 작업 단위 동안 변경된 풀의 시작 시점 스냅샷 (None이면 작업 단위 중 생성됨)
        self._touched: Dict[str, object] = {}

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked

    # ------------------------------------------------------------------
    # 레지스트리
    # ------------------------------------------------------------------

    def initialize(self, key: PoolKey, sqrt_price_x96: int, protocol_fee: Optional[ProtocolFee] = None) -> int:
        """풀 등록 및 초기 가격 설정

        Returns:
            초기 틱
        """
        pool_id = key.pool_id
        if pool_id in self.pools:
            raise PoolAlreadyInitializedError(f"이미 초기화된 풀입니다: {pool_id}")

        pool = Pool(key)
        tick = pool.initialize(sqrt_price_x96, protocol_fee=protocol_fee)
        self.pools[pool_id] = pool
        if self._unlocked:
            self._touched.setdefault(pool_id, None)
        return tick

    def get_pool(self, key: PoolKey) -> Pool:
        """등록된 풀 조회

        pool_id는 훅 클래스 이름만 반영하므로, 등록된 키와 훅 인스턴스가
        다른 키는 같은 풀로 취급하지 않습니다.

        Raises:
            PoolNotInitializedError: 등록되지 않았거나 훅 인스턴스가 다른 키
        """
        pool = self.pools.get(key.pool_id)
        if pool is None or pool.key != key:
            raise PoolNotInitializedError(f"등록되지 않은 풀입니다: {key.pool_id}")
        return pool

    # ------------------------------------------------------------------
    # 작업 단위
    # ------------------------------------------------------------------

    @contextmanager
    def unlocked(self):
        """작업 단위 컨텍스트

        Raises:
            AlreadyUnlockedError: 이미 열린 작업 단위 안에서 호출
            UnsettledBalanceError: 종료 시 정산되지 않은 잔액
        """
        if self._unlocked:
            raise AlreadyUnlockedError("작업 단위가 이미 열려 있습니다")

        self._unlocked = True
        self.ledger = SettlementLedger()
        self._touched = {}
        protocol_fees_before = dict(self.protocol_fees_accrued)
        try:
            yield self
            self.ledger.close_and_verify()
        except Exception:
            logger.warning("Unit of work failed, rolling back %d pool(s)", len(self._touched))
            self._rollback(protocol_fees_before)
            raise
        finally:
            self._unlocked = False
            self.ledger = None
            self._touched = {}

    def unlock(self, callback: Callable, *args, **kwargs):
        """callback(manager, *args, **kwargs)을 작업 단위 안에서 실행"""
        with self.unlocked():
            return callback(self, *args, **kwargs)

    def _require_unlocked(self) -> SettlementLedger:
        if not self._unlocked:
            raise ManagerLockedError("작업 단위 밖에서는 상태를 변경할 수 없습니다")
        return self.ledger

    def _touch(self, pool: Pool) -> None:
        pool_id = pool.key.pool_id
        if pool_id not in self._touched:
            self._touched[pool_id] = pool.snapshot()

    def _rollback(self, protocol_fees_before: Dict[Hashable, int]) -> None:
        for pool_id, snapshot in self._touched.items():
            if snapshot is None:
                self.pools.pop(pool_id, None)
            else:
                self.pools[pool_id].restore(snapshot)
        self.protocol_fees_accrued = protocol_fees_before

    def _account(self, ledger: SettlementLedger, actor: Hashable, key: PoolKey, delta: BalanceDelta) -> None:
        ledger.post(actor, key.currency0, delta.amount0)
        ledger.post(actor, key.currency1, delta.amount1)

    # ------------------------------------------------------------------
    # 풀 연산
    # ------------------------------------------------------------------

    def modify_liquidity(self, sender: Hashable, key: PoolKey, params: ModifyLiquidityParams) -> ModifyLiquidityResult:
        """유동성 추가/제거. 원금과 정산된 수수료의 합이 sender에게 기록됩니다.

        Raises:
            PositionOwnerMismatchError: params.owner가 sender와 다름
        """
        ledger = self._require_unlocked()
        if params.owner != sender:
            raise PositionOwnerMismatchError(sender, params.owner)
        pool = self.get_pool(key)
        hooks = key.hooks

        if hooks is not None:
            hooks.before_modify_liquidity(sender, key, params)

        self._touch(pool)
        result = pool.modify_liquidity(params)
        caller_delta = result.caller_delta
        self._account(ledger, sender, key, caller_delta)

        if hooks is not None:
            hooks.after_modify_liquidity(sender, key, params, caller_delta, result.fees_accrued)
        return result

    def swap(self, sender: Hashable, key: PoolKey, params: SwapParams) -> SwapOutcome:
        """스왑 실행. 입력 자산은 음수, 출력 자산은 양수로 sender에게 기록됩니다."""
        ledger = self._require_unlocked()
        pool = self.get_pool(key)
        hooks = key.hooks

        lp_fee_override = None
        if hooks is not None:
            lp_fee_override = hooks.before_swap(sender, key, params)

        self._touch(pool)
        outcome = pool.swap(params, lp_fee_override=lp_fee_override)

        if outcome.amount_to_protocol:
            input_asset = key.currency0 if params.zero_for_one else key.currency1
            self.protocol_fees_accrued[input_asset] = (
                self.protocol_fees_accrued.get(input_asset, 0) + outcome.amount_to_protocol
            )
        self._account(ledger, sender, key, outcome.delta)

        if hooks is not None:
            hooks.after_swap(sender, key, params, outcome.delta)
        return outcome

    def donate(self, sender: Hashable, key: PoolKey, amount0: int, amount1: int) -> BalanceDelta:
        ledger = self._require_unlocked()
        pool = self.get_pool(key)
        hooks = key.hooks

        if hooks is not None:
            hooks.before_donate(sender, key, amount0, amount1)

        self._touch(pool)
        delta = pool.donate(amount0, amount1)
        self._account(ledger, sender, key, delta)

        if hooks is not None:
            hooks.after_donate(sender, key, amount0, amount1)
        return delta

    # ------------------------------------------------------------------
    # 정산
    # ------------------------------------------------------------------

    def currency_delta(self, actor: Hashable, asset: Hashable) -> int:
        if self.ledger is None:
            return 0
        return self.ledger.get(actor, asset)

    def settle(self, actor: Hashable, asset: Hashable, amount: int) -> int:
        """actor가 asset을 amount만큼 지불 (잔액 +amount)"""
        ledger = self._require_unlocked()
        if amount < 0:
            raise ValueError(f"settle 수량은 음수일 수 없습니다: {amount}")
        return ledger.post(actor, asset, amount)

    def take(self, actor: Hashable, asset: Hashable, amount: int) -> int:
        """actor가 asset을 amount만큼 인출 (잔액 -amount)"""
        ledger = self._require_unlocked()
        if amount < 0:
            raise ValueError(f"take 수량은 음수일 수 없습니다: {amount}")
        return ledger.post(actor, asset, -amount)

    def clear(self, actor: Hashable, asset: Hashable, amount: int) -> None:
        """양수 잔액을 인출하지 않고 포기

        Raises:
            InvalidClearError: amount가 현재 잔액과 정확히 일치하지 않음
        """
        ledger = self._require_unlocked()
        current = ledger.get(actor, asset)
        if amount < 0 or current != amount:
            raise InvalidClearError(f"clear 수량 {amount}이(가) 잔액 {current}과(와) 다릅니다")
        ledger.post(actor, asset, -amount)

    # ------------------------------------------------------------------
    # 수수료 관리
    # ------------------------------------------------------------------

    def set_protocol_fee(self, key: PoolKey, protocol_fee: ProtocolFee) -> None:
        pool = self.get_pool(key)
        if self._unlocked:
            self._touch(pool)
        pool.set_protocol_fee(protocol_fee)
        logger.info("Protocol fee for %s set to %s", key.pool_id, pool.state.protocol_fee)

    def update_lp_fee(self, key: PoolKey, lp_fee: int) -> None:
        pool = self.get_pool(key)
        if self._unlocked:
            self._touch(pool)
        pool.set_lp_fee(lp_fee)
        logger.info("LP fee for %s set to %d", key.pool_id, lp_fee)

    def collect_protocol_fees(self, recipient: Hashable, asset: Hashable, amount: int = 0) -> int:
        """누적된 프로토콜 수수료를 recipient 잔액으로 이전

        Args:
            recipient: 수령자
            asset: 자산
            amount: 인출량. 0이면 전액

        Returns:
            이전된 수량
        """
        ledger = self._require_unlocked()
        accrued = self.protocol_fees_accrued.get(asset, 0)
        if amount == 0:
            amount = accrued
        if amount < 0 or amount > accrued:
            raise ValueError(f"인출 가능한 프로토콜 수수료를 초과했습니다: {amount} > {accrued}")

        self.protocol_fees_accrued[asset] = accrued - amount
        ledger.post(recipient, asset, amount)
        return amount

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_slot0(self, key: PoolKey) -> Slot0:
        state = self.get_pool(key).state
        return Slot0(state.sqrt_price_x96, state.tick, state.protocol_fee, state.lp_fee)

    def get_liquidity(self, key: PoolKey) -> int:
        return self.get_pool(key).state.liquidity

    def get_tick_info(self, key: PoolKey, tick: int) -> TickInfo:
        return replace(self.get_pool(key).ticks.get(tick))

    def get_position_info(
        self, key: PoolKey, owner: Hashable, tick_lower: int, tick_upper: int, salt: Hashable = 0
    ) -> PositionInfo:
        return replace(self.get_pool(key).positions.get(PositionKey(owner, tick_lower, tick_upper, salt)))

    def get_fee_growth_globals(self, key: PoolKey) -> Tuple[int, int]:
        state = self.get_pool(key).state
        return state.fee_growth_global_0_x128, state.fee_growth_global_1_x128

    def get_fee_growth_inside(self, key: PoolKey, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        return self.get_pool(key).get_fee_growth_inside(tick_lower, tick_upper)

    def quote_swap(self, key: PoolKey, params: SwapParams, lp_fee_override: Optional[int] = None) -> SwapOutcome:
        """풀 복사본에서 스왑 시뮬레이션 (상태/장부 변경 없음, 훅 미호출)"""
        return self.get_pool(key).copy().swap(params, lp_fee_override=lp_fee_override)
