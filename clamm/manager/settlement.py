"""
Settlement Ledger - 작업 단위별 잔액 정산 장부

(actor, asset)별 부호 있는 잔액을 기록합니다. 스왑/유동성 변경 결과가
호출자 관점 delta로 기록되고, settle/take 로 상쇄됩니다. 작업 단위가
끝날 때 모든 항목이 0이어야 합니다.

0이 아닌 항목 수를 별도로 유지하므로 종료 검사는 O(1)입니다.
"""

import logging
from typing import Dict, Hashable, Tuple

from ..exceptions import UnsettledBalanceError

logger = logging.getLogger(__name__)


class SettlementLedger:
    """(actor, asset) → 부호 있는 잔액

    사용법:
        ledger = SettlementLedger()
        ledger.post("alice", "ETH", -100)   # alice가 100 ETH 지불해야 함
        ledger.post("alice", "ETH", 100)    # settle
        ledger.close_and_verify()
    """

    def __init__(self):
        self.balances: Dict[Tuple[Hashable, Hashable], int] = {}
        self.nonzero_count = 0

    def post(self, actor: Hashable, asset: Hashable, delta: int) -> int:
        """잔액에 delta 반영

        Returns:
            반영 후 잔액
        """
        key = (actor, asset)
        before = self.balances.get(key, 0)
        if delta == 0:
            return before

        after = before + delta
        if before == 0:
            self.nonzero_count += 1
        elif after == 0:
            self.nonzero_count -= 1

        if after:
            self.balances[key] = after
        else:
            self.balances.pop(key, None)
        return after

    def get(self, actor: Hashable, asset: Hashable) -> int:
        return self.balances.get((actor, asset), 0)

    def entries(self) -> Dict[Tuple[Hashable, Hashable], int]:
        """0이 아닌 항목의 복사본"""
        return dict(self.balances)

    def close_and_verify(self) -> None:
        """모든 잔액이 0인지 확인

        Raises:
            UnsettledBalanceError: 0이 아닌 항목이 남은 경우
        """
        if self.nonzero_count:
            logger.debug("Unsettled entries at close: %s", self.balances)
            raise UnsettledBalanceError(self.nonzero_count, self.balances)
