"""
Manager layer for CLAMM

풀 레지스트리, 작업 단위, 정산 장부, 훅
"""

from .settlement import SettlementLedger
from .hooks import BaseHooks
from .pool_manager import PoolManager
