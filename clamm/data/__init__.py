"""
Data layer for CLAMM

풀 상태를 pandas DataFrame으로 변환하는 분석용 헬퍼
"""

from .frames import ticks_frame, positions_frame, liquidity_distribution
