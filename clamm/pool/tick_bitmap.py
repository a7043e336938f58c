"""
Tick Bitmap - 초기화된 틱 인덱스

tick_spacing 배수마다 1비트. 압축 틱(tick // tick_spacing)의 상위 비트가
워드 위치, 하위 8비트가 워드 내 비트 위치입니다. 비트가 1이면 해당 틱이
활성(liquidity_gross != 0) 상태입니다.
"""

from typing import Dict, Tuple

from ..constants import WORD_SIZE
from ..exceptions import TickMisalignedError


def most_significant_bit(x: int) -> int:
    if x <= 0:
        raise ValueError("x는 양수여야 합니다")
    return x.bit_length() - 1


def least_significant_bit(x: int) -> int:
    if x <= 0:
        raise ValueError("x는 양수여야 합니다")
    return (x & -x).bit_length() - 1


def compress(tick: int, tick_spacing: int) -> int:
    """tick // tick_spacing (음수는 -∞ 방향 내림)"""
    return tick // tick_spacing


def position(compressed: int) -> Tuple[int, int]:
    """압축 틱 → (word_pos, bit_pos)"""
    return compressed >> 8, compressed & 0xFF


class TickBitmap:
    """워드 단위 희소 비트맵

    사용법:
        bitmap = TickBitmap(tick_spacing=60)
        bitmap.flip_tick(120)
        bitmap.next_initialized_tick_within_one_word(0, lte=False)  # (120, True)
    """

    def __init__(self, tick_spacing: int):
        self.tick_spacing = tick_spacing
        self.words: Dict[int, int] = {}

    def flip_tick(self, tick: int) -> None:
        """틱의 활성 비트를 반전"""
        if tick % self.tick_spacing:
            raise TickMisalignedError(tick, self.tick_spacing)
        word_pos, bit_pos = position(tick // self.tick_spacing)
        word = self.words.get(word_pos, 0) ^ (1 << bit_pos)
        if word:
            self.words[word_pos] = word
        else:
            self.words.pop(word_pos, None)

    def is_initialized(self, tick: int) -> bool:
        if tick % self.tick_spacing:
            return False
        word_pos, bit_pos = position(tick // self.tick_spacing)
        return bool(self.words.get(word_pos, 0) >> bit_pos & 1)

    def next_initialized_tick_within_one_word(self, tick: int, lte: bool) -> Tuple[int, bool]:
        """같은 워드 안에서 다음 초기화된 틱 검색

        Args:
            tick: 시작 틱
            lte: True면 tick 이하(왼쪽)로, False면 tick 초과(오른쪽)로 검색

        Returns:
            (다음 틱, 초기화 여부). 워드 안에 없으면 워드 경계 틱과 False를
            반환하므로 호출자는 한 워드 이동 후 다시 검색합니다.
        """
        compressed = compress(tick, self.tick_spacing)

        if lte:
            word_pos, bit_pos = position(compressed)
            # bit_pos 이하 모든 비트
            mask = (1 << (bit_pos + 1)) - 1
            masked = self.words.get(word_pos, 0) & mask
            if masked:
                next_compressed = compressed - (bit_pos - most_significant_bit(masked))
                return next_compressed * self.tick_spacing, True
            return (compressed - bit_pos) * self.tick_spacing, False

        # 현재 틱이 포함된 칸의 다음 칸부터 검색
        compressed += 1
        word_pos, bit_pos = position(compressed)
        # bit_pos 이상 모든 비트
        mask = ((1 << WORD_SIZE) - 1) ^ ((1 << bit_pos) - 1)
        masked = self.words.get(word_pos, 0) & mask
        if masked:
            next_compressed = compressed + (least_significant_bit(masked) - bit_pos)
            return next_compressed * self.tick_spacing, True
        return (compressed + (WORD_SIZE - 1 - bit_pos)) * self.tick_spacing, False

    def __len__(self) -> int:
        return sum(bin(word).count("1") for word in self.words.values())
