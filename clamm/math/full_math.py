"""
Full Math - 고정소수점 정수 연산 헬퍼

Python 정수는 크기 제한이 없으므로 중간 곱셈은 그대로 계산하고
마지막에 한 번만 나눕니다. 누적값(fee growth)은 uint256에서 랩어라운드되고,
금액은 int128 범위를 검사합니다.
"""

from ..constants import UINT256_MAX, INT128_MAX, INT128_MIN
from ..exceptions import NumericOverflowError, NumericUnderflowError


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)"""
    if denominator == 0:
        raise ZeroDivisionError("denominator가 0입니다")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)"""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """ceil(numerator / denominator)"""
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def wrap_uint256(value: int) -> int:
    """uint256 랩어라운드 (Solidity unchecked 산술과 동일)"""
    return value & UINT256_MAX


def to_int128(value: int) -> int:
    if value > INT128_MAX:
        raise NumericOverflowError(f"int128 오버플로우: {value}")
    if value < INT128_MIN:
        raise NumericUnderflowError(f"int128 언더플로우: {value}")
    return value
