"""
CLAMM 예외 정의

모든 예외는 CLAMMError를 상속합니다. 범위/가격 제한 오류는 ValueError,
수치 범위 오류는 ArithmeticError도 함께 상속하므로 내장 예외 계열로도
잡을 수 있습니다.

어떤 오류도 엔진 내부에서 재시도하지 않습니다. 작업 단위(unit of work)
안에서 발생하면 모든 상태 변경이 롤백된 뒤 호출자에게 전파됩니다.
"""


class CLAMMError(Exception):
    """엔진 오류 최상위 클래스"""
    pass


# --- 범위 오류 ---

class RangeError(CLAMMError, ValueError):
    """틱 또는 가격이 허용 범위를 벗어남"""
    pass


class TickRangeError(RangeError):
    """틱이 [MIN_TICK, MAX_TICK] 범위를 벗어남"""

    def __init__(self, tick: int):
        self.tick = tick
        super().__init__(f"틱이 유효 범위를 벗어났습니다: {tick}")


class SqrtPriceRangeError(RangeError):
    """sqrtPriceX96이 [MIN_SQRT_RATIO, MAX_SQRT_RATIO) 범위를 벗어남"""

    def __init__(self, sqrt_price_x96: int):
        self.sqrt_price_x96 = sqrt_price_x96
        super().__init__(f"sqrtPriceX96이 유효 범위를 벗어났습니다: {sqrt_price_x96}")


class TicksMisorderedError(RangeError):
    """tick_lower >= tick_upper"""

    def __init__(self, tick_lower: int, tick_upper: int):
        self.tick_lower = tick_lower
        self.tick_upper = tick_upper
        super().__init__(f"하한 틱이 상한 틱보다 작아야 합니다: {tick_lower} >= {tick_upper}")


class TickMisalignedError(RangeError):
    """틱이 tick_spacing의 배수가 아님"""

    def __init__(self, tick: int, tick_spacing: int):
        self.tick = tick
        self.tick_spacing = tick_spacing
        super().__init__(f"틱 {tick}이(가) 틱 간격 {tick_spacing}의 배수가 아닙니다")


class TickSpacingError(RangeError):
    """지원하지 않는 틱 간격"""
    pass


# --- 수치 범위 오류 ---

class ArithmeticBoundsError(CLAMMError, ArithmeticError):
    """유동성/금액 연산이 표현 가능한 범위를 벗어남"""
    pass


class NumericOverflowError(ArithmeticBoundsError):
    pass


class NumericUnderflowError(ArithmeticBoundsError):
    pass


class TickLiquidityOverflowError(NumericOverflowError):
    """틱의 liquidity_gross가 틱당 최대 유동성을 초과"""

    def __init__(self, tick: int, liquidity_gross: int, max_liquidity: int):
        self.tick = tick
        self.liquidity_gross = liquidity_gross
        self.max_liquidity = max_liquidity
        super().__init__(
            f"틱 {tick}의 유동성 {liquidity_gross}이(가) 상한 {max_liquidity}을(를) 초과합니다"
        )


# --- 가격 제한 오류 ---

class PriceLimitError(CLAMMError, ValueError):
    """스왑 가격 제한이 잘못됨. 상태 변경 전에 거부됩니다."""
    pass


class PriceLimitAlreadyExceeded(PriceLimitError):
    """가격 제한이 스왑 방향의 반대편에 있음"""

    def __init__(self, sqrt_price_x96: int, sqrt_price_limit_x96: int):
        self.sqrt_price_x96 = sqrt_price_x96
        self.sqrt_price_limit_x96 = sqrt_price_limit_x96
        super().__init__(
            f"가격 제한 {sqrt_price_limit_x96}이(가) 현재 가격 {sqrt_price_x96} 기준으로 이미 초과되었습니다"
        )


class PriceLimitOutOfBounds(PriceLimitError):
    """가격 제한이 MIN/MAX sqrt ratio 밖에 있음"""

    def __init__(self, sqrt_price_limit_x96: int):
        self.sqrt_price_limit_x96 = sqrt_price_limit_x96
        super().__init__(f"가격 제한이 유효 범위를 벗어났습니다: {sqrt_price_limit_x96}")


# --- 정산/유동성 오류 ---

class UnsettledBalanceError(CLAMMError):
    """작업 단위 종료 시 0이 아닌 정산 항목이 남아 있음"""

    def __init__(self, nonzero_count: int, open_entries=None):
        self.nonzero_count = nonzero_count
        self.open_entries = dict(open_entries or {})
        super().__init__(
            f"정산되지 않은 잔액이 {nonzero_count}건 남아 있습니다: {self.open_entries}"
        )


class InsufficientLiquidityError(CLAMMError):
    """스왑이 더 이상 진행할 수 없음"""
    pass


class NoLiquidityToReceiveFeesError(CLAMMError):
    """활성 유동성이 0인 풀에 donate"""
    pass


# --- 풀/수수료 상태 오류 ---

class PoolNotInitializedError(CLAMMError):
    pass


class PoolAlreadyInitializedError(CLAMMError):
    pass


class InvalidFeeError(CLAMMError, ValueError):
    """수수료 값이 허용 범위를 벗어남"""
    pass


class InvalidFeeForExactOutError(InvalidFeeError):
    """수수료 100%에서는 exact output 스왑이 불가능"""
    pass


# --- 작업 단위 오류 ---

class AlreadyUnlockedError(CLAMMError):
    """작업 단위가 이미 열려 있음 (중첩 호출)"""
    pass


class ManagerLockedError(CLAMMError):
    """작업 단위 밖에서 상태 변경 호출"""
    pass


class InvalidClearError(CLAMMError, ValueError):
    """clear 금액이 양수 잔액과 정확히 일치하지 않음"""
    pass


class PositionOwnerMismatchError(CLAMMError, ValueError):
    """sender가 포지션 소유자가 아님"""

    def __init__(self, sender, owner):
        self.sender = sender
        self.owner = owner
        super().__init__(f"{sender!r}은(는) {owner!r}의 포지션을 변경할 수 없습니다")
