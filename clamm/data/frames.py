"""
풀 상태 → pandas DataFrame 변환

분석/시각화용 스냅샷입니다. 유동성 값은 int64 범위를 넘을 수 있으므로
정수 컬럼은 object dtype(파이썬 int)으로 유지하고, 가격 컬럼만 float입니다.
"""

import numpy as np
import pandas as pd

from ..math.fee_math import calculate_uncollected_fees
from ..math.liquidity_math import get_amounts_for_liquidity
from ..math.tick_math import get_sqrt_ratio_at_tick, tick_to_price
from ..pool.pool import Pool

TICK_COLUMNS = [
    'tick', 'price', 'liquidity_gross', 'liquidity_net',
    'fee_growth_outside_0_x128', 'fee_growth_outside_1_x128',
]

POSITION_COLUMNS = [
    'owner', 'tick_lower', 'tick_upper', 'salt', 'liquidity',
    'amount0', 'amount1', 'tokens_owed0', 'tokens_owed1',
]


def ticks_frame(pool: Pool, token0_decimals: int = 18, token1_decimals: int = 18) -> pd.DataFrame:
    """초기화된 틱 목록 (틱 오름차순)"""
    rows = [
        {
            'tick': tick,
            'price': tick_to_price(tick, token0_decimals, token1_decimals),
            'liquidity_gross': info.liquidity_gross,
            'liquidity_net': info.liquidity_net,
            'fee_growth_outside_0_x128': info.fee_growth_outside_0_x128,
            'fee_growth_outside_1_x128': info.fee_growth_outside_1_x128,
        }
        for tick, info in sorted(pool.ticks.ticks.items())
    ]
    df = pd.DataFrame(rows, columns=TICK_COLUMNS)
    for column in TICK_COLUMNS:
        if column != 'price':
            df[column] = df[column].astype(object)
    return df


def positions_frame(pool: Pool) -> pd.DataFrame:
    """포지션별 유동성, 현재 가격 기준 보유 수량, 미수령 수수료"""
    state = pool.state
    rows = []
    for key, info in pool.positions.items():
        sqrt_lower = get_sqrt_ratio_at_tick(key.tick_lower)
        sqrt_upper = get_sqrt_ratio_at_tick(key.tick_upper)
        amount0, amount1 = get_amounts_for_liquidity(
            state.sqrt_price_x96, sqrt_lower, sqrt_upper, info.liquidity
        )
        inside_0, inside_1 = pool.get_fee_growth_inside(key.tick_lower, key.tick_upper)
        rows.append({
            'owner': key.owner,
            'tick_lower': key.tick_lower,
            'tick_upper': key.tick_upper,
            'salt': key.salt,
            'liquidity': info.liquidity,
            'amount0': amount0,
            'amount1': amount1,
            'tokens_owed0': calculate_uncollected_fees(
                info.liquidity, inside_0, info.fee_growth_inside_0_last_x128
            ),
            'tokens_owed1': calculate_uncollected_fees(
                info.liquidity, inside_1, info.fee_growth_inside_1_last_x128
            ),
        })
    return pd.DataFrame(rows, columns=POSITION_COLUMNS).astype(object)


def liquidity_distribution(pool: Pool, token0_decimals: int = 18, token1_decimals: int = 18) -> pd.DataFrame:
    """틱 구간별 활성 유동성

    각 행은 [tick_lower, tick_upper) 구간이며 active_liquidity는
    해당 구간에 가격이 있을 때의 풀 유동성입니다 (liquidity_net 누적합).
    """
    ticks = sorted(pool.ticks.ticks)
    if not ticks:
        return pd.DataFrame(columns=['tick_lower', 'tick_upper', 'price_lower', 'price_upper', 'active_liquidity'])

    nets = np.array([pool.ticks.ticks[tick].liquidity_net for tick in ticks], dtype=object)
    active = np.cumsum(nets)

    df = pd.DataFrame({
        'tick_lower': ticks[:-1],
        'tick_upper': ticks[1:],
        'active_liquidity': list(active[:-1]),
    })
    df['price_lower'] = [tick_to_price(t, token0_decimals, token1_decimals) for t in df['tick_lower']]
    df['price_upper'] = [tick_to_price(t, token0_decimals, token1_decimals) for t in df['tick_upper']]
    df['active_liquidity'] = df['active_liquidity'].astype(object)
    return df[['tick_lower', 'tick_upper', 'price_lower', 'price_upper', 'active_liquidity']]
