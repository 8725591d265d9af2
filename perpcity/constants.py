"""
Fixed-point constants used by the PerpCity contracts.
"""

# 64.96 fixed-point normalization, shared with Uniswap sqrtPriceX96
Q96 = 2 ** 96

# USDC precision: amounts, fees and margin ratios are all scaled by 1e6
NUMBER_1E6 = 1_000_000

# Largest integer a float holds exactly (2^53 - 1)
MAX_SAFE_DECIMAL = 2 ** 53 - 1

TICK_BASE = 1.0001
MIN_TICK = -887272
MAX_TICK = 887272

ZERO_PERP_ID = "0x" + "0" * 64
