# Fixed point scale factors
PRECISION = 1_000_000_000_000_000_000  # 1e18, 1.0 == 100%
BPS_DENOMINATOR = 10_000  # Basis points (100% = 10000)
UINT256_MAX = 2**256 - 1

# Time constants
SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY  # 31536000
SECONDS_PER_MONTH = 30 * SECONDS_PER_DAY  # 2592000

# Yield tiers (annual rate in bps, monthly rate scaled by PRECISION)
MAX_APY = 1300  # 13%
MID_APY = 1200  # 12%
MIN_APY = 1100  # 11%
MAX_MONTHLY_RATE = PRECISION * MAX_APY // (12 * BPS_DENOMINATOR)  # ~1.0833%
MID_MONTHLY_RATE = PRECISION * MID_APY // (12 * BPS_DENOMINATOR)  # 1.0%
MIN_MONTHLY_RATE = PRECISION * MIN_APY // (12 * BPS_DENOMINATOR)  # ~0.9167%

# Fee constants
MGMT_FEE_ANNUAL = PRECISION // 100  # 1% per year
PERF_FEE = PRECISION * 2 // 100  # 2% of user yield
EARLY_WITHDRAWAL_PENALTY = PRECISION * 20 // 100  # 20%
COOLDOWN_PERIOD = 7 * SECONDS_PER_DAY

# Senior backing zones
SENIOR_TARGET_BACKING = PRECISION * 110 // 100  # 110%
SENIOR_TRIGGER_BACKING = PRECISION  # 100%
SENIOR_RESTORE_BACKING = PRECISION * 1009 // 1000  # 100.9%

# Spillover split, must sum to PRECISION
JUNIOR_SPILLOVER_SHARE = PRECISION * 80 // 100
RESERVE_SPILLOVER_SHARE = PRECISION * 20 // 100

# Deposit cap: Senior supply may not exceed 10x the Reserve value
DEPOSIT_CAP_MULTIPLIER = 10

# Vault value marks, in bps
MIN_PROFIT_BPS = -5000
MAX_PROFIT_BPS = 10_000

MIN_REBASE_INTERVAL = SECONDS_PER_DAY
