"""Shared constants for Snipe."""

# Feed channel carrying new-pair token updates
NEW_PAIR_CHANNEL = "new_pair_update"

# Wrapped SOL mint used as the quote side of every swap
SOL_MINT = "So11111111111111111111111111111111111111112"
LAMPORTS_PER_SOL = 1_000_000_000

# Notification categories
CATEGORY_SIGNAL = "Signal"
CATEGORY_TRADE = "Trade"
CATEGORY_STOP_LOSS = "StopLoss"
CATEGORY_TAKE_PROFIT = "TakeProfit"
CATEGORY_INC = "Inc"

NOTIFICATION_CATEGORIES = (
    CATEGORY_SIGNAL,
    CATEGORY_TRADE,
    CATEGORY_STOP_LOSS,
    CATEGORY_TAKE_PROFIT,
    CATEGORY_INC,
)
