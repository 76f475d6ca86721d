"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for purchase amounts, fees, prices
# Precision: 12 digits total, 2 after decimal point (cents)
# Range: up to 9,999,999,999.99
MoneyType = DECIMAL(12, 2)

# Standard percentage type for discounts and fee rates
# Precision: 5 digits total, 2 after decimal point
# Suitable for: 10.00%, 5.00%, 100.00%
# Range: 0.00 to 999.99
PercentType = DECIMAL(5, 2)
