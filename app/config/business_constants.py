"""
Business logic constants for the licensing ledger.

Central location for business rules and constants used across the application.
This module has no project imports so settings, services and the web layer can
all use it without circular dependencies.
"""

# ========================================================================
# REDEMPTION CODES
# ========================================================================

# 32 symbols: A-Z and 2-9 without the lookalikes 0, 1, I and O
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_EXCLUDED_SYMBOLS = frozenset("01IO")
CODE_SEGMENTS = 3
CODE_SEGMENT_LENGTH = 4

COACH_CODE_PREFIX = "COACH"
TEAM_CODE_PREFIX = "TEAM"

# Coach codes establish team ownership and are single use
COACH_CODE_MAX_USES = 1

CODE_GENERATION_MAX_ATTEMPTS = 5

# Promo codes reuse the alphabet, without prefix or segments
PROMO_CODE_LENGTH = 8
PROMO_CODE_MIN_LENGTH = 4
PROMO_CODE_MAX_LENGTH = 12

# ========================================================================
# LICENSES
# ========================================================================

# Add-seats requests may grow a team to at most 2x its purchased size
SEAT_EXPANSION_MULTIPLIER = 2

# ========================================================================
# TRIALS
# ========================================================================

TRIAL_DAYS = 30
TRIAL_GRACE_DAYS = 7
TRIAL_SOURCES = ("fb_outreach", "x_outreach", "admin")
