"""
Standard error codes for the service layer.

These error codes allow callers to handle specific input problems without
parsing error message text.

Usage:
    from services.error_codes import INVALID_TEAM_COUNT
    from services.result import Result

    if team_count < 1:
        return Result.fail("Need at least 1 team", code=INVALID_TEAM_COUNT)
"""

# Roster errors
INVALID_ROSTER = "invalid_roster"
INVALID_PLAYER = "invalid_player"
DUPLICATE_PLAYER = "duplicate_player"

# Balancing request errors
INVALID_TEAM_COUNT = "invalid_team_count"
INVALID_CONSTRAINT = "invalid_constraint"
INVALID_QUOTA = "invalid_quota"
