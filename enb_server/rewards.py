"""
rewards.py - Daily claim reward calculator.

Pure functions, no storage access. A claim is allowed once per calendar day
(local date of the server). Claiming on the day right after the previous
claim grows the streak; any longer gap starts it over at 1.

    base reward  = 10 * min(streak, 5)      (10 on a fresh streak)
    final reward = floor(base * membership multiplier)
"""

import enum
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional

from enb_server.errors import AlreadyClaimedToday, DomainRuleError

BASE_DAILY_REWARD = 10
MAX_STREAK_MULTIPLIER = 5


class MembershipLevel(str, enum.Enum):
    BASED = "Based"
    SUPER_BASED = "SuperBased"
    LEGENDARY = "Legendary"


MEMBERSHIP_MULTIPLIERS: Dict[MembershipLevel, float] = {
    MembershipLevel.BASED: 1.0,
    MembershipLevel.SUPER_BASED: 1.5,
    MembershipLevel.LEGENDARY: 2.0,
}

# Upgrade order; a level may only move to a later entry.
MEMBERSHIP_ORDER = (
    MembershipLevel.BASED,
    MembershipLevel.SUPER_BASED,
    MembershipLevel.LEGENDARY,
)

_LEVEL_ALIASES = {
    "based": MembershipLevel.BASED,
    "superbased": MembershipLevel.SUPER_BASED,
    "super based": MembershipLevel.SUPER_BASED,
    "super_based": MembershipLevel.SUPER_BASED,
    "legendary": MembershipLevel.LEGENDARY,
}


@dataclass(frozen=True)
class ClaimOutcome:
    new_streak: int
    base_reward: int
    multiplier: float
    reward: int


def parse_membership_level(value) -> MembershipLevel:
    """Accept enum members, canonical names and the UI's "Super Based" spelling."""
    if isinstance(value, MembershipLevel):
        return value
    key = " ".join(str(value or "").split()).lower()
    level = _LEVEL_ALIASES.get(key)
    if level is None:
        raise DomainRuleError(f"Unknown membership level: {value}")
    return level


def membership_multiplier(level) -> float:
    return MEMBERSHIP_MULTIPLIERS[parse_membership_level(level)]


def membership_rank(level) -> int:
    return MEMBERSHIP_ORDER.index(parse_membership_level(level))


def calendar_day(ts: float) -> date:
    return datetime.fromtimestamp(ts).date()


def calculate_daily_reward(
    last_claim_time: Optional[float],
    consecutive_days: int,
    membership_level,
    now: float,
) -> ClaimOutcome:
    """Work out the streak and reward for a claim made at ``now``.

    Raises AlreadyClaimedToday if ``last_claim_time`` is on the same calendar day.
    """
    multiplier = membership_multiplier(membership_level)
    today = calendar_day(now)

    new_streak = 1
    base_reward = BASE_DAILY_REWARD
    if last_claim_time is not None:
        gap = (today - calendar_day(last_claim_time)).days
        if gap == 0:
            raise AlreadyClaimedToday("Daily reward already claimed today")
        if gap == 1:
            new_streak = max(consecutive_days, 0) + 1
            base_reward = BASE_DAILY_REWARD * min(new_streak, MAX_STREAK_MULTIPLIER)

    return ClaimOutcome(
        new_streak=new_streak,
        base_reward=base_reward,
        multiplier=multiplier,
        reward=math.floor(base_reward * multiplier),
    )


def claim_status(
    last_claim_time: Optional[float], consecutive_days: int, now: float,
) -> dict:
    """Whether a claim is possible at ``now`` and which streak is still alive."""
    if last_claim_time is None:
        return {"canClaim": True, "lastClaimToday": False, "consecutiveDays": 0}
    gap = (calendar_day(now) - calendar_day(last_claim_time)).days
    last_claim_today = gap == 0
    return {
        "canClaim": not last_claim_today,
        "lastClaimToday": last_claim_today,
        "consecutiveDays": consecutive_days if gap in (0, 1) else 0,
    }
