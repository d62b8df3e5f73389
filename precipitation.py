# precipitation.py
from collections import namedtuple

Evaluation = namedtuple('Evaluation', ['alert', 'tier'])


def match_tier(total_inches, tiers):
    """First tier in precedence order whose band contains the total, else None."""
    for tier in tiers:
        if tier.matches(total_inches):
            return tier
    return None


def evaluate(total_inches, threshold_inches, tiers):
    """
    Decide whether a rainfall total warrants an alert.

    The alert fires only when the total is strictly above the threshold.
    Tiers are checked in the order given (high before medium), so a total
    sitting on a boundary shared by two bands resolves to the earlier one.
    An alert with no matching tier fires without a snooze.
    """
    if total_inches <= threshold_inches:
        return Evaluation(alert=False, tier=None)
    return Evaluation(alert=True, tier=match_tier(total_inches, tiers))
