"""Wilson score confidence interval for a win-rate proportion.

Win-rate samples are often a few dozen trades per cohort, where the
normal approximation (p ± z·sqrt(p(1-p)/n)) undercovers and can leave
[0, 1].  The Wilson interval stays inside [0, 1] and remains
informative at p = 0 or p = 1.

Usage::

    ci = wilson_interval(successes=18, total=25)
    print(ci.rounded(1))  # center=69.1 lower=52.4 upper=85.7
"""

from __future__ import annotations

import math

from winloss_analytics.core.errors import InvalidParameterError

from .models import WilsonInterval

DEFAULT_Z = 1.96  # 95% two-sided


def wilson_interval(
    successes: int,
    total: int,
    z: float = DEFAULT_Z,
) -> WilsonInterval:
    """Compute the Wilson score interval in percent.

    Parameters
    ----------
    successes : int
        Number of wins.
    total : int
        Number of decided trades.  ``0`` yields the zero-sample
        sentinel (all zeros, ``insufficient_sample=True``).
    z : float
        Standard normal quantile.  Default 1.96 (95%).
    """
    if total < 0 or successes < 0 or successes > total:
        raise InvalidParameterError(
            f"invalid proportion: successes={successes}, total={total}"
        )
    if z <= 0:
        raise InvalidParameterError(f"z must be positive, got {z}")

    if total == 0:
        return WilsonInterval(insufficient_sample=True)

    p = successes / total
    z2 = z * z
    denom = 1.0 + z2 / total
    center = (p + z2 / (2 * total)) / denom
    margin = (z / denom) * math.sqrt(p * (1 - p) / total + z2 / (4 * total * total))

    lower = max(0.0, center - margin)
    upper = min(1.0, center + margin)

    return WilsonInterval(
        center=center * 100,
        lower=lower * 100,
        upper=upper * 100,
    )
