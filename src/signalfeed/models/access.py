"""Who may see trader performance metrics.

Signed-out users are asked to log in.  VIP members always see metrics.
Free accounts get a trial window counted from account creation; after it
ends the metrics are blurred with a "free trial expired" prompt.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime

from signalfeed.core.constants import FREE_TRIAL_DAYS, VIP_STATUS_FREE

REASON_LOGIN_REQUIRED = "login_required"
REASON_FREE_EXPIRED = "free_expired"

_DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class MetricsAccess:
    can_view_metrics: bool
    reason: str | None = None
    is_free_trial_active: bool = False
    remaining_days: int | None = None


def metrics_access_state(
    user_id: str | None,
    vip_status: str | None = None,
    created_at: datetime | None = None,
    now: float | None = None,
) -> MetricsAccess:
    """Decide metrics visibility for a user.

    Parameters
    ----------
    user_id:
        Signed-in user, or ``None`` for anonymous visitors.
    vip_status:
        Profile VIP tier; anything other than ``"free"`` (or empty) is VIP.
    created_at:
        Profile creation time (aware datetime); starts the free trial.
    now:
        Unix epoch seconds, injectable for tests.
    """
    if not user_id:
        return MetricsAccess(can_view_metrics=False, reason=REASON_LOGIN_REQUIRED)

    if vip_status and vip_status != VIP_STATUS_FREE:
        return MetricsAccess(can_view_metrics=True)

    if created_at is None:
        return MetricsAccess(can_view_metrics=False, reason=REASON_FREE_EXPIRED, remaining_days=0)

    if now is None:
        now = time.time()
    trial_end = created_at.timestamp() + FREE_TRIAL_DAYS * _DAY_SECONDS
    remaining = trial_end - now
    if remaining >= 0:
        return MetricsAccess(
            can_view_metrics=True,
            is_free_trial_active=True,
            remaining_days=math.floor(remaining / _DAY_SECONDS + 0.5),
        )
    return MetricsAccess(can_view_metrics=False, reason=REASON_FREE_EXPIRED, remaining_days=0)
