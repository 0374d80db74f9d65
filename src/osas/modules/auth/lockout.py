"""
Student Login Lockout

State machine per student account: Open -> Locked -> Open.

- attempts >= max and the last failure is recent: Locked, the password is
  not checked
- attempts >= max and the lockout window has passed: Open again, the
  counter is reset before the password is checked
- each failed password increments the counter and stamps the time
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from osas.core.config import settings
from osas.modules.accounts.models import StudentAccount


@dataclass(frozen=True)
class LockoutPolicy:
    max_attempts: int
    lockout: timedelta

    @classmethod
    def from_settings(cls) -> "LockoutPolicy":
        return cls(
            max_attempts=settings.login_max_attempts,
            lockout=timedelta(minutes=settings.login_lockout_minutes),
        )

    @property
    def lockout_minutes(self) -> int:
        return int(self.lockout.total_seconds() // 60)


def lockout_remaining(
    student: StudentAccount,
    now: datetime,
    policy: LockoutPolicy,
) -> timedelta | None:
    """
    Time left on an active lockout.

    Returns:
        Remaining lockout duration, or None if the account is not locked
    """
    if student.login_attempts < policy.max_attempts or student.last_login_attempt is None:
        return None

    elapsed = now - student.last_login_attempt
    if elapsed >= policy.lockout:
        return None
    return policy.lockout - elapsed


def lock_expired(student: StudentAccount, now: datetime, policy: LockoutPolicy) -> bool:
    """True when the counter reached the maximum but the lockout has run out."""
    return (
        student.login_attempts >= policy.max_attempts
        and lockout_remaining(student, now, policy) is None
    )


def remaining_minutes(remaining: timedelta) -> int:
    """Whole minutes to report to the user, rounded up."""
    return max(1, math.ceil(remaining.total_seconds() / 60))


def attempts_left(attempts: int, policy: LockoutPolicy) -> int:
    return max(0, policy.max_attempts - attempts)
