"""
Accounts module - Student and staff accounts, profiles and staff approval.
"""

from osas.modules.accounts.models import StaffAccount, StaffStatus, StudentAccount
from osas.modules.accounts.repository import StaffRepository, StudentRepository

__all__ = [
    "StaffAccount",
    "StaffStatus",
    "StudentAccount",
    "StaffRepository",
    "StudentRepository",
]
