"""Automatic spoken greetings for the banking pages."""

from .messages import compose_greeting, first_access_greeting, time_greeting
from .sequencer import GreetingPhase, GreetingSequencer
from .snapshot import (
    BalanceBreakdown,
    FinancialDataProvider,
    FinancialSnapshot,
    Goal,
    PageType,
    SalaryInfo,
    ScheduledPayment,
    SnapshotBuilder,
    StaticFinancialData,
    Transaction,
    UserProfile,
    days_until_day,
)

__all__ = [
    "BalanceBreakdown",
    "FinancialDataProvider",
    "FinancialSnapshot",
    "Goal",
    "GreetingPhase",
    "GreetingSequencer",
    "PageType",
    "SalaryInfo",
    "ScheduledPayment",
    "SnapshotBuilder",
    "StaticFinancialData",
    "Transaction",
    "UserProfile",
    "compose_greeting",
    "days_until_day",
    "first_access_greeting",
    "time_greeting",
]
