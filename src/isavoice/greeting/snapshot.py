"""Financial snapshot assembled for a greeting.

The greeting only reads financial data; where it comes from is up to the
host application, which plugs in a FinancialDataProvider.
"""

import asyncio
import calendar
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class PageType(str, Enum):
    """Pages that may greet the user."""

    DASHBOARD = "dashboard"
    PLANNER = "planner"
    CARD = "card"
    GOALS = "goals"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | PageType") -> "PageType":
        """Map a page tag to a PageType; unknown tags are OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class BalanceBreakdown:
    """Current balance split by payment method."""

    debit: float
    credit: float = 0.0


@dataclass(frozen=True)
class Transaction:
    amount: float
    type: str  # "income" or "expense"
    date: datetime
    payment_method: str = "debit"


@dataclass(frozen=True)
class Goal:
    name: str
    target_amount: float
    current_amount: float = 0.0


@dataclass(frozen=True)
class ScheduledPayment:
    amount: float
    due_day: int
    is_active: bool = True
    description: str = ""


@dataclass(frozen=True)
class SalaryInfo:
    salary_day: int | None
    salary_amount: float = 0.0
    advance_amount: float = 0.0


class FinancialDataProvider(Protocol):
    """Read-only access to a user's financial data."""

    async def get_balance(self, user_id: int, initial_balance: float) -> BalanceBreakdown: ...

    async def get_transactions(self, user_id: int) -> list[Transaction]: ...

    async def get_goals(self, user_id: int) -> list[Goal]: ...

    async def get_scheduled_payments(self, user_id: int) -> list[ScheduledPayment]: ...

    async def get_salary_info(self, user_id: int) -> SalaryInfo | None: ...


@dataclass(frozen=True)
class UserProfile:
    """The signed-in user, as known to the host page."""

    user_id: int
    name: str
    initial_balance: float = 0.0
    credit_limit: float = 0.0
    credit_used: float = 0.0


@dataclass
class FinancialSnapshot:
    """Read-only aggregate used to compose greeting text.

    Only the fields the page needs are filled in; the rest keep their
    defaults.
    """

    user_name: str = ""
    debit_balance: float = 0.0
    today_spent: float = 0.0
    due_today: float = 0.0
    days_until_salary: int | None = None
    active_goals: int = 0
    goals_without_progress: int = 0
    monthly_payments: float = 0.0
    credit_limit: float = 0.0
    credit_used: float = 0.0


def days_until_day(target_day: int, today: date) -> int:
    """Days until the next occurrence of a day of the month.

    A target beyond the length of a month falls on that month's last day.

    Args:
        target_day: Day of the month (1-31)
        today: Reference date

    Returns:
        0 when target_day is today, otherwise a positive number of days

    Raises:
        ValueError: If target_day is outside 1-31
    """
    if not 1 <= target_day <= 31:
        raise ValueError(f"Day of month must be between 1 and 31, got {target_day}")

    def clamped(year: int, month: int) -> date:
        return date(year, month, min(target_day, calendar.monthrange(year, month)[1]))

    target = clamped(today.year, today.month)
    if target < today:
        year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
        target = clamped(year, month)
    return (target - today).days


class SnapshotBuilder:
    """Gathers the data a page greeting needs, concurrently.

    Example:
        builder = SnapshotBuilder(provider)
        snapshot = await builder.build(PageType.DASHBOARD, profile)
    """

    def __init__(
        self,
        provider: FinancialDataProvider,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.provider = provider
        self.clock = clock

    async def build(self, page_type: PageType, profile: UserProfile) -> FinancialSnapshot:
        """Build the snapshot for one page.

        Raises:
            Whatever the data provider raises; the sequencer handles it.
        """
        snapshot = FinancialSnapshot(
            user_name=profile.name,
            credit_limit=profile.credit_limit,
            credit_used=profile.credit_used,
        )
        today = self.clock().date()
        uid = profile.user_id

        if page_type is PageType.DASHBOARD:
            balance, transactions, salary, payments = await asyncio.gather(
                self.provider.get_balance(uid, profile.initial_balance),
                self.provider.get_transactions(uid),
                self.provider.get_salary_info(uid),
                self.provider.get_scheduled_payments(uid),
            )
            snapshot.debit_balance = balance.debit
            snapshot.today_spent = sum(
                t.amount
                for t in transactions
                if t.type == "expense" and t.date.date() == today
            )
            snapshot.due_today = sum(
                p.amount for p in payments if p.is_active and p.due_day == today.day
            )
            snapshot.days_until_salary = self._days_until_salary(salary, today)

        elif page_type is PageType.PLANNER:
            goals, salary, payments = await asyncio.gather(
                self.provider.get_goals(uid),
                self.provider.get_salary_info(uid),
                self.provider.get_scheduled_payments(uid),
            )
            snapshot.active_goals = len(goals)
            snapshot.goals_without_progress = sum(1 for g in goals if not g.current_amount)
            snapshot.monthly_payments = sum(p.amount for p in payments if p.is_active)
            snapshot.days_until_salary = self._days_until_salary(salary, today)

        elif page_type is PageType.GOALS:
            snapshot.active_goals = len(await self.provider.get_goals(uid))

        logger.debug(f"Built {page_type.value} snapshot: {snapshot}")
        return snapshot

    @staticmethod
    def _days_until_salary(salary: SalaryInfo | None, today: date) -> int | None:
        if salary is None or not salary.salary_day:
            return None
        return days_until_day(salary.salary_day, today)


@dataclass
class StaticFinancialData:
    """In-memory FinancialDataProvider, loadable from a JSON document.

    Balance is derived the way the bank computes it: initial balance plus
    income minus debit expenses.

    JSON layout:
        {
          "transactions": [{"amount": 12.5, "type": "expense",
                            "date": "2026-10-19T09:30:00",
                            "payment_method": "debit"}],
          "goals": [{"name": "Viagem", "target_amount": 3000,
                     "current_amount": 0}],
          "scheduled_payments": [{"amount": 150, "due_day": 10}],
          "salary": {"salary_day": 5, "salary_amount": 4200}
        }
    """

    transactions: list[Transaction] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    scheduled_payments: list[ScheduledPayment] = field(default_factory=list)
    salary: SalaryInfo | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "StaticFinancialData":
        """Build from parsed JSON.

        Raises:
            ValueError: If the document is not an object or a record is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid financial data: expected a JSON object, got {type(data).__name__}"
            )
        try:
            transactions = [
                Transaction(
                    amount=float(t["amount"]),
                    type=t["type"],
                    date=datetime.fromisoformat(t["date"]),
                    payment_method=t.get("payment_method", "debit"),
                )
                for t in data.get("transactions", [])
            ]
            goals = [
                Goal(
                    name=g.get("name", ""),
                    target_amount=float(g.get("target_amount", 0)),
                    current_amount=float(g.get("current_amount") or 0),
                )
                for g in data.get("goals", [])
            ]
            payments = [
                ScheduledPayment(
                    amount=float(p["amount"]),
                    due_day=int(p["due_day"]),
                    is_active=bool(p.get("is_active", True)),
                    description=p.get("description", ""),
                )
                for p in data.get("scheduled_payments", [])
            ]
            salary_data = data.get("salary")
            salary = (
                SalaryInfo(
                    salary_day=salary_data.get("salary_day"),
                    salary_amount=float(salary_data.get("salary_amount", 0)),
                    advance_amount=float(salary_data.get("advance_amount", 0)),
                )
                if salary_data
                else None
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid financial data: {e}") from e

        return cls(transactions, goals, payments, salary)

    @classmethod
    def from_file(cls, path: Path) -> "StaticFinancialData":
        """Load from a JSON file.

        Raises:
            ValueError: If the file is not valid JSON or a record is malformed
            OSError: If the file cannot be read
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
        return cls.from_json(data)

    async def get_balance(self, user_id: int, initial_balance: float) -> BalanceBreakdown:
        income = sum(t.amount for t in self.transactions if t.type == "income")
        debit_expense = sum(
            t.amount
            for t in self.transactions
            if t.type == "expense" and t.payment_method == "debit"
        )
        credit_expense = sum(
            t.amount
            for t in self.transactions
            if t.type == "expense" and t.payment_method == "credit"
        )
        return BalanceBreakdown(
            debit=initial_balance + income - debit_expense, credit=credit_expense
        )

    async def get_transactions(self, user_id: int) -> list[Transaction]:
        return list(self.transactions)

    async def get_goals(self, user_id: int) -> list[Goal]:
        return list(self.goals)

    async def get_scheduled_payments(self, user_id: int) -> list[ScheduledPayment]:
        return list(self.scheduled_payments)

    async def get_salary_info(self, user_id: int) -> SalaryInfo | None:
        return self.salary
