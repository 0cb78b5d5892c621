"""Greeting texts spoken by ISA on each page.

All functions are pure: same snapshot and time, same text.
"""

from datetime import datetime

from ..tts.normalize import currency_to_speech
from .snapshot import FinancialSnapshot, PageType


def time_greeting(hour: int) -> str:
    if hour < 12:
        return "Bom dia"
    if hour < 18:
        return "Boa tarde"
    return "Boa noite"


def _first_name(name: str) -> str:
    parts = name.split()
    return parts[0] if parts else ""


def first_access_greeting(name: str, now: datetime) -> str:
    """Greeting for the first dashboard visit of the day."""
    return (
        f"{time_greeting(now.hour)}, {_first_name(name)}! "
        "Sou a ISA, suporte oficial do INOVAHUB. Como posso te ajudar hoje?"
    )


def home_greeting(
    name: str,
    balance: float,
    today_spent: float,
    due_today: float,
    days_until_salary: int | None,
    now: datetime,
) -> str:
    """Dashboard greeting: balance, today's spending, bills and payday."""
    message = f"{time_greeting(now.hour)}, {_first_name(name)}! "
    message += f"Seu saldo disponível é de {currency_to_speech(balance)}. "

    if today_spent > 0:
        message += f"Hoje você gastou {currency_to_speech(today_spent)}. "
    if due_today > 0:
        message += f"Você tem {currency_to_speech(due_today)} para pagar hoje. "

    if days_until_salary is not None and days_until_salary >= 0:
        if days_until_salary == 0:
            message += "Hoje é dia de salário! "
        elif days_until_salary == 1:
            message += "Amanhã é dia de salário. "
        elif days_until_salary <= 5:
            message += f"Faltam {days_until_salary} dias para seu próximo recebimento. "

    return message + "Clique no microfone para falar comigo."


def planner_greeting(
    active_goals: int,
    goals_without_progress: int,
    monthly_payments: float,
    days_until_salary: int | None,
) -> str:
    message = ""
    if active_goals > 0:
        noun = "meta cadastrada" if active_goals == 1 else "metas cadastradas"
        message += f"Você tem {active_goals} {noun}. "
        if goals_without_progress > 0:
            subject = (
                "Uma meta está"
                if goals_without_progress == 1
                else f"{goals_without_progress} metas estão"
            )
            message += f"{subject} sem progresso. Atualize suas metas clicando em editar. "
    else:
        message += "Você ainda não tem metas cadastradas. Que tal criar uma agora? "

    if monthly_payments > 0:
        message += f"Você tem {currency_to_speech(monthly_payments)} a pagar este mês. "
    if days_until_salary is not None and days_until_salary > 0:
        message += f"Faltam {days_until_salary} dias para seu próximo recebimento. "

    return message + "Clique no microfone para falar com a IA."


def card_greeting(credit_limit: float, credit_used: float) -> str:
    """Credit card greeting with usage advice.

    Below 30% usage the user is praised; from 80% on they are warned.
    """
    available = credit_limit - credit_used
    usage = credit_used / credit_limit * 100 if credit_limit > 0 else 0.0

    message = f"Seu limite de crédito é de {currency_to_speech(credit_limit)}. "
    if credit_used > 0:
        message += f"Você já gastou {currency_to_speech(credit_used)} do seu limite. "
        message += f"Resta {currency_to_speech(available)} disponível. "
    else:
        message += "Você não utilizou seu limite ainda. "

    if usage < 30 and credit_limit > 0:
        message += "Você está usando seu crédito de forma responsável. Continue assim!"
    elif usage >= 80:
        message += (
            "Atenção! Seu limite está quase no máximo. "
            "Organize seus pagamentos no painel."
        )

    return message.strip()


def goals_greeting(active_goals: int) -> str:
    if active_goals > 0:
        noun = "meta ativa" if active_goals == 1 else "metas ativas"
        message = f"Você tem {active_goals} {noun} no seu perfil. "
    else:
        message = "Você ainda não cadastrou metas. "
    return message + "Acesse a aba planejamento para atualizar suas metas."


def compose_greeting(
    page_type: PageType, snapshot: FinancialSnapshot, now: datetime
) -> str | None:
    """Compose the page-specific greeting.

    Returns:
        Greeting text, or None for pages that do not greet
    """
    if page_type is PageType.DASHBOARD:
        return home_greeting(
            snapshot.user_name,
            snapshot.debit_balance,
            snapshot.today_spent,
            snapshot.due_today,
            snapshot.days_until_salary,
            now,
        )
    if page_type is PageType.PLANNER:
        return planner_greeting(
            snapshot.active_goals,
            snapshot.goals_without_progress,
            snapshot.monthly_payments,
            snapshot.days_until_salary,
        )
    if page_type is PageType.CARD:
        return card_greeting(snapshot.credit_limit, snapshot.credit_used)
    if page_type is PageType.GOALS:
        return goals_greeting(snapshot.active_goals)
    return None
