"""Pure valuation formulas for every instrument class.

No storage access and no instrument identity: inputs are Decimals and dates,
outputs are Decimals quantized for display. Currency is kept to 2 decimal
places, unit counts and prices to 4, rates and percentages to 4.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from services.exceptions import ValidationError
from utils.schedule import CUSTOM

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
DAYS_PER_YEAR = Decimal("365")

MONEY = Decimal("0.01")
UNITS = Decimal("0.0001")
RATE = Decimal("0.0001")

# Installments per year for recurring deposit frequencies (custom is computed).
INSTALLMENTS_PER_YEAR = {
    "monthly": Decimal("12"),
    "yearly": Decimal("1"),
}


def to_decimal(value) -> Decimal:
    """Coerce ints, strings and Decimals to Decimal; floats go through ``str``."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def money(value) -> Decimal:
    """Round to currency precision."""
    return to_decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def units(value) -> Decimal:
    """Round to unit/price precision."""
    return to_decimal(value).quantize(UNITS, rounding=ROUND_HALF_UP)


def rate(value) -> Decimal:
    """Round to rate/percentage precision."""
    return to_decimal(value).quantize(RATE, rounding=ROUND_HALF_UP)


def years_between(start: date, end: date) -> Decimal:
    """Elapsed time in 365-day years (negative when ``end`` precedes ``start``)."""
    return Decimal((end - start).days) / DAYS_PER_YEAR


# --- Fixed-term deposits ---


def simple_interest_payout(principal, rate_percent, start: date, maturity: date) -> Decimal:
    """Expected payout at maturity: ``P × (1 + r/100 × years)``."""
    principal = to_decimal(principal)
    years = years_between(start, maturity)
    return money(principal * (ONE + to_decimal(rate_percent) / HUNDRED * years))


def realized_rate(principal, payout, start: date, end: date) -> Decimal:
    """Annual simple rate implied by an actual payout: ``((A/P) − 1) / years × 100``.

    Returns 0 when no time has elapsed or the principal is not positive.
    """
    principal = to_decimal(principal)
    years = years_between(start, end)
    if years <= ZERO or principal <= ZERO:
        return rate(ZERO)
    return rate(((to_decimal(payout) / principal) - ONE) / years * HUNDRED)


# --- Recurring deposits ---


def installments_per_year(frequency: str, custom_days: int | None = None) -> Decimal:
    """Installments per year: 12 monthly, 1 yearly, 365/days for custom."""
    if frequency == CUSTOM:
        if not custom_days or custom_days <= 0:
            raise ValidationError(
                "custom_frequency_days must be positive for a custom frequency",
                field="custom_frequency_days",
            )
        return DAYS_PER_YEAR / Decimal(custom_days)
    try:
        return INSTALLMENTS_PER_YEAR[frequency]
    except KeyError:
        raise ValidationError(f"Unknown installment frequency: {frequency!r}", field="frequency")


def recurring_deposit_maturity(
    installment,
    rate_percent,
    frequency: str,
    total_installments: int,
    custom_days: int | None = None,
) -> Decimal:
    """Maturity value of a recurring deposit (annuity-due compounding).

    ``M = R × ((1+i)^n − 1) / i × (1+i)`` with ``i`` the periodic rate.
    A zero periodic rate degenerates to ``R × n``.
    """
    installment = to_decimal(installment)
    periodic = to_decimal(rate_percent) / HUNDRED / installments_per_year(frequency, custom_days)
    n = int(total_installments)

    if periodic == ZERO:
        return money(installment * n)

    growth = (ONE + periodic) ** n
    return money(installment * ((growth - ONE) / periodic) * (ONE + periodic))


# --- Systematic investments ---


def units_for_amount(amount, unit_price) -> Decimal:
    """Units bought for ``amount`` at ``unit_price``."""
    unit_price = to_decimal(unit_price)
    if unit_price <= ZERO:
        raise ValidationError("Unit price must be positive", field="nav")
    return units(to_decimal(amount) / unit_price)


def returns_percent(current_value, invested) -> Decimal:
    """Gain over invested amount as a percentage; 0 when nothing is invested."""
    invested = to_decimal(invested)
    if invested <= ZERO:
        return rate(ZERO)
    return rate((to_decimal(current_value) - invested) / invested * HUNDRED)


def sip_valuation(total_units, current_nav, total_invested) -> tuple[Decimal, Decimal]:
    """Return ``(current_value, returns_percent)`` for a SIP."""
    current_value = money(to_decimal(total_units) * to_decimal(current_nav))
    return current_value, returns_percent(current_value, total_invested)


# --- Traded holdings ---


def holding_valuation(quantity, buy_price, current_price) -> tuple[Decimal, Decimal, Decimal, Decimal]:
    """Return ``(invested_value, current_value, profit_loss, profit_loss_percent)``."""
    quantity = to_decimal(quantity)
    invested_value = money(quantity * to_decimal(buy_price))
    current_value = money(quantity * to_decimal(current_price))
    profit_loss = current_value - invested_value
    return invested_value, current_value, profit_loss, returns_percent(current_value, invested_value)


# --- Savings goals ---


def goal_progress(saved, target) -> tuple[Decimal, Decimal]:
    """Return ``(progress_percent, remaining_amount)``; remaining never goes negative."""
    saved = to_decimal(saved)
    target = to_decimal(target)
    remaining = money(max(target - saved, ZERO))
    if target <= ZERO:
        return rate(ZERO), remaining
    return rate(saved / target * HUNDRED), remaining
