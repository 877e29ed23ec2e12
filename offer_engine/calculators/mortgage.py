"""
Mortgage Calculators

Fixed-rate amortization and the monthly carrying costs of a home.
"""

from decimal import Decimal, Overflow

from ..lenient import ZERO, lenient

TWELVE = Decimal("12")
PMI_ANNUAL_RATE = Decimal("0.005")
PMI_DOWN_PAYMENT_THRESHOLD = Decimal("20")


def amortized_payment(principal, annual_rate_percent, term_years) -> Decimal:
    """
    Monthly principal and interest for a fixed-rate loan.

    payment = P * r(1+r)^n / ((1+r)^n - 1), with r the monthly rate and n
    the number of monthly payments. A 0% loan repays P / n each month.
    Zero or missing principal or term gives 0.
    """
    principal = lenient(principal)
    rate = lenient(annual_rate_percent)
    term = lenient(term_years)
    if principal <= 0 or term <= 0 or rate < 0:
        return ZERO

    n = term * TWELVE
    r = rate / Decimal("100") / TWELVE
    if r == 0:
        return principal / n

    try:
        growth = (1 + r) ** n
        if growth == 1:
            return principal / n
        payment = principal * (r * growth) / (growth - 1)
    except Overflow:
        # r(1+r)^n / ((1+r)^n - 1) tends to r as n grows
        return principal * r
    return payment if payment.is_finite() else principal * r


def monthly_escrow(annual_taxes, annual_insurance, monthly_hoa) -> Decimal:
    """Taxes and insurance spread over twelve months, plus HOA dues."""
    return lenient(annual_taxes) / TWELVE + lenient(annual_insurance) / TWELVE + lenient(monthly_hoa)


def total_estimated_monthly(is_cash: bool, payment, escrow) -> Decimal:
    """Cash purchases carry no loan payment, only escrow and dues."""
    if is_cash:
        return lenient(escrow)
    return lenient(payment) + lenient(escrow)


def monthly_pmi(needs_pmi: bool, loan_amount) -> Decimal:
    """Private mortgage insurance at roughly 0.5% of the loan per year."""
    if not needs_pmi:
        return ZERO
    return lenient(loan_amount) * PMI_ANNUAL_RATE / TWELVE
