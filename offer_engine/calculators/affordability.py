"""
Affordability Calculator

Rolls a draft's raw fields up into the sidebar figures: down payment in
both forms, loan amount, monthly payment, cash needed at closing.
"""

from decimal import Decimal

from ..lenient import ZERO
from ..models import DerivedFigures, FinancingType, OfferDraft
from .closing import ClosingCostEstimator
from .money import HUNDRED, to_dollar, to_percent
from .mortgage import (
    PMI_DOWN_PAYMENT_THRESHOLD,
    TWELVE,
    amortized_payment,
    monthly_escrow,
    monthly_pmi,
    total_estimated_monthly,
)


class AffordabilityCalculator:
    """Computes DerivedFigures for a draft. Stateless; safe to share."""

    def __init__(self, closing_estimator: ClosingCostEstimator | None = None):
        self.closing_estimator = closing_estimator or ClosingCostEstimator()

    def calculate(self, draft: OfferDraft) -> DerivedFigures:
        base = self.price_base(draft)

        dp_dollar = to_dollar(draft.dp_mode, draft.down_payment, base)
        dp_percent = to_percent(draft.dp_mode, draft.down_payment, base)
        earnest_dollar = to_dollar(draft.earnest_mode, draft.earnest, base)

        loan_amount = max(ZERO, draft.offer_price - dp_dollar)

        # Cash purchases have no loan payment at all
        if draft.is_cash:
            payment = ZERO
        else:
            payment = amortized_payment(loan_amount, draft.interest_rate, draft.term_years)

        escrow = monthly_escrow(draft.taxes_annual, draft.insurance_annual, draft.hoa_monthly)
        total_monthly = total_estimated_monthly(draft.is_cash, payment, escrow)

        ltv = loan_amount / draft.offer_price * HUNDRED if draft.offer_price > 0 else ZERO
        closing_costs = self.closing_estimator.estimate(draft.offer_price, draft.is_cash)

        needs_pmi = (
            draft.financing_type == FinancingType.CONVENTIONAL
            and dp_percent < PMI_DOWN_PAYMENT_THRESHOLD
        )
        pmi = monthly_pmi(needs_pmi, loan_amount)

        return DerivedFigures(
            down_payment_dollar=dp_dollar,
            down_payment_percent=dp_percent,
            loan_amount=loan_amount,
            principal_and_interest=payment,
            monthly_taxes=draft.taxes_annual / TWELVE,
            monthly_insurance=draft.insurance_annual / TWELVE,
            monthly_escrow=escrow,
            total_estimated_monthly=total_monthly,
            earnest_dollar=earnest_dollar,
            ltv_percent=ltv,
            closing_costs=closing_costs,
            cash_needed=dp_dollar + earnest_dollar + closing_costs,
            needs_pmi=needs_pmi,
            pmi_monthly=pmi,
            total_monthly_with_pmi=total_monthly + pmi,
        )

    @staticmethod
    def price_base(draft: OfferDraft) -> Decimal:
        """Percent amounts are taken of the offer price, else the list price."""
        return draft.offer_price or draft.list_price or ZERO
