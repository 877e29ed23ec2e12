"""
Closing Cost Estimator

Rule-of-thumb closing costs for a residential purchase, used for the
"cash needed at closing" figure. Percentages apply to the offer price.
"""

from decimal import Decimal

from ..lenient import lenient


class ClosingCostEstimator:
    """Estimates buyer closing costs from offer price and financing."""

    CLOSING_COST_RATE = Decimal("0.025")
    TITLE_INSURANCE_RATE = Decimal("0.005")
    APPRAISAL_FEE = Decimal("500")
    INSPECTION_FEE = Decimal("500")
    ATTORNEY_FEE_CASH = Decimal("800")
    ATTORNEY_FEE_FINANCED = Decimal("1200")
    RECORDING_FEE = Decimal("150")
    SURVEY_FEE = Decimal("400")

    def estimate(self, offer_price, is_cash: bool) -> Decimal:
        price = lenient(offer_price)
        attorney = self.ATTORNEY_FEE_CASH if is_cash else self.ATTORNEY_FEE_FINANCED
        return (
            price * self.CLOSING_COST_RATE
            + price * self.TITLE_INSURANCE_RATE
            + self.APPRAISAL_FEE
            + self.INSPECTION_FEE
            + attorney
            + self.RECORDING_FEE
            + self.SURVEY_FEE
        )
