"""
Calculators Package

Pure numeric derivations over an offer draft's raw fields.
"""

from .affordability import AffordabilityCalculator
from .closing import ClosingCostEstimator
from .money import clamp, format_money, quantize_money, to_dollar, to_money, to_percent
from .mortgage import amortized_payment, monthly_escrow, monthly_pmi, total_estimated_monthly

__all__ = [
    "AffordabilityCalculator",
    "ClosingCostEstimator",
    "amortized_payment",
    "clamp",
    "format_money",
    "monthly_escrow",
    "monthly_pmi",
    "quantize_money",
    "to_dollar",
    "to_money",
    "to_percent",
    "total_estimated_monthly",
]
