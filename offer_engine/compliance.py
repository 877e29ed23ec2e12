"""
Compliance Rule Evaluator

Maps a draft to the ordered list of deficiencies shown as red flags.
Every check runs; the order of messages is stable so callers and tests can
rely on it. Evaluation is cheap and is redone on every read, never cached.
"""

from .calculators import AffordabilityCalculator
from .calculators.money import to_percent
from .models import OfferDraft
from .state_rules import StateRequirements, requirements_for

MISSING_ADDRESS = "Missing property address"
OFFER_PRICE_REQUIRED = "Offer price required"
ATTACH_PRE_APPROVAL = "Attach pre-approval letter"
RATE_AND_TERM_REQUIRED = "Interest rate and term required"
CLOSING_DATE_NOT_SET = "Closing date not set"
ESCALATION_CAP_MISSING = "Escalation cap missing"
ESCALATION_INCREMENT_MISSING = "Escalation increment missing"
DOWN_PAYMENT_INVALID = "Down payment invalid"


class ComplianceEvaluator:
    """Evaluates an OfferDraft against the offer's completeness rules."""

    def __init__(self, calculator: AffordabilityCalculator | None = None):
        self.calculator = calculator or AffordabilityCalculator()

    def evaluate(self, draft: OfferDraft) -> list[str]:
        flags: list[str] = []

        if not draft.has_full_address:
            flags.append(MISSING_ADDRESS)

        if draft.offer_price <= 0:
            flags.append(OFFER_PRICE_REQUIRED)

        if not draft.is_cash:
            if not (draft.pre_approval_attached or draft.attachments):
                flags.append(ATTACH_PRE_APPROVAL)
            if not draft.interest_rate or not draft.term_years:
                flags.append(RATE_AND_TERM_REQUIRED)

        if not draft.closing_date:
            flags.append(CLOSING_DATE_NOT_SET)

        if draft.has_escalation:
            if not draft.escalation_cap:
                flags.append(ESCALATION_CAP_MISSING)
            if not draft.escalation_increment:
                flags.append(ESCALATION_INCREMENT_MISSING)

        figures = self.calculator.calculate(draft)
        if figures.down_payment_dollar < 0:
            flags.append(DOWN_PAYMENT_INVALID)

        rules = requirements_for(draft.state)
        if rules is not None:
            flags.extend(self._state_flags(draft, rules))

        return flags

    def _state_flags(self, draft: OfferDraft, rules: StateRequirements) -> list[str]:
        """Earnest money and contingency windows for states with known rules."""
        flags = []
        base = self.calculator.price_base(draft)
        earnest_pct = to_percent(draft.earnest_mode, draft.earnest, base)
        earnest_rule = rules.earnest_money

        if earnest_pct < earnest_rule.min_percent:
            flags.append(f"{rules.name} requires minimum {earnest_rule.min_percent}% earnest money")
        if earnest_pct > earnest_rule.max_percent:
            flags.append(f"{rules.name} maximum earnest money is {earnest_rule.max_percent}%")

        if draft.inspection and not rules.inspection.contains(draft.inspection_days):
            flags.append(
                f"{rules.name} inspection period must be "
                f"{rules.inspection.min_days}-{rules.inspection.max_days} days"
            )
        if draft.financing_cont and not rules.financing.contains(draft.financing_days):
            flags.append(
                f"{rules.name} financing contingency must be "
                f"{rules.financing.min_days}-{rules.financing.max_days} days"
            )
        return flags
