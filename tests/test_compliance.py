"""
Unit Tests for the Compliance Rule Evaluator

Flags come back in a fixed order; tests compare whole lists.
"""

from dataclasses import replace

import pytest

from offer_engine.compliance import (
    ATTACH_PRE_APPROVAL,
    CLOSING_DATE_NOT_SET,
    DOWN_PAYMENT_INVALID,
    ESCALATION_CAP_MISSING,
    ESCALATION_INCREMENT_MISSING,
    MISSING_ADDRESS,
    OFFER_PRICE_REQUIRED,
    RATE_AND_TERM_REQUIRED,
    ComplianceEvaluator,
)
from offer_engine.models import Attachment, FinancingType, InlineSource, OfferDraft


@pytest.fixture
def evaluator():
    return ComplianceEvaluator()


@pytest.fixture
def complete_draft():
    """A financed offer with nothing missing."""
    return OfferDraft(
        address="12 Elm St",
        city="Springfield",
        state="IL",
        zip="62701",
        offer_price=450000,
        pre_approval_attached=True,
        interest_rate=6.5,
        term_years=30,
        closing_date="2026-12-01",
    )


class TestEmptyDraft:

    def test_empty_conventional_draft(self, evaluator):
        """Every input empty, financing left at Conventional."""
        assert evaluator.evaluate(OfferDraft.blank()) == [
            MISSING_ADDRESS,
            OFFER_PRICE_REQUIRED,
            ATTACH_PRE_APPROVAL,
            RATE_AND_TERM_REQUIRED,
            CLOSING_DATE_NOT_SET,
        ]

    def test_empty_cash_draft(self, evaluator):
        """Pre-approval, rate and term only apply to financed offers."""
        draft = OfferDraft.blank(financing_type=FinancingType.CASH)
        assert evaluator.evaluate(draft) == [
            MISSING_ADDRESS,
            OFFER_PRICE_REQUIRED,
            CLOSING_DATE_NOT_SET,
        ]


class TestIndividualChecks:

    def test_complete_draft_has_no_flags(self, evaluator, complete_draft):
        assert evaluator.evaluate(complete_draft) == []

    @pytest.mark.parametrize("field", ["address", "city", "state", "zip"])
    def test_any_address_part_missing(self, evaluator, complete_draft, field):
        draft = complete_draft.merged({field if field != "state" else "stateUS": ""})
        assert evaluator.evaluate(draft) == [MISSING_ADDRESS]

    def test_negative_offer_price(self, evaluator, complete_draft):
        draft = complete_draft.merged({"offerPrice": -5})
        assert OFFER_PRICE_REQUIRED in evaluator.evaluate(draft)

    def test_attachment_counts_as_pre_approval(self, evaluator, complete_draft):
        attachment = Attachment(id="a1", name="letter.pdf", size=10, type="application/pdf",
                                source=InlineSource("data:application/pdf;base64,AA=="))
        draft = complete_draft.merged({"preApprovalAttached": False})
        assert evaluator.evaluate(draft) == [ATTACH_PRE_APPROVAL]

        draft = replace(draft, attachments=(attachment,))
        assert evaluator.evaluate(draft) == []

    def test_missing_term_only(self, evaluator, complete_draft):
        draft = complete_draft.merged({"termYears": 0})
        assert evaluator.evaluate(draft) == [RATE_AND_TERM_REQUIRED]

    def test_cash_ignores_rate_and_pre_approval(self, evaluator, complete_draft):
        draft = complete_draft.merged({
            "financingType": "Cash", "interestRate": 0, "termYears": 0, "preApprovalAttached": False,
        })
        assert evaluator.evaluate(draft) == []

    def test_escalation_flags_fire_independently(self, evaluator, complete_draft):
        draft = complete_draft.merged({"hasEscalation": True, "escalationCap": 0, "escalationIncrement": 0})
        assert evaluator.evaluate(draft) == [ESCALATION_CAP_MISSING, ESCALATION_INCREMENT_MISSING]

        draft = draft.merged({"escalationCap": 480000})
        assert evaluator.evaluate(draft) == [ESCALATION_INCREMENT_MISSING]

    def test_escalation_off_ignores_cap(self, evaluator, complete_draft):
        draft = complete_draft.merged({"hasEscalation": False, "escalationCap": 0})
        assert evaluator.evaluate(draft) == []

    def test_negative_base_makes_down_payment_invalid(self, evaluator, complete_draft):
        """20% of a negative price is a negative down payment."""
        draft = complete_draft.merged({"offerPrice": -100000, "dpMode": "percent", "downPayment": 20})
        assert evaluator.evaluate(draft) == [OFFER_PRICE_REQUIRED, DOWN_PAYMENT_INVALID]

    def test_order_is_stable(self, evaluator):
        draft = OfferDraft.blank(has_escalation=True)
        assert evaluator.evaluate(draft) == [
            MISSING_ADDRESS,
            OFFER_PRICE_REQUIRED,
            ATTACH_PRE_APPROVAL,
            RATE_AND_TERM_REQUIRED,
            CLOSING_DATE_NOT_SET,
            ESCALATION_CAP_MISSING,
            ESCALATION_INCREMENT_MISSING,
        ]


class TestStateRules:
    """Known states add earnest money and contingency window checks."""

    @pytest.fixture
    def ca_draft(self, complete_draft):
        return complete_draft.merged({
            "stateUS": "CA", "earnestMode": "percent", "earnest": 3,
            "inspectionDays": 10, "financingDays": 21,
        })

    def test_within_state_rules(self, evaluator, ca_draft):
        assert evaluator.evaluate(ca_draft) == []

    def test_earnest_above_state_maximum(self, evaluator, ca_draft):
        draft = ca_draft.merged({"earnest": 5})
        assert evaluator.evaluate(draft) == ["California maximum earnest money is 3%"]

    def test_earnest_below_minimum_in_dollars(self, evaluator, ca_draft):
        """$2,250 of $450,000 is 0.5%"""
        draft = ca_draft.merged({"earnestMode": "dollar", "earnest": 2250})
        assert evaluator.evaluate(draft) == ["California requires minimum 1% earnest money"]

    def test_contingency_windows(self, evaluator, ca_draft):
        draft = ca_draft.merged({"inspectionDays": 30, "financingDays": 5})
        assert evaluator.evaluate(draft) == [
            "California inspection period must be 7-21 days",
            "California financing contingency must be 17-30 days",
        ]

    def test_waived_contingency_is_not_checked(self, evaluator, ca_draft):
        draft = ca_draft.merged({"inspection": False, "inspectionDays": 99})
        assert evaluator.evaluate(draft) == []

    def test_state_flags_follow_core_flags(self, evaluator, ca_draft):
        draft = ca_draft.merged({"closingDate": "", "earnest": 5})
        assert evaluator.evaluate(draft) == [
            CLOSING_DATE_NOT_SET,
            "California maximum earnest money is 3%",
        ]
