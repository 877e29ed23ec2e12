"""
State-Specific Purchase Requirements

Earnest money ranges, contingency windows, disclosures and forms for the
states the offer builder knows about. Unknown states have no extra rules.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DayRange:
    min_days: int
    max_days: int
    default: int

    def contains(self, days: int) -> bool:
        return self.min_days <= days <= self.max_days


@dataclass(frozen=True)
class EarnestMoneyRule:
    min_percent: int
    max_percent: int
    default_percent: int
    holding_requirement: str


@dataclass(frozen=True)
class StateRequirements:
    code: str
    name: str
    required_disclosures: tuple[str, ...]
    mandatory_forms: tuple[str, ...]
    inspection: DayRange
    financing: DayRange
    appraisal: DayRange
    earnest_money: EarnestMoneyRule

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "required_disclosures": list(self.required_disclosures),
            "mandatory_forms": list(self.mandatory_forms),
            "earnest_money": {
                "min_percent": self.earnest_money.min_percent,
                "max_percent": self.earnest_money.max_percent,
                "holding_requirement": self.earnest_money.holding_requirement,
            },
        }


STATE_REQUIREMENTS = {
    "CA": StateRequirements(
        code="CA",
        name="California",
        required_disclosures=(
            "Natural Hazard Disclosure Statement",
            "Lead-Based Paint Disclosure (pre-1978 homes)",
            "Transfer Disclosure Statement",
            "Seller Property Questionnaire",
            "Water Heater and Smoke Detector Statement of Compliance",
        ),
        mandatory_forms=(
            "California Residential Purchase Agreement (RPA-CA)",
            "Buyer Inspection Advisory (BIA)",
            "Agent Visual Inspection Disclosure (AVID)",
        ),
        inspection=DayRange(7, 21, 10),
        financing=DayRange(17, 30, 21),
        appraisal=DayRange(17, 30, 21),
        earnest_money=EarnestMoneyRule(1, 3, 3, "Licensed escrow company or real estate broker"),
    ),
    "TX": StateRequirements(
        code="TX",
        name="Texas",
        required_disclosures=(
            "Seller's Disclosure Notice",
            "Lead-Based Paint Disclosure (pre-1978 homes)",
            "Property Condition Disclosure",
        ),
        mandatory_forms=(
            "One to Four Family Residential Contract (Resale)",
            "Addendum for Property Subject to Mandatory Membership",
            "Seller Financing Addendum (if applicable)",
        ),
        inspection=DayRange(7, 14, 10),
        financing=DayRange(20, 30, 25),
        appraisal=DayRange(15, 25, 20),
        earnest_money=EarnestMoneyRule(1, 5, 2, "Title company or licensed escrow agent"),
    ),
    "FL": StateRequirements(
        code="FL",
        name="Florida",
        required_disclosures=(
            "Property Disclosure Summary",
            "Lead-Based Paint Disclosure (pre-1978 homes)",
            "Radon Gas Disclosure",
        ),
        mandatory_forms=(
            "Florida Residential Contract for Sale and Purchase",
            "Property Tax Disclosure Summary",
            "Homeowners' Association Disclosure Summary",
        ),
        inspection=DayRange(10, 15, 15),
        financing=DayRange(30, 45, 30),
        appraisal=DayRange(15, 30, 21),
        earnest_money=EarnestMoneyRule(1, 10, 3, "Licensed real estate broker or attorney"),
    ),
}


def requirements_for(state: str) -> StateRequirements | None:
    return STATE_REQUIREMENTS.get((state or "").strip().upper())
