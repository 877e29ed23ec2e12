"""
Document Builder

Assembles the offer summary handed to a rendering surface (print, PDF) and
renders it as plain text. Output only: nothing here changes a draft.
"""

import re

from .calculators.money import format_money, to_money
from .models import DerivedFigures, DocumentSnapshot, OfferDraft
from .state_rules import StateRequirements


def _fmt_pct(value) -> str:
    return f"{float(value):.2f}%"


class DocumentBuilder:
    """Builds a DocumentSnapshot from a draft and its derived figures."""

    def build(
        self,
        draft: OfferDraft,
        figures: DerivedFigures,
        flags: list[str],
        generated_at: str,
        state_rules: StateRequirements | None = None,
    ) -> DocumentSnapshot:
        return DocumentSnapshot(
            file_name=self.file_name(draft, generated_at),
            generated_at=generated_at,
            property=self._build_property(draft),
            pricing=self._build_pricing(draft, figures),
            financing=self._build_financing(draft, figures),
            terms=self._build_terms(draft, figures),
            contingencies=self._build_contingencies(draft),
            compliance_flags=list(flags),
            attachments=[
                {"name": a.name, "size": a.size, "type": a.type, "status": a.status, "url": a.data_url}
                for a in draft.attachments
            ],
            state_requirements=state_rules.to_dict() if state_rules else None,
        )

    @staticmethod
    def file_name(draft: OfferDraft, generated_at: str) -> str:
        address = re.sub(r"\s+", "_", draft.address.strip()) or "Offer"
        return f"Purchase_Agreement_{address}_{generated_at[:10]}.txt"

    def _build_property(self, draft: OfferDraft) -> dict:
        return {
            "address": draft.address,
            "city": draft.city,
            "state": draft.state,
            "zip": draft.zip,
            "full_address": self._full_address(draft),
        }

    def _build_pricing(self, draft: OfferDraft, figures: DerivedFigures) -> dict:
        """Pricing section with value and description for each figure."""
        price = draft.offer_price
        return {
            "list_price": {"value": to_money(draft.list_price), "description": f"Listed at {format_money(draft.list_price)}"},
            "offer_price": {"value": to_money(price), "description": f"Offer of {format_money(price)}"},
            "earnest_money": {
                "value": to_money(figures.earnest_dollar),
                "description": (
                    f"{draft.earnest}% × {format_money(price)} = {format_money(figures.earnest_dollar)}"
                    if draft.earnest_mode == "percent"
                    else f"Fixed deposit of {format_money(figures.earnest_dollar)}"
                ),
            },
            "closing_costs": {
                "value": to_money(figures.closing_costs),
                "description": "Estimated closing costs (lender, title, appraisal, inspection, attorney, recording, survey)",
            },
            "cash_needed": {
                "value": to_money(figures.cash_needed),
                "description": (
                    f"down payment ({format_money(figures.down_payment_dollar)}) + earnest "
                    f"({format_money(figures.earnest_dollar)}) + closing costs "
                    f"({format_money(figures.closing_costs)}) = {format_money(figures.cash_needed)}"
                ),
            },
        }

    def _build_financing(self, draft: OfferDraft, figures: DerivedFigures) -> dict:
        financing = {
            "type": draft.financing_type.value,
            "pre_approval_attached": draft.pre_approval_attached,
            "down_payment": to_money(figures.down_payment_dollar),
            "down_payment_percent": to_money(figures.down_payment_percent),
            "monthly_escrow": to_money(figures.monthly_escrow),
            "total_estimated_monthly": to_money(figures.total_estimated_monthly),
        }
        if not draft.is_cash:
            financing.update({
                "interest_rate": float(draft.interest_rate),
                "term_years": float(draft.term_years),
                "loan_amount": to_money(figures.loan_amount),
                "ltv_percent": to_money(figures.ltv_percent),
                "principal_and_interest": to_money(figures.principal_and_interest),
                "pmi_monthly": to_money(figures.pmi_monthly),
                "total_monthly_with_pmi": to_money(figures.total_monthly_with_pmi),
            })
        return financing

    def _build_terms(self, draft: OfferDraft, figures: DerivedFigures) -> dict:
        terms = {
            "closing_date": draft.closing_date or None,
            "seller_concessions": draft.seller_concessions or None,
            "escalation": None,
        }
        if draft.has_escalation:
            terms["escalation"] = {
                "cap": to_money(draft.escalation_cap),
                "increment": to_money(draft.escalation_increment),
            }
        return terms

    def _build_contingencies(self, draft: OfferDraft) -> list[dict]:
        return [
            {"name": "Inspection", "included": draft.inspection, "days": draft.inspection_days},
            {"name": "Appraisal", "included": draft.appraisal, "days": None},
            {"name": "Financing", "included": draft.financing_cont, "days": draft.financing_days},
            {"name": "Home sale", "included": draft.home_sale, "days": draft.home_sale_days},
        ]

    @staticmethod
    def _full_address(draft: OfferDraft) -> str:
        street = draft.address or "[Property Address]"
        city = draft.city or "[City]"
        state = draft.state or "[State]"
        zip_code = draft.zip or "[ZIP Code]"
        return f"{street}, {city}, {state} {zip_code}"

    def render_text(self, snapshot: DocumentSnapshot) -> str:
        """Printable plain-text rendering of a snapshot."""
        lines = [
            "RESIDENTIAL PURCHASE OFFER",
            f"Generated {snapshot.generated_at}",
            "",
            "PROPERTY",
            f"  {snapshot.property['full_address']}",
            "",
            "PRICING",
        ]
        for entry in snapshot.pricing.values():
            lines.append(f"  {entry['description']}")

        fin = snapshot.financing
        lines += ["", "FINANCING", f"  Type: {fin['type']}"]
        if "loan_amount" in fin:
            lines.append(
                f"  Loan of {format_money(fin['loan_amount'])} at {fin['interest_rate']}% "
                f"for {fin['term_years']:g} years ({_fmt_pct(fin['ltv_percent'])} LTV)"
            )
            lines.append(f"  Principal & interest: ${fin['principal_and_interest']:,.2f}/mo")
        lines.append(
            f"  Down payment: {format_money(fin['down_payment'])} ({_fmt_pct(fin['down_payment_percent'])})"
        )
        lines.append(f"  Estimated monthly payment: ${fin['total_estimated_monthly']:,.2f}")

        terms = snapshot.terms
        lines += ["", "TERMS", f"  Closing date: {terms['closing_date'] or 'not set'}"]
        if terms["escalation"]:
            esc = terms["escalation"]
            lines.append(
                f"  Escalation: by {format_money(esc['increment'])} up to {format_money(esc['cap'])}"
            )
        if terms["seller_concessions"]:
            lines.append(f"  Seller concessions: {terms['seller_concessions']}")

        lines += ["", "CONTINGENCIES"]
        for c in snapshot.contingencies:
            if not c["included"]:
                lines.append(f"  {c['name']}: waived")
            elif c["days"] is None:
                lines.append(f"  {c['name']}: included")
            else:
                lines.append(f"  {c['name']}: {c['days']} days")

        if snapshot.state_requirements:
            rules = snapshot.state_requirements
            lines += ["", f"{rules['name'].upper()} REQUIREMENTS"]
            lines += [f"  Disclosure: {d}" for d in rules["required_disclosures"]]
            lines += [f"  Form: {f}" for f in rules["mandatory_forms"]]

        lines += ["", "ATTACHMENTS"]
        if snapshot.attachments:
            lines += [f"  {a['name']} ({a['size']:,} bytes) - {a['status']}" for a in snapshot.attachments]
        else:
            lines.append("  none")

        lines += ["", "RED FLAGS"]
        if snapshot.compliance_flags:
            lines += [f"  - {flag}" for flag in snapshot.compliance_flags]
        else:
            lines.append("  none")

        return "\n".join(lines) + "\n"
