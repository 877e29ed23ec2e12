"""
Tests for draft models: invariants, serialization and typed merge.
"""

from decimal import Decimal

import pytest

from offer_engine.models import (
    AmountMode,
    Attachment,
    FailedSource,
    FinancingType,
    InlineSource,
    OfferDraft,
    RemoteSource,
)


class TestDraftInvariants:

    def test_defaults_match_offer_builder(self):
        draft = OfferDraft()
        assert draft.list_price == Decimal("450000")
        assert draft.financing_type == FinancingType.CONVENTIONAL
        assert draft.interest_rate == Decimal("6.75")
        assert draft.dp_mode == AmountMode.PERCENT
        assert draft.down_payment == Decimal("20")
        assert (draft.inspection_days, draft.financing_days, draft.home_sale_days) == (7, 21, 30)

    def test_step_is_clamped(self):
        assert OfferDraft(step=9).step == 4
        assert OfferDraft(step=-2).step == 0

    def test_negative_amounts_become_zero(self):
        draft = OfferDraft(down_payment=-5, earnest=-1)
        assert draft.down_payment == Decimal("0")
        assert draft.earnest == Decimal("0")

    def test_numeric_fields_are_lenient(self):
        draft = OfferDraft(list_price="abc", interest_rate=float("nan"), inspection_days=None)
        assert draft.list_price == Decimal("0")
        assert draft.interest_rate == Decimal("0")
        assert draft.inspection_days == 0

    def test_enum_fields_accept_strings(self):
        draft = OfferDraft(financing_type="FHA", dp_mode="dollar")
        assert draft.financing_type is FinancingType.FHA
        assert draft.dp_mode is AmountMode.DOLLAR


class TestSerialization:

    def test_uses_offer_builder_keys(self):
        data = OfferDraft(state="TX", hoa_monthly=125).to_dict()
        assert data["stateUS"] == "TX"
        assert data["hoaMonthly"] == 125
        assert data["financingType"] == "Conventional"
        assert data["interestRate"] == 6.75
        assert "id" not in data

    def test_precise_rate_is_written_as_string(self):
        data = OfferDraft(interest_rate="6.1234567890123456789").to_dict()
        assert data["interestRate"] == "6.1234567890123456789"

    def test_round_trip(self):
        draft = OfferDraft(
            id="abc",
            name="Elm St",
            saved_at="2026-10-19T10:00:00.000000+00:00",
            step=3,
            address="12 Elm St",
            offer_price=Decimal("437500.50"),
            has_escalation=True,
            attachments=(
                Attachment("a1", "letter.pdf", 9, "application/pdf", InlineSource("data:application/pdf;base64,AA==")),
                Attachment("a2", "scan.pdf", 2_000_000, "application/pdf", RemoteSource("https://x/y?sig", "u/d/1-scan.pdf")),
                Attachment("a3", "big.mov", 9_000_000, "video/quicktime", FailedSource()),
            ),
        )
        assert OfferDraft.from_dict(draft.to_dict()) == draft


class TestAttachmentParsing:

    def test_failed_attachment_has_no_data_url(self):
        data = Attachment("a3", "big.mov", 9, "video/quicktime", FailedSource()).to_dict()
        assert "dataUrl" not in data
        assert data["storage"]["kind"] == "failed"

    def test_legacy_entry_inline(self):
        """Entries without a storage tag are classified by their URL."""
        attachment = Attachment.from_dict({"id": "a", "name": "x.png", "size": 3, "type": "image/png",
                                           "dataUrl": "data:image/png;base64,AAA"})
        assert isinstance(attachment.source, InlineSource)
        assert attachment.status == "inline"

    def test_legacy_entry_remote(self):
        attachment = Attachment.from_dict({"id": "a", "name": "x.pdf", "size": 3, "type": "application/pdf",
                                           "dataUrl": "https://storage.example/offers/x.pdf?token=1"})
        assert isinstance(attachment.source, RemoteSource)
        assert attachment.status == "uploaded"

    def test_legacy_entry_without_url_is_failed(self):
        attachment = Attachment.from_dict({"id": "a", "name": "x.pdf", "size": 3, "type": "application/pdf"})
        assert attachment.upload_failed
        assert attachment.data_url is None

    def test_entry_without_id_is_rejected(self):
        with pytest.raises(ValueError):
            Attachment.from_dict({"name": "x.pdf"})


class TestTypedMerge:
    """Only present, correctly typed fields are applied."""

    def test_applies_well_typed_fields(self):
        draft = OfferDraft().merged({"listPrice": 600000, "city": "Austin", "homeSale": True, "dpMode": "dollar"})
        assert draft.list_price == Decimal("600000")
        assert draft.city == "Austin"
        assert draft.home_sale is True
        assert draft.dp_mode is AmountMode.DOLLAR

    def test_skips_wrongly_typed_fields(self):
        original = OfferDraft()
        draft = original.merged({
            "listPrice": "lots",
            "city": 42,
            "homeSale": "yes",
            "inspection": 1,
            "financingType": "Bitcoin",
            "earnestMode": ["percent"],
            "step": True,
        })
        assert draft == original

    def test_numeric_strings_apply_to_amounts(self):
        """Amounts that do not fit a float are exported as strings."""
        draft = OfferDraft().merged({"interestRate": "6.1234567890123456789", "listPrice": "600000"})
        assert draft.interest_rate == Decimal("6.1234567890123456789")
        assert draft.list_price == Decimal("600000")

    def test_identity_only_when_asked(self):
        data = {"id": "other", "name": "Other", "savedAt": "2020-01-01T00:00:00+00:00", "city": "Reno"}
        draft = OfferDraft(id="mine").merged(data)
        assert draft.id == "mine"
        assert draft.city == "Reno"

        loaded = OfferDraft.from_dict(data)
        assert loaded.id == "other"
        assert loaded.name == "Other"

    def test_bad_attachment_entries_are_dropped(self):
        draft = OfferDraft().merged({"attachments": [{"id": "ok", "name": "a.pdf"}, "junk", {"name": "no id"}]})
        assert [a.id for a in draft.attachments] == ["ok"]
