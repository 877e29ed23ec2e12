"""
Offer Session - Main Orchestrator

Holds the draft being edited and wires the engine together:

1. Apply a field edit (lenient coercion, state defaults)
2. Derived figures and compliance flags are recomputed on every read
3. Autosave the draft
4. Promote it to a named draft on Save / Save As
5. Assemble the printable document on demand
"""

import logging
from dataclasses import replace
from datetime import datetime

from .attachments import AttachmentStore
from .calculators import AffordabilityCalculator
from .calculators.money import clamp, to_money
from .compliance import ComplianceEvaluator
from .config import Settings
from .document import DocumentBuilder
from .models import (
    DAY_FIELDS,
    FLAG_FIELDS,
    LAST_STEP,
    MONEY_FIELDS,
    STEPS,
    TEXT_FIELDS,
    AmountMode,
    Attachment,
    DerivedFigures,
    DocumentSnapshot,
    DraftMeta,
    FileUpload,
    FinancingType,
    OfferDraft,
)
from .repository import DraftRepository, utc_now
from .state_rules import StateRequirements, requirements_for
from .storage import InMemoryStore, JsonFileStore, S3ObjectStorage

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    MONEY_FIELDS + DAY_FIELDS + TEXT_FIELDS + FLAG_FIELDS + ("financing_type", "dp_mode", "earnest_mode")
)


class OfferSession:
    """
    The live offer being built by the local user.

    There is one writer (this session) and everything happens synchronously
    within a call, except attachment ingestion which may run uploads in
    parallel but only appends fully ingested attachments.
    """

    def __init__(
        self,
        repository: DraftRepository,
        attachment_store: AttachmentStore | None = None,
        draft: OfferDraft | None = None,
        calculator: AffordabilityCalculator | None = None,
        evaluator: ComplianceEvaluator | None = None,
        document_builder: DocumentBuilder | None = None,
        clock=utc_now,
    ):
        self.repository = repository
        self.attachment_store = attachment_store or AttachmentStore()
        self.calculator = calculator or AffordabilityCalculator()
        self.evaluator = evaluator or ComplianceEvaluator(self.calculator)
        self.document_builder = document_builder or DocumentBuilder()
        self.clock = clock
        self.last_saved_at: str | None = None

        if draft is None:
            draft = repository.load_autosave()
            if draft is not None:
                self.last_saved_at = draft.saved_at
                logger.info("Restored draft from autosave slot")
        self._draft = draft or OfferDraft()
        self._enter_step(self._draft.step)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OfferSession":
        store = JsonFileStore(settings.store_path) if settings.store_path else InMemoryStore()
        object_storage = None
        if settings.object_storage == "s3":
            object_storage = S3ObjectStorage(region_name=settings.aws_region, endpoint_url=settings.s3_endpoint_url)
        attachments = AttachmentStore(
            object_storage=object_storage,
            bucket=settings.bucket,
            user_id=settings.user_id,
            small_file_limit=settings.small_file_limit,
            signed_url_ttl=settings.signed_url_ttl,
            upload_large_only=settings.upload_large_only,
        )
        return cls(DraftRepository(store), attachments)

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def draft(self) -> OfferDraft:
        return self._draft

    @property
    def step(self) -> int:
        return self._draft.step

    @property
    def derived(self) -> DerivedFigures:
        return self.calculator.calculate(self._draft)

    @property
    def flags(self) -> list[str]:
        return self.evaluator.evaluate(self._draft)

    @property
    def state_requirements(self) -> StateRequirements | None:
        return requirements_for(self._draft.state)

    def to_dict(self) -> dict:
        """Draft, derived figures and flags for the rendering surface."""
        figures = self.derived
        return {
            "draft": self._draft.to_dict(),
            "derived": {
                name: (value if isinstance(value, bool) else to_money(value))
                for name, value in vars(figures).items()
            },
            "flags": self.flags,
            "step": {"index": self.step, "name": STEPS[self.step], "total": len(STEPS)},
            "state_requirements": self.state_requirements.to_dict() if self.state_requirements else None,
            "last_saved_at": self.last_saved_at,
        }

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def update(self, **changes) -> OfferDraft:
        """
        Apply field edits and autosave.

        Numeric values are coerced leniently. Text fields must be strings and
        flags must be booleans. Unknown or read-only field names (id,
        saved_at, attachments, step) and wrongly typed values raise
        ValueError, leaving the draft unchanged.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        for name, value in changes.items():
            if name in TEXT_FIELDS and not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")
            if name in FLAG_FIELDS and not isinstance(value, bool):
                raise ValueError(f"{name} must be true or false, got {value!r}")

        if "financing_type" in changes:
            changes["financing_type"] = FinancingType(changes["financing_type"])
        for name in ("dp_mode", "earnest_mode"):
            if name in changes:
                changes[name] = AmountMode(changes[name])

        previous_state = self._draft.state
        draft = replace(self._draft, **changes)
        if "state" in changes and draft.state != previous_state:
            draft = self._apply_state_defaults(draft, explicit=changes)

        self._draft = draft
        self._autosave()
        return draft

    def _apply_state_defaults(self, draft: OfferDraft, explicit: dict) -> OfferDraft:
        """Snap contingency days and earnest money to a known state's defaults,
        except where the same edit set them explicitly."""
        rules = requirements_for(draft.state)
        if rules is None:
            return draft
        defaults = {
            "inspection_days": rules.inspection.default,
            "financing_days": rules.financing.default,
            "earnest_mode": AmountMode.PERCENT,
            "earnest": rules.earnest_money.default_percent,
        }
        defaults = {k: v for k, v in defaults.items() if k not in explicit}
        logger.info(f"Applied {rules.name} defaults: {sorted(defaults)}")
        return replace(draft, **defaults)

    def next(self) -> int:
        return self.go_to(self.step + 1)

    def back(self) -> int:
        return self.go_to(self.step - 1)

    def go_to(self, step: int) -> int:
        target = clamp(step, 0, LAST_STEP)
        if target != self.step:
            self._draft = replace(self._draft, step=target)
            self._enter_step(target)
            self._autosave()
        return self.step

    def _enter_step(self, step: int) -> None:
        if step == 0 and self._draft.offer_price <= 0 and self._draft.list_price > 0:
            self._draft = replace(self._draft, offer_price=self._draft.list_price)

    # -------------------------------------------------------------------------
    # Attachments
    # -------------------------------------------------------------------------

    def add_attachments(self, files: list[FileUpload]) -> list[Attachment]:
        """Ingest files and append them once every one has completed."""
        if not files:
            return []
        added = self.attachment_store.ingest_many(files, self._draft.id)
        self._draft = replace(
            self._draft,
            attachments=self._draft.attachments + tuple(added),
            pre_approval_attached=True,
        )
        self._autosave()
        return added

    def remove_attachment(self, attachment_id: str) -> bool:
        remaining = self.attachment_store.remove(self._draft.attachments, attachment_id)
        if len(remaining) == len(self._draft.attachments):
            return False
        self._draft = replace(self._draft, attachments=remaining)
        self._autosave()
        return True

    # -------------------------------------------------------------------------
    # Named drafts
    # -------------------------------------------------------------------------

    def save(self, name: str | None = None) -> OfferDraft | None:
        """Save the current draft under its id (a new one the first time)."""
        name = name or self._draft.name or f"Draft {datetime.now():%Y-%m-%d %H:%M:%S}"
        saved = self.repository.save(replace(self._draft, name=name))
        if saved is None:
            logger.warning("Draft not saved; keeping in-memory state")
            return None
        self._draft = saved
        self._autosave()
        return saved

    def save_as(self, name: str) -> OfferDraft | None:
        """Save a copy under a new id and name, and continue editing the copy."""
        if not name or not name.strip():
            return None
        saved = self.repository.save(replace(self._draft, id=None, name=name.strip()))
        if saved is None:
            return None
        self._draft = saved
        self._autosave()
        return saved

    def load(self, draft_id: str) -> OfferDraft | None:
        draft = self.repository.load(draft_id)
        if draft is None:
            return None
        meta = self.repository.get_meta(draft_id)
        if meta is not None and meta.name != draft.name:
            draft = replace(draft, name=meta.name)
        self._draft = draft
        self._enter_step(draft.step)
        self._autosave()
        return self._draft

    def rename(self, draft_id: str, new_name: str) -> bool:
        if not self.repository.rename(draft_id, new_name):
            return False
        if self._draft.id == draft_id:
            self._draft = replace(self._draft, name=new_name)
            self._autosave()
        return True

    def delete(self, draft_id: str) -> bool:
        if not self.repository.delete(draft_id):
            return False
        if self._draft.id == draft_id:
            self._draft = replace(self._draft, id=None, name=None, saved_at=None)
            self._autosave()
        return True

    def list_drafts(self) -> list[DraftMeta]:
        return self.repository.list_drafts()

    def clear_autosave(self) -> bool:
        cleared = self.repository.clear_autosave()
        if cleared:
            self.last_saved_at = None
        return cleared

    # -------------------------------------------------------------------------
    # Export / import / document
    # -------------------------------------------------------------------------

    def export_json(self) -> str:
        return self.repository.export_json(self._draft)

    def import_json(self, text: str) -> OfferDraft:
        """
        Apply an exported draft onto this session field by field.

        The session keeps its own id, name and save time. Raises
        ImportRejected (and changes nothing) if the file is malformed.
        """
        data = self.repository.import_json(text)
        self._draft = self._draft.merged(data)
        self._autosave()
        return self._draft

    def export_catalog_json(self) -> str:
        return self.repository.export_catalog_json()

    def restore_catalog_json(self, text: str) -> int:
        return self.repository.restore_catalog_json(text)

    def generate_document(self) -> DocumentSnapshot:
        return self.document_builder.build(
            self._draft,
            self.derived,
            self.flags,
            generated_at=self.clock(),
            state_rules=self.state_requirements,
        )

    def render_document(self) -> str:
        return self.document_builder.render_text(self.generate_document())

    def _autosave(self) -> None:
        saved_at = self.repository.autosave(self._draft)
        if saved_at is not None:
            self.last_saved_at = saved_at
