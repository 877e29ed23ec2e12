"""
Draft Repository

Persists offer drafts in a local key-value store:

- one autosave slot holding the draft currently being edited;
- one body per named draft, under ``<draft key>:<id>``;
- a catalog (list of DraftMeta, newest first) under its own key.

The store has no multi-key transactions, so every operation that touches a
body and the catalog undoes its first write when the second one fails.
Store failures are logged and reported as a falsy return value; they never
propagate to the caller.
"""

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from .models import DraftMeta, OfferDraft
from .storage.kv import KeyValueStore
from .validators import ImportValidator

logger = logging.getLogger(__name__)

AUTOSAVE_KEY = "offer-builder-draft-v1"
CATALOG_KEY = "offer-builder-drafts-list-v1"
DEFAULT_DRAFT_NAME = "Untitled draft"
BACKUP_FORMAT_VERSION = 1


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def new_draft_id() -> str:
    return uuid.uuid4().hex


class DraftRepository:
    """Autosave slot, named draft bodies and the draft catalog."""

    def __init__(self, store: KeyValueStore, clock=utc_now, id_factory=new_draft_id):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.validator = ImportValidator()

    @staticmethod
    def draft_key(draft_id: str) -> str:
        return f"{AUTOSAVE_KEY}:{draft_id}"

    # -------------------------------------------------------------------------
    # Autosave slot
    # -------------------------------------------------------------------------

    def autosave(self, draft: OfferDraft) -> str | None:
        """Overwrite the autosave slot. Returns the save timestamp, or None."""
        saved_at = self.clock()
        try:
            self.store.set(AUTOSAVE_KEY, self._dump(replace(draft, saved_at=saved_at)))
        except Exception as e:
            logger.error(f"Autosave failed: {e}")
            return None
        return saved_at

    def load_autosave(self) -> OfferDraft | None:
        return self._read_draft(AUTOSAVE_KEY)

    def clear_autosave(self) -> bool:
        try:
            self.store.remove(AUTOSAVE_KEY)
        except Exception as e:
            logger.error(f"Could not clear autosave slot: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Named drafts
    # -------------------------------------------------------------------------

    def save(self, draft: OfferDraft) -> OfferDraft | None:
        """
        Upsert a named draft and its catalog entry.

        Assigns an id when the draft has none and stamps ``saved_at``.
        Returns the stored draft, or None if it could not be persisted (in
        which case neither the body nor the catalog changed).
        """
        saved = replace(
            draft,
            id=draft.id or self.id_factory(),
            name=draft.name or DEFAULT_DRAFT_NAME,
            saved_at=self.clock(),
        )
        key = self.draft_key(saved.id)

        try:
            catalog = self._read_catalog()
            previous_body = self.store.get(key)
            self.store.set(key, self._dump(saved))
        except Exception as e:
            logger.error(f"Error saving draft {saved.id}: {e}")
            return None

        meta = DraftMeta(id=saved.id, name=saved.name, saved_at=saved.saved_at)
        updated = [meta] + [m for m in catalog if m.id != saved.id]
        try:
            self._write_catalog(updated)
        except Exception as e:
            logger.error(f"Error updating catalog for draft {saved.id}: {e}")
            self._restore(key, previous_body)
            return None

        logger.info(f"Saved draft {saved.id} ({saved.name})")
        return saved

    def load(self, draft_id: str) -> OfferDraft | None:
        """The stored body for ``draft_id``, or None. Never touches the catalog."""
        return self._read_draft(self.draft_key(draft_id))

    def get_meta(self, draft_id: str) -> DraftMeta | None:
        for meta in self.list_drafts():
            if meta.id == draft_id:
                return meta
        return None

    def list_drafts(self) -> list[DraftMeta]:
        """Catalog entries, most recently saved first. Empty if unreadable."""
        try:
            return self._read_catalog()
        except Exception as e:
            logger.error(f"Could not read draft catalog: {e}")
            return []

    def rename(self, draft_id: str, new_name: str) -> bool:
        """Rename a catalog entry. The stored body keeps its name until re-saved."""
        try:
            catalog = self._read_catalog()
        except Exception as e:
            logger.error(f"Error renaming draft {draft_id}: catalog unreadable: {e}")
            return False
        if not any(m.id == draft_id for m in catalog):
            logger.warning(f"Cannot rename unknown draft {draft_id}")
            return False
        updated = [replace(m, name=new_name) if m.id == draft_id else m for m in catalog]
        try:
            self._write_catalog(updated)
        except Exception as e:
            logger.error(f"Error renaming draft {draft_id}: {e}")
            return False
        return True

    def delete(self, draft_id: str) -> bool:
        """
        Remove a draft's body and catalog entry together.

        Returns True when both are gone. If the catalog cannot be rewritten the
        body is put back, so neither an orphaned body nor an orphaned entry
        is left behind.
        """
        key = self.draft_key(draft_id)
        try:
            catalog = self._read_catalog()
            previous_body = self.store.get(key)
        except Exception as e:
            logger.error(f"Error deleting draft {draft_id}: {e}")
            return False
        remaining = [m for m in catalog if m.id != draft_id]
        if previous_body is None and len(remaining) == len(catalog):
            return False

        try:
            self.store.remove(key)
        except Exception as e:
            logger.error(f"Error deleting draft {draft_id}: {e}")
            return False

        if len(remaining) != len(catalog):
            try:
                self._write_catalog(remaining)
            except Exception as e:
                logger.error(f"Error removing draft {draft_id} from catalog: {e}")
                self._restore(key, previous_body)
                return False

        logger.info(f"Deleted draft {draft_id}")
        return True

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def export_json(self, draft: OfferDraft) -> str:
        """Full snapshot of one draft, for download."""
        return json.dumps(draft.to_dict(), indent=2)

    def import_json(self, text: str) -> dict:
        """Validate a single-draft export. Raises ImportRejected."""
        return self.validator.parse_draft(text)

    def export_catalog_json(self) -> str:
        """Every named draft body plus the catalog, as one backup document."""
        catalog = self.list_drafts()
        drafts = []
        for meta in catalog:
            draft = self.load(meta.id)
            if draft is None:
                logger.warning(f"Catalog entry {meta.id} has no stored body; left out of backup")
                continue
            drafts.append(draft.to_dict())
        return json.dumps(
            {
                "version": BACKUP_FORMAT_VERSION,
                "exportedAt": self.clock(),
                "catalog": [m.to_dict() for m in catalog if any(d["id"] == m.id for d in drafts)],
                "drafts": drafts,
            },
            indent=2,
        )

    def restore_catalog_json(self, text: str) -> int:
        """
        Write every draft of a backup into the store and catalog.

        The backup is validated as a whole first (ImportRejected on any
        problem). Returns the number of drafts restored; on a store failure
        the bodies written so far are rolled back and 0 is returned.
        """
        entries = self.validator.parse_backup(text)
        drafts = [OfferDraft.from_dict(e) for e in entries]

        written: list[tuple[str, str | None]] = []
        try:
            catalog = self._read_catalog()
            for draft in drafts:
                key = self.draft_key(draft.id)
                written.append((key, self.store.get(key)))
                self.store.set(key, self._dump(draft))
            restored = {d.id: d for d in drafts}
            metas = [
                DraftMeta(id=d.id, name=d.name or DEFAULT_DRAFT_NAME, saved_at=d.saved_at or self.clock())
                for d in drafts
            ]
            self._write_catalog(metas + [m for m in catalog if m.id not in restored])
        except Exception as e:
            logger.error(f"Restore from backup failed: {e}")
            for key, previous in reversed(written):
                self._restore(key, previous)
            return 0

        logger.info(f"Restored {len(drafts)} drafts from backup")
        return len(drafts)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _dump(draft: OfferDraft) -> str:
        return json.dumps(draft.to_dict())

    @staticmethod
    def _sorted(metas: list[DraftMeta]) -> list[DraftMeta]:
        return sorted(metas, key=lambda m: m.saved_at, reverse=True)

    def _read_catalog(self) -> list[DraftMeta]:
        """
        Parse the catalog, skipping (and logging) entries that are not valid.

        Store and JSON errors propagate, so write paths abort instead of
        rewriting the catalog from a partial read.
        """
        raw = self.store.get(CATALOG_KEY)
        if not raw:
            return []
        entries = json.loads(raw)
        if not isinstance(entries, list):
            raise ValueError("draft catalog is not a JSON list")

        metas: list[DraftMeta] = []
        seen = set()
        for entry in entries:
            try:
                meta = DraftMeta.from_dict(entry)
            except ValueError as e:
                logger.warning(f"Skipping catalog entry: {e}")
                continue
            if meta.id in seen:
                continue
            seen.add(meta.id)
            metas.append(meta)
        return self._sorted(metas)

    def _write_catalog(self, metas: list[DraftMeta]) -> None:
        self.store.set(CATALOG_KEY, json.dumps([m.to_dict() for m in self._sorted(metas)]))

    def _read_draft(self, key: str) -> OfferDraft | None:
        try:
            raw = self.store.get(key)
            if not raw:
                return None
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("stored draft is not a JSON object")
            return OfferDraft.from_dict(data)
        except Exception as e:
            logger.error(f"Could not load draft from {key}: {e}")
            return None

    def _restore(self, key: str, previous: str | None) -> None:
        """Put a key back the way it was before a failed multi-key write."""
        try:
            if previous is None:
                self.store.remove(key)
            else:
                self.store.set(key, previous)
        except Exception as e:
            logger.error(f"Could not roll back {key}: {e}")
