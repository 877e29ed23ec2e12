"""
Import Validation for the Offer Engine

Checks an imported file before any of it is applied. A file that fails is
rejected as a whole with ImportRejected (a ValueError) carrying a clear
message; nothing from it reaches the session or the store.
"""

import json

from .models import OfferDraft, json_key

DRAFT_KEYS = frozenset(
    json_key(f) for f in OfferDraft.__dataclass_fields__ if f not in ("saved_at",)
) | {"savedAt"}


class ImportRejected(ValueError):
    """The imported file is not a usable draft or backup."""


class ImportValidator:
    """Parses and validates draft exports and catalog backups."""

    def parse_draft(self, text: str) -> dict:
        """
        Parse a single-draft export. Raises ImportRejected if the text is not
        JSON, is not an object, or shares no field with the draft format.
        """
        data = self._load(text)
        self._validate_draft_object(data)
        return data

    def parse_backup(self, text: str) -> list[dict]:
        """Parse a catalog backup into its list of draft objects."""
        data = self._load(text)
        if not isinstance(data, dict):
            raise ImportRejected("Backup must be a JSON object")

        drafts = data.get("drafts")
        if not isinstance(drafts, list):
            raise ImportRejected("Backup is missing its 'drafts' list")

        seen = set()
        for i, entry in enumerate(drafts):
            self._validate_draft_object(entry, where=f"drafts[{i}]")
            draft_id = entry.get("id")
            if not isinstance(draft_id, str) or not draft_id:
                raise ImportRejected(f"drafts[{i}] has no id")
            if draft_id in seen:
                raise ImportRejected(f"Duplicate draft id in backup: {draft_id}")
            seen.add(draft_id)
        return drafts

    def _load(self, text):
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ImportRejected(f"Import file is not UTF-8 text: {e}") from e
        if not isinstance(text, str) or not text.strip():
            raise ImportRejected("Import file is empty")
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ImportRejected(f"Import file is not valid JSON: {e.msg} (line {e.lineno})") from e

    def _validate_draft_object(self, data, where: str = "Import") -> None:
        if not isinstance(data, dict):
            raise ImportRejected(f"{where} must be a JSON object, got {type(data).__name__}")
        if not DRAFT_KEYS.intersection(data):
            raise ImportRejected(f"{where} contains no offer draft fields")
