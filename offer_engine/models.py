"""
Domain Models for the Offer Engine

These dataclasses describe one purchase offer in progress, the catalog of
named drafts, and attachments. All monetary values and rates use Decimal.
Persisted JSON keeps the camelCase field names of the offer builder's
draft format.
"""

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
from enum import Enum

from .lenient import LenientNumber, lenient, lenient_int

# =============================================================================
# ENUMS / CONSTANTS
# =============================================================================

STEPS = ("Property", "Buyer & Financing", "Offer Terms", "Contingencies", "Review & Submit")
LAST_STEP = len(STEPS) - 1


class FinancingType(str, Enum):
    CASH = "Cash"
    CONVENTIONAL = "Conventional"
    FHA = "FHA"
    VA = "VA"


class AmountMode(str, Enum):
    """How a down payment or earnest money value is expressed."""

    PERCENT = "percent"
    DOLLAR = "dollar"


# =============================================================================
# ATTACHMENTS
# =============================================================================


@dataclass(frozen=True)
class InlineSource:
    """File small enough to be carried inside the draft as a data URL."""

    data_url: str
    remote_path: str | None = None  # also uploaded, when configured to

    kind = "inline"


@dataclass(frozen=True)
class RemoteSource:
    """File uploaded to object storage, reachable through a signed URL."""

    url: str
    path: str

    kind = "remote"

    @property
    def data_url(self) -> str:
        return self.url


@dataclass(frozen=True)
class FailedSource:
    """Neither inlined nor uploaded. The file is recorded, its bytes are not."""

    reason: str = "upload failed"

    kind = "failed"
    data_url = None


AttachmentSource = InlineSource | RemoteSource | FailedSource


@dataclass(frozen=True)
class Attachment:
    id: str
    name: str
    size: int
    type: str
    source: AttachmentSource = field(default_factory=FailedSource)

    @property
    def data_url(self) -> str | None:
        return self.source.data_url

    @property
    def upload_failed(self) -> bool:
        return isinstance(self.source, FailedSource)

    @property
    def status(self) -> str:
        if isinstance(self.source, InlineSource):
            return "inline"
        if isinstance(self.source, RemoteSource):
            return "uploaded"
        return "upload failed"

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name, "size": self.size, "type": self.type}
        if self.data_url is not None:
            data["dataUrl"] = self.data_url
        storage = {"kind": self.source.kind}
        if isinstance(self.source, RemoteSource):
            storage["path"] = self.source.path
        elif isinstance(self.source, InlineSource) and self.source.remote_path:
            storage["path"] = self.source.remote_path
        elif isinstance(self.source, FailedSource):
            storage["reason"] = self.source.reason
        data["storage"] = storage
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Attachment":
        """Parse an attachment entry.

        Entries written before the storage tag existed carry only ``dataUrl``;
        the variant is inferred from its scheme.
        """
        if not isinstance(data, dict) or not isinstance(data.get("id"), str):
            raise ValueError(f"Invalid attachment entry: {data!r}")
        data_url = data.get("dataUrl")
        storage = data.get("storage") if isinstance(data.get("storage"), dict) else {}
        kind = storage.get("kind")
        path = storage.get("path") if isinstance(storage.get("path"), str) else None

        if not isinstance(data_url, str) or not data_url:
            source = FailedSource(storage.get("reason") or "upload failed")
        elif kind == "inline" or (kind is None and data_url.startswith("data:")):
            source = InlineSource(data_url=data_url, remote_path=path)
        else:
            source = RemoteSource(url=data_url, path=path or "")

        size = data.get("size")
        return cls(
            id=data["id"],
            name=data.get("name") if isinstance(data.get("name"), str) else "",
            size=size if isinstance(size, int) and not isinstance(size, bool) else 0,
            type=data.get("type") if isinstance(data.get("type"), str) else "",
            source=source,
        )


@dataclass(frozen=True)
class FileUpload:
    """A file chosen by the user, before ingestion."""

    name: str
    data: bytes
    type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


# =============================================================================
# DRAFT
# =============================================================================

MONEY_FIELDS = (
    "list_price", "hoa_monthly", "taxes_annual", "insurance_annual",
    "interest_rate", "term_years", "down_payment",
    "offer_price", "earnest", "escalation_cap", "escalation_increment",
)
DAY_FIELDS = ("inspection_days", "financing_days", "home_sale_days")
TEXT_FIELDS = (
    "address", "city", "state", "zip",
    "buyer_name", "buyer_email", "buyer_phone",
    "closing_date", "seller_concessions",
)
FLAG_FIELDS = (
    "pre_approval_attached", "has_escalation",
    "inspection", "appraisal", "financing_cont", "home_sale",
)

# attribute name -> JSON key, where they differ beyond camelCase
_JSON_KEY_OVERRIDES = {"state": "stateUS"}


def json_key(attr: str) -> str:
    if attr in _JSON_KEY_OVERRIDES:
        return _JSON_KEY_OVERRIDES[attr]
    head, *rest = attr.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _num(value: Decimal) -> int | float | str:
    """
    Decimal to a JSON value without losing precision: an int for whole
    numbers, a float when it reads back as the same Decimal, else a string.
    """
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(str(as_float)) == value:
        return as_float
    return str(value)


@dataclass
class OfferDraft:
    """
    Full field state of one offer in progress plus its wizard position.

    Numeric fields are coerced through LenientNumber on construction (and on
    every dataclasses.replace), so a draft never holds a non-finite number.
    Down payment and earnest money are kept non-negative and ``step`` is
    clamped to the wizard's range.
    """

    # Identity
    id: str | None = None
    name: str | None = None
    saved_at: str | None = None
    step: int = 0

    # Property
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    list_price: Decimal = Decimal("450000")
    hoa_monthly: Decimal = Decimal("0")
    taxes_annual: Decimal = Decimal("9000")
    insurance_annual: Decimal = Decimal("1500")

    # Buyer & financing
    buyer_name: str = ""
    buyer_email: str = ""
    buyer_phone: str = ""
    financing_type: FinancingType = FinancingType.CONVENTIONAL
    interest_rate: Decimal = Decimal("6.75")
    term_years: Decimal = Decimal("30")
    dp_mode: AmountMode = AmountMode.PERCENT
    down_payment: Decimal = Decimal("20")
    pre_approval_attached: bool = False

    # Offer terms
    offer_price: Decimal = Decimal("0")
    earnest_mode: AmountMode = AmountMode.PERCENT
    earnest: Decimal = Decimal("3")
    closing_date: str = ""
    has_escalation: bool = False
    escalation_cap: Decimal = Decimal("0")
    escalation_increment: Decimal = Decimal("2000")
    seller_concessions: str = ""

    # Contingencies
    inspection: bool = True
    inspection_days: int = 7
    appraisal: bool = True
    financing_cont: bool = True
    financing_days: int = 21
    home_sale: bool = False
    home_sale_days: int = 30

    attachments: tuple[Attachment, ...] = ()

    def __post_init__(self):
        for name in MONEY_FIELDS:
            setattr(self, name, lenient(getattr(self, name)))
        for name in DAY_FIELDS:
            setattr(self, name, lenient_int(getattr(self, name)))
        self.down_payment = max(Decimal("0"), self.down_payment)
        self.earnest = max(Decimal("0"), self.earnest)
        self.step = min(LAST_STEP, max(0, lenient_int(self.step)))
        self.financing_type = FinancingType(self.financing_type)
        self.dp_mode = AmountMode(self.dp_mode)
        self.earnest_mode = AmountMode(self.earnest_mode)
        self.attachments = tuple(self.attachments)

    @classmethod
    def blank(cls, **overrides) -> "OfferDraft":
        """A draft with every input empty (financing stays Conventional)."""
        empty = {name: 0 for name in MONEY_FIELDS + DAY_FIELDS}
        empty.update({name: False for name in FLAG_FIELDS})
        empty.update(overrides)
        return cls(**empty)

    @property
    def is_cash(self) -> bool:
        return self.financing_type == FinancingType.CASH

    @property
    def has_full_address(self) -> bool:
        return all((self.address, self.city, self.state, self.zip))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        data = {}
        if self.id is not None:
            data["id"] = self.id
        if self.name is not None:
            data["name"] = self.name
        data["step"] = self.step
        for f in fields(self):
            attr = f.name
            if attr in ("id", "name", "saved_at", "step", "attachments"):
                continue
            value = getattr(self, attr)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, Decimal):
                value = _num(value)
            data[json_key(attr)] = value
        data["attachments"] = [a.to_dict() for a in self.attachments]
        if self.saved_at is not None:
            data["savedAt"] = self.saved_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OfferDraft":
        return cls().merged(data, include_identity=True)

    def merged(self, data: dict, include_identity: bool = False) -> "OfferDraft":
        """
        Copy of this draft with every well-typed field of ``data`` applied.

        Fields missing from ``data``, or present with the wrong primitive type,
        keep their current value. This is how partially-shaped or older
        exports are tolerated.
        """
        changes = {}
        for name in MONEY_FIELDS:
            value = data.get(json_key(name))
            if _is_number(value) or (isinstance(value, str) and not LenientNumber(value).coerced):
                changes[name] = value
        for name in DAY_FIELDS + ("step",):
            value = data.get(json_key(name))
            if _is_number(value):
                changes[name] = value
        for name in TEXT_FIELDS:
            value = data.get(json_key(name))
            if isinstance(value, str):
                changes[name] = value
        for name in FLAG_FIELDS:
            value = data.get(json_key(name))
            if isinstance(value, bool):
                changes[name] = value

        financing = data.get("financingType")
        if isinstance(financing, str) and financing in {t.value for t in FinancingType}:
            changes["financing_type"] = FinancingType(financing)
        for name in ("dp_mode", "earnest_mode"):
            mode = data.get(json_key(name))
            if isinstance(mode, str) and mode in {m.value for m in AmountMode}:
                changes[name] = AmountMode(mode)

        if isinstance(data.get("attachments"), list):
            parsed = []
            for entry in data["attachments"]:
                try:
                    parsed.append(Attachment.from_dict(entry))
                except ValueError:
                    continue
            changes["attachments"] = tuple(parsed)

        if include_identity:
            for attr, key in (("id", "id"), ("name", "name"), ("saved_at", "savedAt")):
                if isinstance(data.get(key), str):
                    changes[attr] = data[key]

        return replace(self, **changes)


@dataclass(frozen=True)
class DraftMeta:
    """Catalog entry for one named draft."""

    id: str
    name: str
    saved_at: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "savedAt": self.saved_at}

    @classmethod
    def from_dict(cls, data: dict) -> "DraftMeta":
        if not isinstance(data, dict) or not isinstance(data.get("id"), str) or not data["id"]:
            raise ValueError(f"Invalid catalog entry: {data!r}")
        name = data.get("name")
        saved_at = data.get("savedAt")
        return cls(
            id=data["id"],
            name=name if isinstance(name, str) else "",
            saved_at=saved_at if isinstance(saved_at, str) else "",
        )


# =============================================================================
# OUTPUT MODELS
# =============================================================================


@dataclass
class DerivedFigures:
    """Figures recomputed from a draft on every read. Never persisted."""

    down_payment_dollar: Decimal = Decimal("0")
    down_payment_percent: Decimal = Decimal("0")
    loan_amount: Decimal = Decimal("0")
    principal_and_interest: Decimal = Decimal("0")
    monthly_taxes: Decimal = Decimal("0")
    monthly_insurance: Decimal = Decimal("0")
    monthly_escrow: Decimal = Decimal("0")
    total_estimated_monthly: Decimal = Decimal("0")
    earnest_dollar: Decimal = Decimal("0")
    ltv_percent: Decimal = Decimal("0")
    closing_costs: Decimal = Decimal("0")
    cash_needed: Decimal = Decimal("0")
    needs_pmi: bool = False
    pmi_monthly: Decimal = Decimal("0")
    total_monthly_with_pmi: Decimal = Decimal("0")


@dataclass
class DocumentSnapshot:
    """Static hand-off for a rendering surface (print, PDF)."""

    file_name: str
    generated_at: str
    property: dict
    pricing: dict
    financing: dict
    terms: dict
    contingencies: list[dict]
    compliance_flags: list[str]
    attachments: list[dict]
    state_requirements: dict | None = None

    def to_dict(self) -> dict:
        return {
            "file_name": self.file_name,
            "generated_at": self.generated_at,
            "property": self.property,
            "pricing": self.pricing,
            "financing": self.financing,
            "terms": self.terms,
            "contingencies": self.contingencies,
            "compliance_flags": self.compliance_flags,
            "attachments": self.attachments,
            "state_requirements": self.state_requirements,
        }
