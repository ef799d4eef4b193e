"""Domain models - canonical legacy message shapes and conversion outputs"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class MessageFormat(str, Enum):
    """Supported legacy input formats"""

    MT103 = "MT103"
    NACHA = "NACHA"

    @property
    def target_message(self) -> str:
        """ISO 20022 message produced from this format"""
        return "pacs.008" if self is MessageFormat.MT103 else "pain.001"


@dataclass(frozen=True)
class Party:
    """Debtor or creditor block of an MT103 (:50K: / :59:)"""

    name: str
    address_lines: Tuple[str, ...] = ()
    account: Optional[str] = None


@dataclass(frozen=True)
class MT103Message:
    """Parsed SWIFT MT103 customer credit transfer"""

    trn_ref: str
    value_date: str  # YYMMDD
    currency: str
    amount: str  # decimal string, "." separator
    debtor: Party
    creditor: Party
    remittance: Optional[str] = None
    charges: Optional[str] = None  # SHA | BEN | OUR
    extensions: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NachaEntry:
    """Entry detail record (type 6)"""

    name: str
    routing: str  # 8-digit ABA + check digit
    account: str
    amount_cents: Optional[int]  # None when the amount span is not an integer
    memo: Optional[str] = None
    transaction_code: str = ""
    individual_id: str = ""
    trace_number: str = ""
    amount_raw: str = ""


@dataclass(frozen=True)
class NachaFile:
    """Parsed NACHA ACH file, all batches flattened into one entry list"""

    file_header: Dict[str, str]
    batch_header: Dict[str, str]
    entries: Tuple[NachaEntry, ...]
    controls: Dict[str, str]


@dataclass(frozen=True)
class MappingRow:
    """One legacy field placed into the generated XML"""

    source: str
    value: str
    target_xpath: str
    note: Optional[str] = None


class RiskLevel(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    CRITICAL = "Critical"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {RiskLevel.INFO: 1, RiskLevel.WARNING: 2, RiskLevel.CRITICAL: 3}


@dataclass(frozen=True)
class Risk:
    """Domain risk flagged on a parsed message"""

    id: str
    title: str
    level: RiskLevel
    description: str
    mitigation: str


@dataclass
class MappingReport:
    """Field-by-field trace of a build, plus build-time assumptions"""

    message_id: str
    rows: List[MappingRow] = field(default_factory=list)
    assumptions: List[str] = field(default_factory=list)
    risks: List[Risk] = field(default_factory=list)  # attached by the caller


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of soft validation: valid with timing, or invalid with errors"""

    valid: bool
    errors: Tuple[str, ...] = ()
    validation_time_ms: Optional[float] = None

    @classmethod
    def ok(cls, validation_time_ms: float) -> "ValidationResult":
        return cls(valid=True, validation_time_ms=max(validation_time_ms, 0.0))

    @classmethod
    def failed(cls, errors: List[str]) -> "ValidationResult":
        if not errors:
            raise ValueError("An invalid result needs at least one error")
        return cls(valid=False, errors=tuple(errors))


@dataclass(frozen=True)
class ConversionSummary:
    """Roll-up of a conversion used for display and monitoring"""

    score: int
    status: str  # "Valid" | "Errors"
    error_count: int
    assumptions_count: int
    risks_total: int
    risks_by_level: Dict[str, int]


@dataclass
class Conversion:
    """Everything produced by one run of the conversion pipeline"""

    format: MessageFormat
    message: Union[MT103Message, NachaFile]
    xml: str
    mapping_report: MappingReport
    validation: ValidationResult
    risks: List[Risk]
    assumptions: List[str]
    summary: ConversionSummary
