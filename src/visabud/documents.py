"""Document review: detect a document's type, pull out its key fields and
check them against common visa requirements.

Everything runs locally on text that was already extracted from the file.
"""

import mimetypes
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from .memory.extractor import normalize_date
from .memory.models import UserProfile
from .memory.requirements import passport_is_valid
from .tools.base import payload_to_dict
from .tools.checklist import normalize_visa_type
from .tools.cost import FeeTable

PRIVACY_NOTE = "Reviewed on this device; nothing was uploaded."

# Typical minimum balance in USD that consulates look for.
MIN_FUNDS_USD = {"study": 6000.0, "work": 3000.0}
DEFAULT_MIN_FUNDS_USD = 3000.0

CURRENCY_SYMBOLS = {"$": "USD", "€": "EUR", "£": "GBP", "₹": "INR"}

_LABEL_END = r"\s*[:\-]?[ \t]*"
_NAME = re.compile(r"(?i:\b(?:full name|name|holder|surname|given names?|account holder))" + _LABEL_END + r"([A-Z][A-Za-z' -]{1,40})")
_EXPIRY = re.compile(r"(?i)\b(?:date of expiry|expiry date|expiry|expires|expiration)" + _LABEL_END + r"([0-9A-Za-z ,./-]{6,20})")
_ISSUE = re.compile(r"(?i)\b(?:date of issue|issue date|issued)" + _LABEL_END + r"([0-9A-Za-z ,./-]{6,20})")
_PASSPORT_NUMBER = re.compile(r"(?i)\b(?:passport|document)\s*(?:no\.?|number)" + _LABEL_END + r"([A-Z0-9]{5,15})\b")
_ACCOUNT_NUMBER = re.compile(r"(?i)\b(?:account|acct)\.?\s*(?:number|no\.?)" + _LABEL_END + r"([0-9][0-9 -]{4,24}[0-9])")
_CURRENCY = re.compile(r"(?i)\bcurrency" + _LABEL_END + r"([A-Z]{3})\b")
_BALANCES = [
    re.compile(r"(?i)\b" + label + _LABEL_END + r"([$€£₹]?\s*[0-9][0-9,]*(?:\.[0-9]{1,2})?)")
    for label in ("closing balance", "available balance", "balance")
]
_INSTITUTION = re.compile(r"(?i:\b(?:institution|university|college))\s*:[ \t]*([A-Z][A-Za-z .,&'-]{2,60})")
_INSTITUTION_NAME = re.compile(
    r"\b((?i:university|college|institute) (?i:of) [A-Z][A-Za-z&'-]+(?: [A-Z][A-Za-z&'-]+)*"
    r"|[A-Z][A-Za-z&'-]+(?: [A-Z][A-Za-z&'-]+)* (?:University|College|Institute))"
)
_DEGREE = re.compile(
    r"(?i)\b((?:bachelor|master|doctor)(?:'s)?(?: of [a-z]+(?: [a-z]+){0,3})?|b\.?sc|m\.?sc|ph\.?d|mba|diploma)\b"
)
_GRADUATION = re.compile(
    r"(?i)\b(?:date of graduation|graduated on|graduated|awarded on|conferred on)" + _LABEL_END + r"([0-9A-Za-z ,./-]{6,20})"
)
_ANY_DATE = re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b|\b\d{1,2}[/.-]\d{1,2}[/.-]\d{4}\b")


class DocumentType(Enum):
    PASSPORT = "passport"
    BANK_STATEMENT = "bank_statement"
    DEGREE = "degree_certificate"
    UNKNOWN = "unknown"


class Severity(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReviewStatus(Enum):
    OK = "ok"
    REVIEW = "review"
    NEEDS_UPDATE = "needs_update"


@dataclass
class ParsedFields:
    """Fields found in a document; which ones apply depends on its type."""

    doc_type: DocumentType
    file_type: str | None = None
    valid_format: bool = True
    holder_name: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    document_number: str | None = None
    account_number: str | None = None
    currency: str | None = None
    balance: float | None = None
    institution: str | None = None
    degree: str | None = None
    graduation_date: str | None = None


@dataclass
class ReviewIssue:
    field: str
    problem: str
    severity: Severity


@dataclass
class DocumentReview:
    fields: ParsedFields
    issues: list[ReviewIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def doc_type(self) -> DocumentType:
        return self.fields.doc_type

    @property
    def status(self) -> ReviewStatus:
        if any(issue.severity is Severity.HIGH for issue in self.issues):
            return ReviewStatus.NEEDS_UPDATE
        if self.issues:
            return ReviewStatus.REVIEW
        return ReviewStatus.OK

    def to_dict(self) -> dict[str, Any]:
        data = payload_to_dict(self) or {}
        data["status"] = self.status.value
        return data


def _first(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(match.lastindex or 0).strip(" \t.,")
    return value or None


def parse_amount(value: str | None) -> float | None:
    """Number from a money string such as "$12,500.00"; None if there is none."""
    if not value:
        return None
    cleaned = re.sub(r"[^0-9.]", "", value.replace(",", ""))
    try:
        return float(cleaned)
    except ValueError:
        return None


def detect_document_type(
    text: str | None,
    filename: str | None = None,
    mime_type: str | None = None,
    declared: str | None = None,
) -> DocumentType:
    """Type from the declared type, file name, MIME type or content, in that order of keywords."""
    haystacks = [(s or "").lower() for s in (declared, filename, mime_type, text)]

    def mentions(*words: str) -> bool:
        return any(word in hay for hay in haystacks for word in words)

    if mentions("passport"):
        return DocumentType.PASSPORT
    if mentions("statement", "bank"):
        return DocumentType.BANK_STATEMENT
    if mentions("degree", "diploma", "bachelor", "master", "transcript"):
        return DocumentType.DEGREE
    return DocumentType.UNKNOWN


def parse_fields(doc_type: DocumentType, text: str, file_type: str | None = None) -> ParsedFields:
    """Pull the fields that matter for ``doc_type`` out of the text."""
    name = _first(_NAME, text)

    if doc_type is DocumentType.PASSPORT:
        number = _first(_PASSPORT_NUMBER, text)
        expiry = normalize_date(_first(_EXPIRY, text))
        return ParsedFields(
            doc_type=doc_type,
            file_type=file_type,
            holder_name=name,
            issue_date=normalize_date(_first(_ISSUE, text)),
            expiry_date=expiry,
            document_number=number.upper() if number else None,
            valid_format=any((number, name, expiry)),
        )

    if doc_type is DocumentType.BANK_STATEMENT:
        raw_balance = next((v for v in (_first(p, text) for p in _BALANCES) if v), None)
        balance = parse_amount(raw_balance)
        currency = _first(_CURRENCY, text)
        if currency is None and raw_balance and raw_balance[0] in CURRENCY_SYMBOLS:
            currency = CURRENCY_SYMBOLS[raw_balance[0]]
        account = _first(_ACCOUNT_NUMBER, text)
        return ParsedFields(
            doc_type=doc_type,
            file_type=file_type,
            holder_name=name,
            account_number=re.sub(r"[ -]", "", account) if account else None,
            currency=currency.upper() if currency else None,
            balance=balance,
            valid_format=account is not None or balance is not None,
        )

    if doc_type is DocumentType.DEGREE:
        institution = _first(_INSTITUTION, text) or _first(_INSTITUTION_NAME, text)
        degree = _first(_DEGREE, text)
        graduated = _first(_GRADUATION, text) or _first(_ANY_DATE, text)
        return ParsedFields(
            doc_type=doc_type,
            file_type=file_type,
            holder_name=name,
            institution=institution,
            degree=degree,
            graduation_date=normalize_date(graduated),
            valid_format=degree is not None or institution is not None,
        )

    return ParsedFields(doc_type=doc_type, file_type=file_type, holder_name=name, valid_format=bool(text.strip()))


def names_match(expected: str, found: str) -> bool:
    """Loose name comparison: any shared name part counts as a match."""
    a = set(re.findall(r"[a-z]{2,}", expected.lower()))
    b = set(re.findall(r"[a-z]{2,}", found.lower()))
    if not a or not b:
        return True
    return bool(a & b)


def minimum_funds(goal: str | None) -> float:
    return MIN_FUNDS_USD.get(normalize_visa_type(goal), DEFAULT_MIN_FUNDS_USD)


class _Findings:
    def __init__(self) -> None:
        self.issues: list[ReviewIssue] = []
        self.suggestions: list[str] = []

    def add(self, name: str, problem: str, severity: Severity, suggestion: str | None = None) -> None:
        self.issues.append(ReviewIssue(name, problem, severity))
        if suggestion and suggestion not in self.suggestions:
            self.suggestions.append(suggestion)


def _check_passport(parsed: ParsedFields, today: date, out: _Findings) -> None:
    if parsed.expiry_date is None:
        out.add(
            "expiry_date",
            "Passport expiry date not found.",
            Severity.HIGH,
            "Upload the passport biodata page with the expiry date visible.",
        )
    elif not passport_is_valid(parsed.expiry_date, today):
        out.add(
            "expiry_date",
            f"Passport expires on {parsed.expiry_date}, less than 6 months from now.",
            Severity.HIGH,
            "Renew your passport so it stays valid for at least 6 months beyond travel.",
        )
    if parsed.holder_name is None:
        out.add("holder_name", "Name not detected.", Severity.MEDIUM, "Make sure the name is legible in the scan or photo.")
    if parsed.document_number is None:
        out.add(
            "document_number",
            "Passport number not detected.",
            Severity.MEDIUM,
            "Provide a clearer scan or photo of the biodata page.",
        )


def _check_bank_statement(parsed: ParsedFields, goal: str | None, fee_table: FeeTable, out: _Findings) -> None:
    if parsed.balance is None:
        out.add(
            "balance",
            "Could not detect the closing balance.",
            Severity.MEDIUM,
            "Provide a recent bank statement (last 3-6 months) showing balances.",
        )
    else:
        currency = parsed.currency or "USD"
        balance_usd = parsed.balance if currency == "USD" else fee_table.to_usd(parsed.balance, currency)
        required = minimum_funds(goal)
        if balance_usd is None:
            out.add("currency", f"Could not convert {currency}; funds were not checked.", Severity.LOW)
        elif balance_usd < required:
            visa = normalize_visa_type(goal)
            purpose = f" for a {visa} visa" if visa != "generic" else ""
            out.add(
                "balance",
                f"Balance of about ${balance_usd:,.0f} is below the typical ${required:,.0f}{purpose}.",
                Severity.MEDIUM,
                "Increase available funds or add more financial evidence (sponsor letter, savings, fixed deposits).",
            )
    if parsed.account_number is None:
        out.add("account_number", "Account number not found.", Severity.LOW)


def _check_degree(parsed: ParsedFields, out: _Findings) -> None:
    if parsed.degree is None:
        out.add(
            "degree",
            "Degree title not detected.",
            Severity.MEDIUM,
            "Share a clearer copy or include a transcript to confirm the award.",
        )
    if parsed.institution is None:
        out.add("institution", "Issuing institution not detected.", Severity.LOW)


def review_document(
    text: str,
    *,
    filename: str | None = None,
    mime_type: str | None = None,
    declared_type: str | None = None,
    goal: str | None = None,
    profile: UserProfile | None = None,
    today: date | None = None,
    fee_table: FeeTable | None = None,
) -> DocumentReview:
    """Review one document's extracted text.

    Passports are checked for 6 months of remaining validity, bank
    statements for the typical minimum balance of ``goal`` and every
    document for a holder name that matches the profile.

    Args:
        text: Text extracted from the document.
        filename: Original file name, used for type and MIME detection.
        mime_type: MIME type if known.
        declared_type: Type stated by the user, if any.
        goal: Target visa goal for the funds check.
        profile: Profile to cross-check the holder name against.
        today: Reference date for the validity check.
        fee_table: Exchange rates for converting balances to USD.
    """
    file_type = mime_type or (mimetypes.guess_type(filename)[0] if filename else None)
    doc_type = detect_document_type(text, filename, mime_type, declared_type)
    parsed = parse_fields(doc_type, text or "", file_type)
    out = _Findings()

    if doc_type is DocumentType.PASSPORT:
        _check_passport(parsed, today or date.today(), out)
    elif doc_type is DocumentType.BANK_STATEMENT:
        _check_bank_statement(parsed, goal, fee_table or FeeTable.bundled(), out)
    elif doc_type is DocumentType.DEGREE:
        _check_degree(parsed, out)
    else:
        out.add(
            "doc_type",
            "Unrecognised document type.",
            Severity.LOW,
            "Say what the document is (passport, bank statement, degree certificate).",
        )

    if profile is not None and profile.name and parsed.holder_name:
        if not names_match(profile.name, parsed.holder_name):
            out.add(
                "holder_name",
                f'Name on the document ("{parsed.holder_name}") differs from your profile ("{profile.name}").',
                Severity.MEDIUM,
                "Use the same legal name across all documents.",
            )

    return DocumentReview(fields=parsed, issues=out.issues, suggestions=out.suggestions)


STATUS_HEADERS = {
    ReviewStatus.OK: "✅ Document looks OK.",
    ReviewStatus.REVIEW: "ℹ️ Document reviewed. See notes below.",
    ReviewStatus.NEEDS_UPDATE: "⚠️ Document needs an update or extra evidence.",
}


def render_review(review: DocumentReview) -> str:
    parsed = review.fields
    balance = None
    if parsed.balance is not None:
        balance = f"{parsed.balance:,.2f} {parsed.currency or ''}".strip()
    lines = [STATUS_HEADERS[review.status], f"Type: {review.doc_type.value.replace('_', ' ')}"]
    for label, value in (
        ("Name", parsed.holder_name),
        ("Number", parsed.document_number),
        ("Expiry", parsed.expiry_date),
        ("Balance", balance),
        ("Degree", parsed.degree),
        ("Institution", parsed.institution),
    ):
        if value:
            lines.append(f"{label}: {value}")
    if review.issues:
        lines.append("\nIssues:")
        lines.extend(f"- [{issue.severity.value}] {issue.problem}" for issue in review.issues)
    if review.suggestions:
        lines.append("\nSuggestions:")
        lines.extend(f"- {s}" for s in review.suggestions)
    lines.append(f"\n{PRIVACY_NOTE}")
    return "\n".join(lines)
