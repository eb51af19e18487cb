# poliux/bill_numbers.py
"""
Bill number formatting and normalization.

Bills are stored in LegiScan's compact notation ("HB123", "SJR45") and shown in
federal citation style ("H.R. 123", "S.J.Res. 45"). Users type either, with any
case and spacing, so search goes through normalize_to_legiscan_format() and
generate_bill_number_search_terms() before it hits the database.

    >>> format_bill_number("HB123")
    'H.R. 123'
    >>> normalize_to_legiscan_format("s.j.res. 44")
    'SJR44'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple
import re

# (LegiScan prefix, federal prefix). Order only matters for the embedded-token scan,
# where longer prefixes must be tried first.
BILL_TYPES: List[Tuple[str, str]] = [
    ("HJR", "H.J.Res."),
    ("SJR", "S.J.Res."),
    ("HCR", "H.Con.Res."),
    ("SCR", "S.Con.Res."),
    ("HB", "H.R."),
    ("SB", "S."),
    ("HR", "H.Res."),
    ("SR", "S.Res."),
]


def _federal_regex(federal: str) -> str:
    # "H.J.Res." -> H\.\s*J\.\s*Res\.  (tolerates "H. J. Res.")
    parts = [re.escape(p) for p in federal.rstrip(".").split(".")]
    return r"\.\s*".join(parts) + r"\."


LEGISCAN_PATTERNS: List[Tuple[Pattern[str], str, str]] = [
    (re.compile(rf"^{code}\s*(\d+)$", re.IGNORECASE), code, federal) for code, federal in BILL_TYPES
]
FEDERAL_PATTERNS: List[Tuple[Pattern[str], str, str]] = [
    (re.compile(rf"^{_federal_regex(federal)}\s*(\d+)$", re.IGNORECASE), code, federal)
    for code, federal in BILL_TYPES
]

# Bill numbers embedded in free text, e.g. "funding for HB 45 projects"
_TOKEN_RE = re.compile(
    r"(?<![\w.])(?:"
    + "|".join(_federal_regex(federal) for _, federal in BILL_TYPES)
    + "|"
    + "|".join(code for code, _ in BILL_TYPES)
    + r")\s*\d+\b",
    re.IGNORECASE,
)

SEARCH_BILL_NUMBER = "bill_number"
SEARCH_MIXED = "mixed"
SEARCH_TEXT = "text"


@dataclass
class SearchAnalysis:
    search_type: str
    search_terms: List[str] = field(default_factory=list)
    is_bill_number: bool = False
    # LegiScan forms of every bill number found in the input
    bill_numbers: List[str] = field(default_factory=list)


def format_bill_number(raw: Optional[str]) -> str:
    """LegiScan -> federal display form. Unknown shapes pass through untouched."""
    if not raw or not raw.strip():
        return "Unknown"
    trimmed = raw.strip()
    for pattern, _, federal in LEGISCAN_PATTERNS:
        m = pattern.match(trimmed)
        if m:
            return f"{federal} {m.group(1)}"
    return trimmed


def normalize_to_legiscan_format(value: Optional[str]) -> str:
    if not value:
        return ""
    trimmed = value.strip()
    for pattern, code, _ in FEDERAL_PATTERNS:
        m = pattern.match(trimmed)
        if m:
            return f"{code}{m.group(1)}"
    for pattern, code, _ in LEGISCAN_PATTERNS:
        m = pattern.match(trimmed)
        if m:
            return f"{code}{m.group(1)}"
    return trimmed


def generate_bill_number_search_terms(value: Optional[str]) -> List[str]:
    """Every spelling of `value` worth matching against bills.bill_number."""
    if not value or not value.strip():
        return []
    trimmed = value.strip()
    legiscan = normalize_to_legiscan_format(trimmed)
    upper = trimmed.upper()
    candidates = [
        trimmed,
        legiscan,
        format_bill_number(legiscan),
        upper,
        re.sub(r"\s+", "", upper),
        re.sub(r"\s+", " ", upper),
    ]
    terms: List[str] = []
    for term in candidates:
        if term and term not in terms:
            terms.append(term)
    return terms


def is_bill_number(value: Optional[str]) -> bool:
    if not value:
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    return any(p.match(trimmed) for p, _, _ in LEGISCAN_PATTERNS) or any(
        p.match(trimmed) for p, _, _ in FEDERAL_PATTERNS
    )


def validate_bill_number(value: Optional[str]) -> Optional[str]:
    if not is_bill_number(value):
        return None
    return normalize_to_legiscan_format(value)


def find_bill_numbers(text: Optional[str]) -> List[str]:
    """Bill-number tokens inside free text, in order of appearance."""
    if not text:
        return []
    return [m.group(0) for m in _TOKEN_RE.finditer(text)]


def analyze_search_term(term: Optional[str]) -> SearchAnalysis:
    if not term or not term.strip():
        return SearchAnalysis(search_type=SEARCH_TEXT)

    trimmed = term.strip()
    if is_bill_number(trimmed):
        return SearchAnalysis(
            search_type=SEARCH_BILL_NUMBER,
            search_terms=generate_bill_number_search_terms(trimmed),
            is_bill_number=True,
            bill_numbers=[normalize_to_legiscan_format(trimmed)],
        )

    tokens = find_bill_numbers(trimmed)
    if tokens:
        terms = [trimmed]
        numbers: List[str] = []
        for token in tokens:
            for t in generate_bill_number_search_terms(token):
                if t not in terms:
                    terms.append(t)
            legiscan = normalize_to_legiscan_format(token)
            if legiscan not in numbers:
                numbers.append(legiscan)
        return SearchAnalysis(search_type=SEARCH_MIXED, search_terms=terms, bill_numbers=numbers)

    return SearchAnalysis(search_type=SEARCH_TEXT, search_terms=[trimmed])
