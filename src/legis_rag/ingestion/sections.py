"""Heuristic section analysis for bill text."""

from __future__ import annotations

import re

from legis_rag.ingestion.models import BillSections

_TITLE_RE = re.compile(r"^([A-Z\s,]+(?:BILL|ACT))", re.IGNORECASE)
_PREAMBLE_RE = re.compile(r"^(.*?)(?:SECTION\s+1|1\.\s)", re.IGNORECASE | re.DOTALL)
_PROVISION_RE = re.compile(
    r"Section\s+\d+.*?(?=Section\s+\d+|\n\n|$)",
    re.IGNORECASE | re.DOTALL,
)
_DEFINITIONS_RE = re.compile(r"Definitions?.*?(?=Section|\n\n)", re.IGNORECASE | re.DOTALL)


def extract_bill_sections(text: str) -> BillSections:
    """Pick out the title, preamble, numbered provisions and definitions of *text*.

    Works on cleaned text; every field is left empty when its pattern
    does not match.
    """
    sections = BillSections()

    if m := _TITLE_RE.match(text):
        sections.title = m.group(1).strip()

    if m := _PREAMBLE_RE.match(text):
        preamble = m.group(1)
        if sections.title:
            preamble = preamble.replace(sections.title, "", 1)
        sections.preamble = preamble.strip()

    sections.provisions = [p.strip() for p in _PROVISION_RE.findall(text) if p.strip()]

    if m := _DEFINITIONS_RE.search(text):
        sections.definitions = m.group(0).strip()

    return sections
