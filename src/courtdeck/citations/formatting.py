"""Case reference formatting in common citation styles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CitationStyle = Literal["bluebook", "oscola", "indian"]

_DEFAULT_COURT = "SC"


@dataclass(frozen=True)
class CaseReference:
    """The parts of a reported case needed to cite it."""

    case_name: str
    year: str = ""
    court: str = ""
    reporter: str = ""
    volume: str = ""
    page: str = ""


def format_citation(ref: CaseReference, style: CitationStyle = "indian") -> str:
    """Format a case reference.

    Returns an empty string when the style's required fields are missing.

    Examples:
        bluebook: ``Maneka Gandhi v. Union of India, AIR 1978 SC 597``
        oscola:   ``Maneka Gandhi v Union of India [1978] AIR 597 (SC)``
        indian:   ``Maneka Gandhi v. Union of India, (1978) 1 SCC 248``
    """

    name = ref.case_name.strip()
    year = ref.year.strip()
    reporter = ref.reporter.strip()
    page = ref.page.strip()
    court = ref.court.strip() or _DEFAULT_COURT

    if style == "bluebook":
        if not (name and reporter and year and page):
            return ""
        return f"{name}, {reporter} {year} {court} {page}"
    if style == "oscola":
        if not (name and year and reporter and page):
            return ""
        return f"{name} [{year}] {reporter} {page} ({court})"
    if style == "indian":
        volume = ref.volume.strip()
        if not (name and year and volume and reporter and page):
            return ""
        return f"{name}, ({year}) {volume} {reporter} {page}"
    raise ValueError(f"unknown citation style: {style!r}")
