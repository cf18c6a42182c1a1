"""Cheap keyword gate for pages that should be job postings."""

from __future__ import annotations

from portfolio_api.core.constants import JD_KEYWORDS, JobDescriptionFetch


def looks_like_job_description(
    text: str,
    min_keywords: int = JobDescriptionFetch.MIN_JD_KEYWORDS,
) -> bool:
    """Return True once at least min_keywords distinct posting terms appear in text."""
    lowered = text.lower()
    matches = 0
    for keyword in JD_KEYWORDS:
        if keyword in lowered:
            matches += 1
            if matches >= min_keywords:
                return True
    return False
