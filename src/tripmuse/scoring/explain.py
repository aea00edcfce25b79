"""
Small explainability formatting helpers.

Used by the CLI to print compact summaries of venue scores.
"""

from __future__ import annotations

from tripmuse.domain.models import ScoredVenue


def one_line_summary(scored: ScoredVenue) -> str:
    """Render a compact single-line summary for a scored venue."""
    parts = [f"total={scored.score:.3f}"]
    for comp in scored.components:
        parts.append(f"{comp.name}={comp.score:.3f} (w={comp.weight:.2f})")
    return " | ".join(parts)


def top_reason(scored: ScoredVenue) -> str:
    """The headline reason, or a generic label when nothing stood out."""
    if scored.reasons:
        return scored.reasons[0]
    return f"Popular {scored.venue.category.lower()}"
