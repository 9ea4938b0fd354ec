"""Helpers producing lines in the BURP location format."""

from __future__ import annotations

from .lines import CSI_BOLD_BLUE, TLine, TString


def location_line(location_path: str, line_col: str) -> TLine:
    """Make a BURP compliant location line."""
    return TLine(
        [
            TString(CSI_BOLD_BLUE, "   --> "),
            TString("", f"{location_path}:{line_col}"),
        ]
    )