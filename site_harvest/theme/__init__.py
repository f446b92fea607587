"""Brand theme extraction: colours, typography, layout and branding."""

from site_harvest.theme.extractor import ColorCandidate, ThemeExtractor, assign_colors

__all__ = ["ColorCandidate", "ThemeExtractor", "assign_colors"]
