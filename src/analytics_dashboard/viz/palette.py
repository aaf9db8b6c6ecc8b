from __future__ import annotations

PRIMARY = "#9167e4"
PRIMARY_LIGHT = "#b39ddb"
PRIMARY_DARK = "#5e35b1"
ACCENT = "#d1c4e9"
TEXT = "#a0a0a0"
GRID = "rgba(255,255,255,0.05)"
PRIMARY_FILL = "rgba(145, 103, 228, 0.1)"
REFERENCE_LINE = "rgba(255, 99, 132, 0.5)"

HIGH_CONTRAST: tuple[str, ...] = (
    "#9167e4",
    "#ef4444",
    "#f59e0b",
    "#10b981",
    "#3b82f6",
    "#ec4899",
    "#6366f1",
    "#8b5cf6",
)

# Word-cloud intensity bands, darkest first: (lower bound, color).
WORDCLOUD_BANDS: tuple[tuple[float, str], ...] = (
    (0.8, "#9167e4"),
    (0.6, "#b39ddb"),
    (0.4, "#d1c4e9"),
    (0.2, "#e0e0e0"),
)
WORDCLOUD_NEUTRAL = TEXT

HEATMAP_RGB = (145, 103, 228)
HEATMAP_EMPTY_CELL = "rgba(255,255,255,0.02)"
HEATMAP_EMPTY_OPACITY = 0.02

FONT_FAMILY = "'Inter', system-ui, sans-serif"


def cycle_color(index: int) -> str:
    return HIGH_CONTRAST[index % len(HIGH_CONTRAST)]


def band_color(intensity: float) -> str:
    for lower_bound, color in WORDCLOUD_BANDS:
        if intensity > lower_bound:
            return color
    return WORDCLOUD_NEUTRAL


def heatmap_rgba(opacity: float) -> str:
    red, green, blue = HEATMAP_RGB
    return f"rgba({red}, {green}, {blue}, {round(opacity, 4)})"
