"""Colors, themes and edge styling for content graphs."""

from pydantic import BaseModel, ConfigDict, Field

from engagerr.models import ChartTheme, PlatformType, RelationshipType

DEFAULT_NODE_COLOR = "#888888"

PLATFORM_COLORS: dict[PlatformType, str] = {
    PlatformType.YOUTUBE: "#FF0000",
    PlatformType.INSTAGRAM: "#E1306C",
    PlatformType.TIKTOK: "#000000",
    PlatformType.TWITTER: "#1DA1F2",
    PlatformType.LINKEDIN: "#0A66C2",
    PlatformType.PODCAST: "#8940FA",
    PlatformType.BLOG: "#F97316",
}

# Luminance at or above this gets dark label text
CONTRAST_THRESHOLD = 186

EDGE_ALPHA = 0.5
ARROW_SIZE = 8.0

# relationship type -> (stroke width, dash pattern)
EDGE_STYLES: dict[RelationshipType, tuple[float, str | None]] = {
    RelationshipType.PARENT: (3.0, None),
    RelationshipType.CHILD: (2.0, "3,3"),
    RelationshipType.DERIVATIVE: (2.0, "5,5"),
    RelationshipType.REPURPOSED: (2.0, "7,7"),
    RelationshipType.REACTION: (1.0, "9,9"),
    RelationshipType.REFERENCE: (1.0, "11,11"),
}
DEFAULT_EDGE_STYLE: tuple[float, str | None] = (1.0, None)


class Theme(BaseModel):
    """Resolved color scheme for one chart theme."""

    model_config = ConfigDict(frozen=True)

    name: ChartTheme
    background: str
    emphasis: str
    platform_colors: dict[PlatformType, str] = Field(default_factory=dict)
    # Depth-indexed fill colors; when set they override platform colors
    depth_scale: tuple[str, ...] = ()

    def fill_for(self, platform: PlatformType, depth: int) -> str:
        if self.depth_scale:
            return self.depth_scale[min(depth, len(self.depth_scale) - 1)]
        return self.platform_colors.get(platform, DEFAULT_NODE_COLOR)


THEMES: dict[ChartTheme, Theme] = {
    ChartTheme.LIGHT: Theme(
        name=ChartTheme.LIGHT,
        background="#FFFFFF",
        emphasis="#000000",
        platform_colors=PLATFORM_COLORS,
    ),
    ChartTheme.DARK: Theme(
        name=ChartTheme.DARK,
        background="#111827",
        emphasis="#FFFFFF",
        platform_colors={**PLATFORM_COLORS, PlatformType.TIKTOK: "#25F4EE"},
    ),
    ChartTheme.BRANDED: Theme(
        name=ChartTheme.BRANDED,
        background="#FFFFFF",
        emphasis="#1E3A8A",
        depth_scale=("#2563EB", "#3B82F6", "#60A5FA", "#93C5FD", "#BFDBFE"),
    ),
    ChartTheme.PLATFORM_SPECIFIC: Theme(
        name=ChartTheme.PLATFORM_SPECIFIC,
        background="#FFFFFF",
        emphasis="#000000",
        platform_colors=PLATFORM_COLORS,
    ),
}


def get_theme(theme: ChartTheme, overrides: dict[PlatformType, str] | None = None) -> Theme:
    """Resolve a theme, applying per-platform color overrides."""
    base = THEMES[theme]
    if not overrides:
        return base
    return Theme(
        name=base.name,
        background=base.background,
        emphasis=base.emphasis,
        platform_colors={**base.platform_colors, **overrides},
        depth_scale=base.depth_scale,
    )


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """
    Parse ``#RRGGBB`` (or ``#RGB``) into an RGB triple.

    Raises:
        ValueError: If the string is not a hex color
    """
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def luminance(color: str) -> float:
    r, g, b = hex_to_rgb(color)
    return 0.299 * r + 0.587 * g + 0.114 * b


def contrast_color(background: str) -> str:
    """White text on dark fills, black text on light ones."""
    return "#FFFFFF" if luminance(background) < CONTRAST_THRESHOLD else "#000000"


def with_alpha(color: str, alpha: float) -> str:
    r, g, b = hex_to_rgb(color)
    return f"rgba({r}, {g}, {b}, {alpha})"


def edge_style(relationship_type: RelationshipType) -> tuple[float, str | None]:
    return EDGE_STYLES.get(relationship_type, DEFAULT_EDGE_STYLE)
