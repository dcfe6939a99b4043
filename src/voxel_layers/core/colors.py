"""Color conversion helpers."""


def hex_to_rgba(hex_color: str, opacity: float = 1.0) -> tuple[int, int, int, int]:
    """Convert ``#RRGGBB`` plus an opacity in [0, 1] to an RGBA tuple."""
    h = hex_color.strip().lstrip("#")
    if len(h) != 6:
        raise ValueError(f"Invalid hex color '{hex_color}'. Must be #RRGGBB format.")
    try:
        r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        raise ValueError(f"Invalid hex color '{hex_color}'. Must be #RRGGBB format.") from None
    if not 0 <= opacity <= 1:
        raise ValueError(f"opacity must be within [0, 1], got {opacity}")
    return (r, g, b, round(opacity * 255))


def rgba_css(color: tuple[int, ...]) -> str:
    r, g, b = color[:3]
    a = color[3] if len(color) > 3 else 255
    return f"rgba({r},{g},{b},{a / 255:g})"


def color_key(color: tuple[int, ...]) -> str:
    return ",".join(str(c) for c in color)
