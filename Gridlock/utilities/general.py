from Gridlock.config import Defaults


def manhattan(a: tuple[int, int], b: tuple[int, int]) -> int:
    """Manhattan (taxicab) distance between two grid cells."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def colors_match(color1: str, color2: str) -> bool:
    return color1.lower() == color2.lower()


def color_name(color: str) -> str:
    """Human readable palette name (for logs and reprs)."""
    return Defaults.COLOR_NAMES.get(color.lower(), "Unknown")
