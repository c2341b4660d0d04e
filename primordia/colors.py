from primordia.types import ColorRGBA


def from_hex(value: str, alpha: float = 1.0) -> ColorRGBA:
    """Convert a ``#rrggbb`` string to a float RGBA tuple."""
    digits = value.lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected #rrggbb color, got {value!r}")
    r, g, b = (int(digits[i : i + 2], 16) / 255.0 for i in (0, 2, 4))
    return (r, g, b, alpha)


# Basic colors
WHITE: ColorRGBA = (1.0, 1.0, 1.0, 1.0)

# Particle effects
DUST = from_hex("#000000", 0.8)
FUEL_MOLECULE = from_hex("#00ff00")
H2S_MOLECULE = from_hex("#ffff99")  # Pale yellow
VENT_SMOKE = from_hex("#cccccc", 0.4)  # Light grey, semi-transparent
