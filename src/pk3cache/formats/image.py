"""Legacy texture conversion: TGA in, PNG out (Pillow)."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from ..errors import format_error

__all__ = ["tga_to_png"]

# Modes PNG stores losslessly as-is; anything else is expanded to RGBA.
_PNG_MODES = {"1", "L", "LA", "RGB", "RGBA", "I", "I;16"}


def tga_to_png(data: bytes) -> bytes:
    try:
        with Image.open(io.BytesIO(data), formats=["TGA"]) as img:
            img.load()
            if img.mode not in _PNG_MODES:
                img = img.convert("RGBA")
            out = io.BytesIO()
            img.save(out, format="PNG")
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        raise format_error(f"Cannot convert TGA image: {e}") from e
    return out.getvalue()
