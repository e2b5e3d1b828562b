"""
Embedded asset loader for the Skyline 3D generator.

Loads the caption fonts and the emblem bitmap bundled in the package's
assets/ directory. Assets are read-only and each producer loads its own
copy, so no coordination between threads is needed.

Any failure is reported as AssetUnavailable; callers decide whether to
degrade (the caption and emblem producers do).
"""

from pathlib import Path
from typing import Optional, Sequence, Union
import logging

from PIL import Image, ImageFont, UnidentifiedImageError

from ..config import PRIMARY_FONT, FALLBACK_FONT, EMBLEM_IMAGE
from ..errors import AssetUnavailable

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"
FONTS_DIR = ASSETS_DIR / "fonts"

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def asset_path(name: str, base_dir: Optional[Path] = None) -> Path:
    """
    Resolve an asset file name inside the assets directory.

    Args:
        name: File name (e.g. "emblem.pgm")
        base_dir: Override for the assets directory

    Returns:
        Absolute path (not checked for existence)
    """
    return Path(base_dir or ASSETS_DIR) / name


def load_font(
    size: float,
    names: Sequence[str] = (PRIMARY_FONT, FALLBACK_FONT),
    fonts_dir: Optional[Path] = None,
    allow_builtin: bool = True,
) -> FontType:
    """
    Load the caption font at the given size.

    Tries each bundled font file in order (primary, then fallback). If
    none can be loaded and allow_builtin is set, falls back to the
    scalable default font that ships with Pillow.

    Args:
        size: Font size in points
        names: Font file names to try, in order
        fonts_dir: Override for the fonts directory
        allow_builtin: Use Pillow's default font as a last resort

    Returns:
        Font usable with ImageDraw

    Raises:
        AssetUnavailable: If no font could be loaded
    """
    fonts_dir = Path(fonts_dir or FONTS_DIR)
    failures = []

    for name in names:
        path = fonts_dir / name
        if not path.is_file():
            failures.append(f"{name}: not found")
            continue
        try:
            font = ImageFont.truetype(str(path), size=int(round(size)))
            logger.debug(f"Loaded font {path} at {size}pt")
            return font
        except OSError as e:
            failures.append(f"{name}: {e}")
            logger.warning(f"Font {path} could not be loaded: {e}")

    if allow_builtin:
        logger.debug(
            f"Bundled fonts unavailable ({'; '.join(failures)}), "
            f"using Pillow default font"
        )
        try:
            return ImageFont.load_default(size=size)
        except (OSError, ValueError) as e:
            failures.append(f"builtin: {e}")

    raise AssetUnavailable(f"failed to load any font ({'; '.join(failures)})")


def load_emblem(path: Optional[Union[str, Path]] = None) -> Image.Image:
    """
    Load the emblem bitmap.

    Args:
        path: Image file to load (defaults to the bundled emblem)

    Returns:
        RGBA image

    Raises:
        AssetUnavailable: If the file is missing or cannot be decoded
    """
    path = Path(path) if path is not None else asset_path(EMBLEM_IMAGE)

    if not path.is_file():
        raise AssetUnavailable(f"emblem image not found: {path}")

    try:
        with Image.open(path) as img:
            img.load()
            emblem = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise AssetUnavailable(f"failed to decode emblem image {path}: {e}") from e

    logger.debug(f"Loaded emblem {path} ({emblem.width}x{emblem.height})")
    return emblem
