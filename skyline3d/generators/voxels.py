"""
Voxel rasterization for the Skyline 3D generator.

Extrudes 2D bitmaps into 3D: every active pixel of a rendered caption or
of the emblem image becomes a small box ("voxel") embedded in the front
face of the base slab.

Two producers use this module:
- caption text: the subject identifier and the year label, each drawn
  with Pillow into an off-screen grayscale canvas
- emblem: a fixed bitmap bundled with the package, scaled to a target
  physical height

Both share voxelize_pixels() and differ only in placement.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple
import logging

from PIL import Image, ImageDraw

from ..config import (
    BASE_HEIGHT,
    DEFAULT_USERNAME,
    EMBLEM_HEIGHT,
    EMBLEM_VOXEL_SCALE,
    EMBLEM_X_FRACTION,
    EMBLEM_Z_FRACTION,
    FRONT_EMBED_DEPTH,
    PIXEL_THRESHOLD,
    TEXT_DEPTH_OFFSET,
    TEXT_SUPERSAMPLE,
    TEXT_VOXEL_SIZE,
    USERNAME_CANVAS_HEIGHT,
    USERNAME_CANVAS_WIDTH,
    USERNAME_FONT_SIZE,
    USERNAME_X_FRACTION,
    USERNAME_Z_FRACTION,
    YEAR_CANVAS_HEIGHT,
    YEAR_CANVAS_WIDTH,
    YEAR_FONT_SIZE,
    YEAR_VOXEL_SIZE,
    YEAR_X_FRACTION,
    YEAR_Z_FRACTION,
)
from ..models.geometry import Point3D
from ..models.mesh import Mesh
from ..io.assets import FontType, load_emblem, load_font
from .primitives import make_box

logger = logging.getLogger(__name__)

# (column, level) pairs. Level is the vertical pixel offset, positive up.
PixelList = List[Tuple[int, int]]


@dataclass
class RenderConfig:
    """Placement shared by every rasterized element."""
    start_x: float
    start_y: float
    start_z: float
    voxel_size: float
    depth: float


@dataclass
class TextRenderConfig(RenderConfig):
    """
    Caption rendering parameters.

    Attributes:
        text: String to draw
        canvas_width, canvas_height: Off-screen canvas size in pixels
        font_size: Font size in points
    """
    text: str = ""
    canvas_width: int = USERNAME_CANVAS_WIDTH
    canvas_height: int = USERNAME_CANVAS_HEIGHT
    font_size: float = USERNAME_FONT_SIZE

    @property
    def pixel_pitch(self) -> float:
        """Distance between neighbouring pixel voxels."""
        return self.voxel_size / TEXT_SUPERSAMPLE


def is_pixel_active(value: int, threshold: int = PIXEL_THRESHOLD) -> bool:
    """Check if an 8-bit channel value is above half intensity."""
    return value > threshold


def iter_active_pixels(image: Image.Image) -> Iterator[Tuple[int, int]]:
    """
    Yield (x, y) image coordinates of active pixels, row by row.

    Grayscale images test the luminance channel. RGBA images require both
    red and alpha above threshold, so transparent areas stay empty.
    """
    width, height = image.size

    if image.mode == "L":
        data = image.tobytes()
        for y in range(height):
            row = y * width
            for x in range(width):
                if is_pixel_active(data[row + x]):
                    yield x, y
        return

    data = image.convert("RGBA").tobytes()
    for y in range(height):
        row = y * width * 4
        for x in range(width):
            offset = row + x * 4
            if is_pixel_active(data[offset]) and is_pixel_active(data[offset + 3]):
                yield x, y


def voxelize_pixels(
    pixels: PixelList,
    config: RenderConfig,
    pitch: float,
    name: Optional[str] = None,
) -> Mesh:
    """
    Emit one box per active pixel.

    Each voxel sits at (start_x + column * pitch, start_y,
    start_z + level * pitch) and measures voxel_size x depth x voxel_size.

    Args:
        pixels: (column, level) pairs
        config: Placement and voxel size
        pitch: Model distance between neighbouring pixels
        name: Label for the returned mesh

    Returns:
        Mesh with 12 triangles per pixel
    """
    mesh = Mesh(name=name)

    for column, level in pixels:
        origin = Point3D(
            config.start_x + column * pitch,
            config.start_y,
            config.start_z + level * pitch,
        )
        mesh.extend(make_box(origin, config.voxel_size, config.depth, config.voxel_size))

    return mesh


# =============================================================================
# CAPTION TEXT
# =============================================================================

def format_year_label(start_year: int, end_year: int) -> str:
    """
    Caption label for a year range.

    Returns:
        "2024" for a single year, "2014-24" for a range
    """
    if start_year == end_year:
        return f"{end_year}"
    return f"{start_year:04d}-{end_year % 100:02d}"


def render_text_bitmap(text: str, width: int, height: int, font: FontType) -> Image.Image:
    """
    Draw white text on a black grayscale canvas.

    The text starts one eighth of the way in from the left edge and is
    centered vertically.

    Returns:
        Mode "L" image of the given size
    """
    canvas = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(canvas)

    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = width / 8 - left
    y = height / 2 - (top + bottom) / 2

    draw.text((x, y), text, font=font, fill=255)
    return canvas


def render_text(config: TextRenderConfig, font_loader: Callable[[float], FontType] = load_font) -> Mesh:
    """
    Rasterize a caption and extrude it into voxels.

    Canvas rows grow downward, so row r is placed r * pitch below start_z.

    Args:
        config: Caption parameters
        font_loader: Callable returning a font for a point size

    Returns:
        Caption mesh

    Raises:
        AssetUnavailable: If no font could be loaded
    """
    font = font_loader(config.font_size)
    bitmap = render_text_bitmap(config.text, config.canvas_width, config.canvas_height, font)

    pixels = [(x, -y) for x, y in iter_active_pixels(bitmap)]
    return voxelize_pixels(pixels, config, config.pixel_pitch, name="text")


def create_3d_text(
    username: str,
    year_label: str,
    inner_width: float,
    base_height: float = BASE_HEIGHT,
    font_loader: Callable[[float], FontType] = load_font,
    log: Optional[logging.Logger] = None,
) -> Mesh:
    """
    Generate the embossed caption: subject on the left, years on the right.

    Args:
        username: Subject identifier ("anonymous" if empty)
        year_label: Output of format_year_label()
        inner_width: Model width along X
        base_height: Base slab height
        font_loader: Callable returning a font for a point size
        log: Logger for diagnostics

    Returns:
        Mesh with both captions

    Raises:
        AssetUnavailable: If no font could be loaded
    """
    log = log or logger
    if not username:
        username = DEFAULT_USERNAME

    username_config = TextRenderConfig(
        start_x=inner_width * USERNAME_X_FRACTION,
        start_y=-TEXT_DEPTH_OFFSET / 2,
        start_z=base_height * USERNAME_Z_FRACTION,
        voxel_size=TEXT_VOXEL_SIZE,
        depth=FRONT_EMBED_DEPTH,
        text=username,
        canvas_width=USERNAME_CANVAS_WIDTH,
        canvas_height=USERNAME_CANVAS_HEIGHT,
        font_size=USERNAME_FONT_SIZE,
    )

    year_config = TextRenderConfig(
        start_x=inner_width * YEAR_X_FRACTION,
        start_y=-TEXT_DEPTH_OFFSET / 2,
        start_z=base_height * YEAR_Z_FRACTION,
        voxel_size=YEAR_VOXEL_SIZE,
        depth=FRONT_EMBED_DEPTH,
        text=year_label,
        canvas_width=YEAR_CANVAS_WIDTH,
        canvas_height=YEAR_CANVAS_HEIGHT,
        font_size=YEAR_FONT_SIZE,
    )

    mesh = Mesh(name="text")
    mesh.merge(render_text(username_config, font_loader))
    mesh.merge(render_text(year_config, font_loader))

    log.debug(f"Caption '{username}' / '{year_label}': {mesh.triangle_count()} triangles")
    return mesh


# =============================================================================
# EMBLEM
# =============================================================================

def render_image(image: Image.Image, config: RenderConfig, target_height: float) -> Mesh:
    """
    Extrude an image into voxels scaled to a physical height.

    Image rows are flipped so the bottom row sits at start_z.

    Args:
        image: Source bitmap (any mode)
        config: Placement; voxel_size is the scale before fitting
        target_height: Physical height the image should span

    Returns:
        Emblem mesh
    """
    height = image.height
    scale = target_height / height
    voxel = config.voxel_size * scale

    scaled = RenderConfig(
        start_x=config.start_x,
        start_y=config.start_y,
        start_z=config.start_z,
        voxel_size=voxel,
        depth=config.depth,
    )

    pixels = sorted(
        ((x, height - 1 - y) for x, y in iter_active_pixels(image)),
        key=lambda p: (p[1], p[0]),
    )
    return voxelize_pixels(pixels, scaled, voxel, name="emblem")


def generate_image_geometry(
    inner_width: float,
    base_height: float = BASE_HEIGHT,
    image_path: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> Mesh:
    """
    Generate the emblem at the left of the base's front face.

    Args:
        inner_width: Model width along X
        base_height: Base slab height
        image_path: Emblem file (defaults to the bundled asset)
        log: Logger for diagnostics

    Returns:
        Emblem mesh

    Raises:
        AssetUnavailable: If the emblem cannot be loaded
    """
    log = log or logger
    image = load_emblem(image_path)

    config = RenderConfig(
        start_x=inner_width * EMBLEM_X_FRACTION,
        start_y=-FRONT_EMBED_DEPTH / 2.0,
        start_z=EMBLEM_Z_FRACTION * base_height,
        voxel_size=EMBLEM_VOXEL_SCALE,
        depth=FRONT_EMBED_DEPTH,
    )

    mesh = render_image(image, config, EMBLEM_HEIGHT)
    log.debug(f"Emblem {image.width}x{image.height}: {mesh.triangle_count()} triangles")
    return mesh
