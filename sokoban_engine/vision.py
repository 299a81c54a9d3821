from __future__ import annotations

import base64
import io
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .defs import Cell
from .level import Level
from .level_state import LevelState

COLORS: dict[str, str] = {
    "floor": "#f4efe2",
    "wall": "#2f3542",
    "target": "#ffd166",
    "box": "#9c6644",
    "box_on_target": "#2a9d8f",
    "player": "#e63946",
    "player_on_target": "#5e60ce",
    "border": "#7a7468",
    "text": "#1f2937",
}


@dataclass(frozen=True, slots=True)
class StateImage:
    mime_type: str
    data_base64: str
    data_url: str
    width: int
    height: int

    @property
    def data(self) -> bytes:
        return base64.b64decode(self.data_base64)

    def save(self, path: str | Path) -> Path:
        path_obj = Path(path)
        path_obj.write_bytes(self.data)
        return path_obj


def _safe_inset(tile_size: int, desired: int) -> int:
    # Keep inner geometry non-inverted for small tiles.
    return min(max(desired, 0), max(0, (tile_size - 1) // 2))


def render_area_image(
    width: int,
    height: int,
    area: Sequence[Cell],
    *,
    tile_size: int = 48,
    label_grid: bool = True,
    background: str = "white",
) -> StateImage:
    """Render a grid of cells as a PNG image.

    Columns are labelled with x and rows with y when ``label_grid`` is set.
    """
    if tile_size < 8:
        raise ValueError("tile_size must be >= 8")
    if len(area) != width * height:
        raise ValueError("area size does not match width * height")

    try:
        from PIL import Image, ImageDraw, ImageFont
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError(
            "Missing pillow. Install with: pip install 'sokoban-engine[viz]'"
        ) from exc

    board_width = width * tile_size
    board_height = height * tile_size
    outer_pad = max(2, tile_size // 12)
    top_gutter = tile_size if label_grid else 0
    left_gutter = tile_size if label_grid else 0

    image_width = left_gutter + board_width + outer_pad * 2
    image_height = top_gutter + board_height + outer_pad * 2
    origin_x = left_gutter + outer_pad
    origin_y = top_gutter + outer_pad

    img = Image.new("RGB", (image_width, image_height), background)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    for index, cell in enumerate(area):
        col = index % width
        row = index // width
        x0 = origin_x + col * tile_size
        y0 = origin_y + row * tile_size
        x1 = x0 + tile_size - 1
        y1 = y0 + tile_size - 1

        if cell is Cell.WALL:
            draw.rectangle((x0, y0, x1, y1), fill=COLORS["wall"], outline="#1b1f28")
            continue
        draw.rectangle((x0, y0, x1, y1), fill=COLORS["floor"])

        if cell.is_target():
            inset = _safe_inset(tile_size, max(1, tile_size // 4))
            draw.ellipse(
                (x0 + inset, y0 + inset, x1 - inset, y1 - inset),
                fill=COLORS["target"],
                outline=COLORS["border"],
            )

        if cell.is_box():
            inset = _safe_inset(tile_size, max(2, tile_size // 8))
            box_color = (
                COLORS["box_on_target"] if cell.is_target() else COLORS["box"]
            )
            draw.rectangle(
                (x0 + inset, y0 + inset, x1 - inset, y1 - inset),
                fill=box_color,
                outline=COLORS["border"],
            )
            draw.line(
                (x0 + inset, y0 + inset, x1 - inset, y1 - inset),
                fill=COLORS["border"],
                width=1,
            )
            draw.line(
                (x0 + inset, y1 - inset, x1 - inset, y0 + inset),
                fill=COLORS["border"],
                width=1,
            )
        elif cell.is_player():
            inset = _safe_inset(tile_size, max(3, tile_size // 5))
            player_color = (
                COLORS["player_on_target"] if cell.is_target() else COLORS["player"]
            )
            draw.ellipse(
                (x0 + inset, y0 + inset, x1 - inset, y1 - inset),
                fill=player_color,
                outline=COLORS["border"],
            )

    draw.rectangle(
        (origin_x, origin_y, origin_x + board_width, origin_y + board_height),
        outline=COLORS["border"],
        width=1,
    )

    if label_grid:
        labels = [
            (str(col), origin_x + col * tile_size + tile_size // 2, None)
            for col in range(width)
        ] + [
            (str(row), None, origin_y + row * tile_size + tile_size // 2)
            for row in range(height)
        ]
        for label, center_x, center_y in labels:
            bbox = draw.textbbox((0, 0), label, font=font)
            label_w = bbox[2] - bbox[0]
            label_h = bbox[3] - bbox[1]
            if center_x is not None:
                position = (
                    center_x - label_w / 2,
                    max(0, origin_y - top_gutter + (top_gutter - label_h) / 2),
                )
            else:
                position = (
                    max(0, origin_x - left_gutter + (left_gutter - label_w) / 2),
                    center_y - label_h / 2,
                )
            draw.text(position, label, fill=COLORS["text"], font=font)

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    data_base64 = base64.b64encode(buffer.getvalue()).decode("ascii")
    return StateImage(
        mime_type="image/png",
        data_base64=data_base64,
        data_url=f"data:image/png;base64,{data_base64}",
        width=image_width,
        height=image_height,
    )


def render_level_image(level: Level, **kwargs: object) -> StateImage:
    return render_area_image(level.width, level.height, level.area, **kwargs)


def render_state_image(state: LevelState, **kwargs: object) -> StateImage:
    return render_area_image(
        state.level.width, state.level.height, state.area, **kwargs
    )
