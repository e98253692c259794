"""Генератор графика прогресса замеров."""
import io
from PIL import Image, ImageDraw, ImageFont
import logging

from src.services.entry_aggregator import MeasurementEntry, sort_kinds
from src.services.kinds import title_for, unit_for

logger = logging.getLogger(__name__)

# Цвета линий по порядку параметров
LINE_COLORS = [
    "#2196F3",
    "#d32f2f",
    "#388e3c",
    "#f57c00",
    "#7b1fa2",
    "#0097a7",
    "#5d4037",
    "#c2185b",
]


def _load_fonts():
    try:
        font_title = ImageFont.truetype("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 16)
        font_data = ImageFont.truetype("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", 12)
    except OSError:
        font_title = ImageFont.load_default()
        font_data = font_title
    return font_title, font_data


def generate_progress_chart(entries: list[MeasurementEntry], selected_kinds: list[str]) -> bytes | None:
    """
    Рисует линейный график выбранных параметров по датам записей.

    Returns:
        PNG в байтах или None, если рисовать нечего
    """
    kinds = [
        kind
        for kind in sort_kinds(set(selected_kinds))
        if any(kind in entry.values for entry in entries)
    ]
    if not entries or not kinds:
        return None

    try:
        width = 800
        height = 500
        padding_left = 60
        padding_right = 20
        padding_top = 50
        legend_height = 30 * ((len(kinds) + 3) // 4)
        padding_bottom = 50 + legend_height

        img = Image.new("RGB", (width, height + legend_height), color="white")
        draw = ImageDraw.Draw(img)
        font_title, font_data = _load_fonts()

        color_text = "#333333"
        color_grid = "#e0e0e0"
        color_border = "#2196F3"

        draw.text((padding_left, 15), "Прогресс замеров", font=font_title, fill=color_text)

        # Область графика
        x0, y0 = padding_left, padding_top
        x1, y1 = width - padding_right, height + legend_height - padding_bottom

        values = [entry.values[kind] for entry in entries for kind in kinds if kind in entry.values]
        v_min, v_max = min(values), max(values)
        if v_min == v_max:
            v_min, v_max = v_min - 1, v_max + 1
        v_pad = (v_max - v_min) * 0.1
        v_min, v_max = v_min - v_pad, v_max + v_pad

        def x_for(index: int) -> float:
            if len(entries) == 1:
                return (x0 + x1) / 2
            return x0 + (x1 - x0) * index / (len(entries) - 1)

        def y_for(value: float) -> float:
            return y1 - (y1 - y0) * (value - v_min) / (v_max - v_min)

        # Сетка и подписи по Y
        for step in range(5):
            value = v_min + (v_max - v_min) * step / 4
            y = y_for(value)
            draw.line([(x0, y), (x1, y)], fill=color_grid, width=1)
            draw.text((5, y - 7), f"{value:.1f}", font=font_data, fill=color_text)

        # Подписи дат (не больше ~8, чтобы не слипались)
        label_every = max(1, len(entries) // 8)
        for i, entry in enumerate(entries):
            if i % label_every == 0 or i == len(entries) - 1:
                draw.text(
                    (x_for(i) - 18, y1 + 8),
                    entry.recorded_at.strftime("%d.%m"),
                    font=font_data,
                    fill=color_text,
                )

        # Линии
        for kind_index, kind in enumerate(kinds):
            color = LINE_COLORS[kind_index % len(LINE_COLORS)]
            points = [
                (x_for(i), y_for(entry.values[kind]))
                for i, entry in enumerate(entries)
                if kind in entry.values
            ]
            if len(points) > 1:
                draw.line(points, fill=color, width=3)
            for x, y in points:
                draw.ellipse([(x - 4, y - 4), (x + 4, y + 4)], fill=color)

        # Легенда
        legend_y = y1 + 35
        for kind_index, kind in enumerate(kinds):
            color = LINE_COLORS[kind_index % len(LINE_COLORS)]
            col = kind_index % 4
            row = kind_index // 4
            lx = padding_left + col * 180
            ly = legend_y + row * 30
            draw.rectangle([(lx, ly + 3), (lx + 14, ly + 17)], fill=color)
            draw.text(
                (lx + 20, ly + 2), f"{title_for(kind)} ({unit_for(kind)})", font=font_data, fill=color_text
            )

        draw.rectangle([(x0, y0), (x1, y1)], outline=color_border, width=2)

        img_bytes = io.BytesIO()
        img.save(img_bytes, format="PNG")
        img_bytes.seek(0)

        return img_bytes.getvalue()

    except Exception as e:
        logger.error(f"Ошибка генерации графика: {e}")
        return None
