"""Overlay drawing for analyzed frames.

Draws a ring around every detected pip and a box with the pip count around
every tile. Only the geometry facet of an analysis is used here.
"""

import cv2
import numpy as np

from internal_data_classes import FrameGeometry
from tile_aggregation import label_box

# Colors are BGR
DOT_COLOR = (100, 255, 0)  # Green ring around each pip
TILE_COLOR = (100, 255, 0)  # Green box around each tile
LABEL_BACKGROUND_COLOR = (0, 0, 0)
LABEL_TEXT_COLOR = (123, 255, 0)

DOT_FILL_OPACITY = 0.18
LABEL_BACKGROUND_OPACITY = 0.6

LABEL_FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_FONT_SCALE = 0.8
LABEL_THICKNESS = 2


def _blend(frame: np.ndarray, layer: np.ndarray, opacity: float):
    """Blend a drawing layer onto the frame in place."""
    cv2.addWeighted(layer, opacity, frame, 1 - opacity, 0, dst=frame)


def overlay_info(frame: np.ndarray, geometry: FrameGeometry):
    """Overlay detected pips and tiles on the frame.

    The visualization process follows these steps:
    1. Dot Visualization: Translucent filled circle plus ring per pip
    2. Tile Boundary Visualization: Padded box around each tile
    3. Value Display: Pip count label on top of each box

    Args:
        frame (np.ndarray): BGR image frame to draw on
        geometry (FrameGeometry): Geometry facet of the frame analysis

    Returns:
        None: The frame is modified in-place
    """
    frame_width = frame.shape[1]

    # ===== STEP 1: DOT VISUALIZATION =====
    if geometry.dots:
        fill_layer = frame.copy()
        for dot in geometry.dots:
            cv2.circle(
                fill_layer, (int(dot.x), int(dot.y)), int(round(dot.r)), DOT_COLOR, -1
            )
        _blend(frame, fill_layer, DOT_FILL_OPACITY)

    for dot in geometry.dots:
        cv2.circle(frame, (int(dot.x), int(dot.y)), int(round(dot.r)), DOT_COLOR, 2)

    # ===== STEP 2: TILE BOUNDARY VISUALIZATION =====
    labels = []
    for summary in geometry.summaries:
        box = summary.bounding_box
        cv2.rectangle(
            frame,
            (int(box.min_x), int(box.min_y)),
            (int(box.max_x), int(box.max_y)),
            TILE_COLOR,
            3,
        )

        text = str(summary.pip_count)
        (text_width, text_height), _ = cv2.getTextSize(
            text, LABEL_FONT, LABEL_FONT_SCALE, LABEL_THICKNESS
        )
        label = label_box(box, text_width, text_height, frame_width)
        labels.append((text, text_width, text_height, label))

    if not labels:
        return

    # ===== STEP 3: VALUE DISPLAY =====
    background_layer = frame.copy()
    for _, _, _, label in labels:
        cv2.rectangle(
            background_layer,
            (int(label.x), int(label.y)),
            (int(label.x + label.width), int(label.y + label.height)),
            LABEL_BACKGROUND_COLOR,
            -1,
        )
    _blend(frame, background_layer, LABEL_BACKGROUND_OPACITY)

    for text, text_width, text_height, label in labels:
        # Center the text inside its background
        text_x = label.x + (label.width - text_width) / 2
        baseline_y = label.y + (label.height + text_height) / 2
        cv2.putText(
            frame,
            text,
            (int(text_x), int(baseline_y)),
            LABEL_FONT,
            LABEL_FONT_SCALE,
            LABEL_TEXT_COLOR,
            LABEL_THICKNESS,
        )
