"""Segmentation of a camera frame into pip candidates using OpenCV.

The clustering core only ever sees the candidate list. Anything that maps a
frame to candidates can be used instead of produce_candidates, which keeps the
core testable with synthetic candidates.
"""

import logging
from typing import Callable, List

import cv2
import numpy as np

import settings
from internal_data_classes import Candidate

logger = logging.getLogger(__name__)

# Maps a frame (BGR or grayscale image) to the candidates found in it
CandidateProducer = Callable[[np.ndarray], List[Candidate]]


def binarize_frame(frame: np.ndarray) -> np.ndarray:
    """Turn a frame into a binary image where pips are white.

    The process follows these steps:
    1. Grayscale conversion (skipped for single channel input)
    2. Gaussian blur against sensor noise
    3. Adaptive threshold, inverted so dark pips become foreground
    4. Morphological closing to fill small holes inside pips

    Args:
        frame (np.ndarray): BGR or grayscale image

    Returns:
        np.ndarray: Binary single channel image
    """
    # ===== STEP 1: GRAYSCALE =====
    if frame.ndim == 2:
        grayscale_frame = frame
    elif frame.shape[2] == 4:
        grayscale_frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    else:
        grayscale_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

    # ===== STEP 2: BLUR =====
    blurred_frame = cv2.GaussianBlur(grayscale_frame, settings.BLUR_KERNEL_SIZE, 0)

    # ===== STEP 3: ADAPTIVE THRESHOLD =====
    # Local thresholding copes with colored tiles and uneven lighting
    binary_frame = cv2.adaptiveThreshold(
        blurred_frame,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY_INV,
        settings.ADAPTIVE_BLOCK_SIZE,
        settings.ADAPTIVE_C,
    )

    # ===== STEP 4: MORPHOLOGICAL CLOSING =====
    kernel = np.ones(settings.MORPH_KERNEL_SIZE, np.uint8)
    return cv2.morphologyEx(binary_frame, cv2.MORPH_CLOSE, kernel)


def produce_candidates(frame: np.ndarray) -> List[Candidate]:
    """Find pip candidates in a frame.

    Args:
        frame (np.ndarray): BGR or grayscale image

    Returns:
        List[Candidate]: One candidate per external contour of the binary image
    """
    binary_frame = binarize_frame(frame)

    contours, _ = cv2.findContours(
        binary_frame, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
    )
    candidates = [Candidate.from_contour(contour) for contour in contours]

    if settings.DEBUG_DRAWINGS:
        cv2.imshow("Binary frame", binary_frame)

    logger.debug("Found %d contour candidates", len(candidates))
    return candidates
