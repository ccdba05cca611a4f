"""Tests for the OpenCV segmentation on synthetic images."""

import cv2
import numpy as np

from config import DetectionConfig
from domino_recognition import analyze_frame
from dot_segmentation import binarize_frame, produce_candidates
from internal_data_classes import Candidate

# Pips of two tiles: three in a diagonal and two side by side
PIP_CENTERS = [(100, 100), (120, 120), (140, 140), (400, 300), (424, 300)]
PIP_RADIUS = 6


def draw_pips(centers=PIP_CENTERS, size=(480, 640)):
    image = np.full(size + (3,), 255, np.uint8)
    for center in centers:
        cv2.circle(image, center, PIP_RADIUS, (0, 0, 0), -1)
    return image


def test_binarize_marks_pips_as_foreground():
    binary = binarize_frame(draw_pips())

    assert binary.dtype == np.uint8
    assert binary.shape == (480, 640)
    assert binary[100, 100] == 255
    assert binary[250, 250] == 0


def test_binarize_accepts_grayscale_input():
    gray = cv2.cvtColor(draw_pips(), cv2.COLOR_BGR2GRAY)

    assert binarize_frame(gray)[300, 400] == 255


def test_every_pip_becomes_a_candidate():
    candidates = produce_candidates(draw_pips())

    assert len(candidates) == len(PIP_CENTERS)
    assert all(isinstance(candidate, Candidate) for candidate in candidates)

    found = sorted((round(c.center[0]), round(c.center[1])) for c in candidates)
    for (found_x, found_y), (x, y) in zip(found, sorted(PIP_CENTERS)):
        assert abs(found_x - x) <= 1 and abs(found_y - y) <= 1


def test_candidate_from_contour_measures_the_shape():
    contour = np.array([[[0, 0]], [[10, 0]], [[10, 10]], [[0, 10]]], dtype=np.int32)

    candidate = Candidate.from_contour(contour)

    assert candidate.area == 100
    assert (candidate.width, candidate.height) == (11, 11)
    assert abs(candidate.center[0] - 5) < 0.01 and abs(candidate.center[1] - 5) < 0.01
    assert abs(candidate.enclosing_radius - np.sqrt(50)) < 0.1


def test_blank_frame_has_no_candidates():
    assert produce_candidates(np.full((120, 160, 3), 255, np.uint8)) == []


def test_drawn_dominoes_are_counted_per_tile():
    analysis = analyze_frame(draw_pips(), DetectionConfig(eps=30))

    assert analysis.result.total_dots == 5
    assert sorted(analysis.result.tile_counts) == [2, 3]
