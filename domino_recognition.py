"""Real-time Domino Pip Counter using OpenCV.

This module ties the domino recognition pipeline together. A frame is segmented
into pip candidates, the candidates are filtered into pips, the pips are
clustered into tiles and every tile is summarized with its pip count and box.
Each frame is analyzed on its own; nothing is carried over between frames.

The camera application shows the live video with the detected pips and tiles
drawn on top. Analysis runs once per key press (snapshot) or repeatedly in live
mode, and the clustering radius and area range can be tuned with trackbars.

Dependencies:
    - OpenCV (cv2): For camera capture, segmentation and visualization
    - NumPy: For numerical operations and array handling
    - SciPy: For pairwise distances in the clustering step
"""

# External dependencies
import argparse
import logging
import sys
import threading
import time
from typing import Iterable, List, Optional, Tuple

import cv2
import numpy as np

# Internal dependencies
import settings
from config import ConfigurationError, DetectionConfig
from dot_segmentation import CandidateProducer, produce_candidates
from internal_data_classes import Candidate, FrameAnalysis, FrameGeometry
from observation_filter import filter_candidates
from overlay import overlay_info
from spatial_clustering import cluster_observations
from tile_aggregation import build_frame_result, format_frame_result, summarize_tiles

logger = logging.getLogger(__name__)

WINDOW_NAME = "Domino Recognition"

EPS_TRACKBAR = "eps + 1 (0 = auto)"
MIN_AREA_TRACKBAR = "min area"
MAX_AREA_TRACKBAR = "max area"

# Default trackbar ranges, extended when the configured value is larger
EPS_TRACKBAR_MAX = 300
MIN_AREA_TRACKBAR_MAX = 2000
MAX_AREA_TRACKBAR_MAX = 20000


def analyze_candidates(
    candidates: Iterable[Candidate],
    config: DetectionConfig,
    frame_size: Tuple[int, int],
    started_at: Optional[float] = None,
) -> FrameAnalysis:
    """Filter, cluster and summarize the candidates of one frame.

    The process follows these steps:
    1. Observation Filter: Keep candidates with a pip-like area and shape
    2. Spatial Clustering: Group nearby pips into tiles
    3. Tile Aggregation: Pip count and padded box per tile

    Args:
        candidates (Iterable[Candidate]): Candidates of the frame
        config (DetectionConfig): Snapshot of the tunables for this frame
        frame_size (Tuple[int, int]): (width, height) used to derive an auto eps
        started_at (float, optional): perf_counter value the timing starts from

    Returns:
        FrameAnalysis: Summary and geometry of the frame
    """
    if started_at is None:
        started_at = time.perf_counter()

    # ===== STEP 1: OBSERVATION FILTER =====
    observations = filter_candidates(candidates, config)

    # ===== STEP 2: SPATIAL CLUSTERING =====
    eps = config.resolve_eps(*frame_size)
    tiles = cluster_observations(observations, eps, config.min_pts)

    # ===== STEP 3: TILE AGGREGATION =====
    summaries = summarize_tiles(tiles)
    elapsed_ms = (time.perf_counter() - started_at) * 1000
    result = build_frame_result(observations, tiles, elapsed_ms)

    return FrameAnalysis(
        result=result,
        geometry=FrameGeometry(dots=observations, tiles=tiles, summaries=summaries),
    )


def analyze_frame(
    frame: np.ndarray,
    config: DetectionConfig,
    produce: CandidateProducer = produce_candidates,
) -> FrameAnalysis:
    """Analyze a single image frame.

    Args:
        frame (np.ndarray): BGR or grayscale image
        config (DetectionConfig): Snapshot of the tunables for this frame
        produce (CandidateProducer): Segmentation step returning candidates

    Returns:
        FrameAnalysis: Summary and geometry of the frame
    """
    started_at = time.perf_counter()
    frame_height, frame_width = frame.shape[:2]
    candidates = produce(frame)
    return analyze_candidates(candidates, config, (frame_width, frame_height), started_at)


class FrameAnalyzer:
    """Runs frame analyses, never more than one at a time.

    The segmentation reuses working buffers, so a trigger that arrives while an
    analysis is running is dropped instead of being run in parallel.
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        produce: CandidateProducer = produce_candidates,
    ):
        self.config = config if config is not None else DetectionConfig.from_settings()
        self.produce = produce
        self.dropped_triggers = 0
        self._lock = threading.Lock()

    def analyze(self, frame: np.ndarray) -> Optional[FrameAnalysis]:
        """Analyze a frame, or return None if an analysis is already running."""
        if not self._lock.acquire(blocking=False):
            self.dropped_triggers += 1
            logger.warning("Analysis already running, dropping trigger")
            return None
        try:
            config = self.config
            return analyze_frame(frame, config, self.produce)
        finally:
            self._lock.release()


class TrackbarTuner:
    """Tuning trackbars for eps, min area and max area in the main window.

    A trackbar only overrides the configured value once the user has moved it,
    so values given on the command line survive until they are tuned. The eps
    trackbar is offset by one: position 0 selects the automatic radius and
    position p an explicit eps of p - 1, so an explicit eps of 0 stays possible.
    """

    def __init__(self, config: DetectionConfig):
        self.initial_positions = {
            EPS_TRACKBAR: 0 if config.eps is None else int(round(config.eps)) + 1,
            MIN_AREA_TRACKBAR: int(round(config.min_area)),
            MAX_AREA_TRACKBAR: int(round(config.max_area)),
        }
        # Trackbars are at least as long as the default range and cover the config
        self.maximums = {
            EPS_TRACKBAR: max(EPS_TRACKBAR_MAX, self.initial_positions[EPS_TRACKBAR]),
            MIN_AREA_TRACKBAR: max(
                MIN_AREA_TRACKBAR_MAX, self.initial_positions[MIN_AREA_TRACKBAR]
            ),
            MAX_AREA_TRACKBAR: max(
                MAX_AREA_TRACKBAR_MAX, self.initial_positions[MAX_AREA_TRACKBAR]
            ),
        }
        self.moved = set()

    def _on_change(self, name: str):
        def on_change(position: int):
            if position != self.initial_positions[name]:
                self.moved.add(name)

        return on_change

    def create(self):
        cv2.namedWindow(WINDOW_NAME)
        for name, position in self.initial_positions.items():
            cv2.createTrackbar(
                name, WINDOW_NAME, position, self.maximums[name], self._on_change(name)
            )

    def apply(self, config: DetectionConfig) -> DetectionConfig:
        """Build a config snapshot with the values of the moved trackbars.

        Invalid combinations (e.g. min area above max area) keep the given config.
        """
        if not self.moved:
            return config

        changes = {}
        if EPS_TRACKBAR in self.moved:
            position = cv2.getTrackbarPos(EPS_TRACKBAR, WINDOW_NAME)
            changes["eps"] = None if position == 0 else position - 1
        if MIN_AREA_TRACKBAR in self.moved:
            changes["min_area"] = cv2.getTrackbarPos(MIN_AREA_TRACKBAR, WINDOW_NAME)
        if MAX_AREA_TRACKBAR in self.moved:
            changes["max_area"] = cv2.getTrackbarPos(MAX_AREA_TRACKBAR, WINDOW_NAME)

        try:
            return config.with_changes(**changes)
        except ConfigurationError as error:
            logger.debug("Ignoring trackbar values: %s", error)
            return config


def open_camera() -> cv2.VideoCapture:
    if settings.IS_WINDOWS:
        video_capture = cv2.VideoCapture(settings.WINDOWS_CAMERA_INDEX)
    else:
        video_capture = cv2.VideoCapture(settings.LINUX_CAMERA_PATH)
    video_capture.set(cv2.CAP_PROP_FRAME_WIDTH, settings.CAMERA_WIDTH)
    video_capture.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.CAMERA_HEIGHT)
    return video_capture


def run_camera(analyzer: FrameAnalyzer, live: bool = False) -> int:
    """Run the camera application until the user presses 'q'.

    Keys: 's' analyzes the current frame once, 'l' toggles live mode, in which
    a frame is analyzed every LIVE_INTERVAL_MS, and 'q' quits.

    Args:
        analyzer (FrameAnalyzer): Analyzer whose config follows the trackbars
        live (bool): Start in live mode

    Returns:
        int: Process exit status
    """
    # ===== STEP 1: INITIALIZATION =====
    video_capture = open_camera()
    if not video_capture.isOpened():
        logger.error("Could not open camera")
        return 1

    tuner = TrackbarTuner(analyzer.config)
    tuner.create()
    logger.info("Camera started, press 's' to analyze, 'l' for live mode, 'q' to quit")

    last_geometry = FrameGeometry()
    last_analysis_time = 0.0
    exit_status = 0

    # ===== STEP 2: FRAME PROCESSING LOOP =====
    while True:
        frame_captured, current_frame = video_capture.read()
        if not frame_captured:
            logger.error("Failed to grab frame from camera")
            exit_status = 1
            break

        key_pressed = cv2.waitKey(1) & 0xFF
        if key_pressed == ord("q"):
            break
        if key_pressed == ord("l"):
            live = not live
            logger.info("Live mode %s", "on" if live else "off")

        now = time.monotonic()
        live_due = live and (now - last_analysis_time) * 1000 >= settings.LIVE_INTERVAL_MS
        if key_pressed == ord("s") or live_due:
            analyzer.config = tuner.apply(analyzer.config)
            analysis = analyzer.analyze(current_frame)
            if analysis is not None:
                last_geometry = analysis.geometry
                last_analysis_time = now
                print(format_frame_result(analysis.result))

        overlay_info(current_frame, last_geometry)
        cv2.imshow(WINDOW_NAME, current_frame)

    # ===== STEP 3: CLEANUP =====
    video_capture.release()
    cv2.destroyAllWindows()
    return exit_status


def analyze_image(
    image_path: str, config: DetectionConfig, output_path: Optional[str] = None
) -> int:
    """Analyze a still image, print the result and optionally save the overlay."""
    image = cv2.imread(image_path)
    if image is None:
        logger.error("Could not load image '%s'", image_path)
        return 1

    analysis = analyze_frame(image, config)
    print(format_frame_result(analysis.result))

    if output_path is not None:
        overlay_info(image, analysis.geometry)
        cv2.imwrite(output_path, image)
        logger.info("Saved overlay to %s", output_path)
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Count domino pips per tile in a camera feed or an image"
    )
    parser.add_argument("--image", help="Analyze this image instead of the camera feed")
    parser.add_argument("--output", help="Write the image with overlay here (with --image)")
    parser.add_argument(
        "--eps", type=float, default=settings.EPS,
        help="Clustering radius in pixels (default: derived from the frame size)",
    )
    parser.add_argument("--min-area", type=float, default=settings.MIN_AREA)
    parser.add_argument("--max-area", type=float, default=settings.MAX_AREA)
    parser.add_argument("--min-pts", type=int, default=settings.MIN_PTS)
    parser.add_argument("--live", action="store_true", help="Start the camera in live mode")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        config = DetectionConfig(
            min_area=args.min_area,
            max_area=args.max_area,
            eps=args.eps,
            min_pts=args.min_pts,
        )
    except ConfigurationError as error:
        logger.error("Invalid configuration: %s", error)
        return 2

    if args.image:
        return analyze_image(args.image, config, args.output)
    return run_camera(FrameAnalyzer(config), live=args.live)


if __name__ == "__main__":
    sys.exit(main())
