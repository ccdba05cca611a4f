"""Settings for a real time domino pip counter.

This file contains settings that are used by the domino recognition system.
The settings are described below.
"""

# Flag for enabling debug drawings
DEBUG_DRAWINGS = False

# Flag to select the correct camera
IS_WINDOWS = True

# Camera selection with example values
# The index or device path may need to be adjusted based on the system
WINDOWS_CAMERA_INDEX = 0
LINUX_CAMERA_PATH = "/dev/video4"

# Requested capture resolution (HD), the camera may deliver something else
CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720

# Adaptive thresholding, copes with colored or patterned tiles and uneven light
ADAPTIVE_BLOCK_SIZE = 21  # Must be odd, 11..31 usually works
ADAPTIVE_C = 5
BLUR_KERNEL_SIZE = (5, 5)
MORPH_KERNEL_SIZE = (3, 3)  # Closing fills small holes inside pips

# Contour area range in pixels for something to count as a pip
MIN_AREA = 30
MAX_AREA = 5000

# Bounding rectangle width/height must lie strictly inside this range
MIN_ASPECT_RATIO = 0.5
MAX_ASPECT_RATIO = 2.0

# Clustering radius in pixels, None derives it from the frame size
EPS = None
AUTO_EPS_FRACTION = 0.065  # ~6.5% of the larger frame dimension
# Minimum points per cluster, 1 allows tiles with a single pip
MIN_PTS = 1

# Padding around the pips of a tile when drawing its box
TILE_PADDING = 10

# Label with the pip count, drawn above each tile box
LABEL_PADDING_X = 6
LABEL_PADDING_Y = 4
LABEL_HEIGHT = 28

# Interval between analyses in live mode
LIVE_INTERVAL_MS = 140
