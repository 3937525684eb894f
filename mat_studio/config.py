"""
Configuration and Constants for Mat Studio

All physical sizes are stored in centimeters. Pixel values refer to
screen pixels at SCREEN_DPI unless stated otherwise.
"""

# ==========================================
# 📐 MAT DIMENSIONS (cm)
# ==========================================
DEFAULT_MAT_WIDTH_CM = 60.0   # ~24 inches
DEFAULT_MAT_HEIGHT_CM = 35.0  # ~14 inches
MIN_DIMENSION_CM = 0.1

# ==========================================
# 🖨️ DISPLAY & EXPORT
# ==========================================
CM_PER_INCH = 2.54
SCREEN_DPI = 96
DEFAULT_EXPORT_DPI = 150
AVAILABLE_DPI_OPTIONS = [150, 300, 600, 1200]
DEFAULT_EXPORT_NAME = "playmat-design"

# ==========================================
# 📏 GRID (cm)
# ==========================================
DEFAULT_GRID_ENABLED = True
DEFAULT_GRID_SIZE_CM = 1.0
DEFAULT_UNIT = "cm"  # display only: "inch" or "cm"

# ==========================================
# 🟦 ZONES
# ==========================================
DEFAULT_ZONE_WIDTH_CM = 6.3
DEFAULT_ZONE_HEIGHT_CM = 8.8  # roughly card-sized
DEFAULT_ZONE_POSITION = (100.0, 100.0)
MIN_ZONE_SIZE = 5  # px, applies after any transform
PASTE_OFFSET_PX = 20  # used when the grid is off

# ==========================================
# 🗂️ PROJECT
# ==========================================
DEFAULT_PROJECT_NAME = "Mi Playmat"
DOCUMENT_VERSION = "1.0"
STORAGE_PROJECT_KEY = "playmat-generator-project"
STORAGE_VERSION_KEY = "playmat-generator-version"

# ==========================================
# ⏪ HISTORY
# ==========================================
MAX_HISTORY = 50

# ==========================================
# 🔍 CANVAS VIEW
# ==========================================
CANVAS_PADDING = 40  # px around the mat when fitting the view
ZOOM_SCALE_BY = 1.1
MIN_ZOOM = 0.05
MAX_ZOOM = 8.0
