"""
Core package for Mat Studio

Contains the project state engine (no widgets):
- units / grid: coordinate conversion and grid snapping
- Zone / ProjectState: the immutable design model and its operations
- SelectionManager, HistoryManager, GestureTracker
- EditorSession: the single commit path tying them together

"""

from .zone import Zone
from .state import ProjectState, MatSize, BackgroundTransform, BackgroundSource
from .selection import SelectionManager, BACKGROUND_ID
from .history import HistoryManager
from .gesture import GestureTracker
from .session import EditorSession

__all__ = [
    'Zone', 'ProjectState', 'MatSize', 'BackgroundTransform', 'BackgroundSource',
    'SelectionManager', 'BACKGROUND_ID', 'HistoryManager', 'GestureTracker', 'EditorSession',
]
