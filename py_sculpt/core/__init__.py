"""
Core sculpting functionality.
"""

from .height_field import HeightField
from .brush_stamp import MaskLibrary, radial_falloff, mask_falloff, sample_bilinear
from .scheduler import Delay, Scheduler
from .mountain_lifecycle import MountainLifecycle, MountainOptions, Mountain, MountainState
from .stroke_mountains import StrokeMountainBuilder, StrokeMountainOptions
from .autonomous_walker import AutonomousWalker, WalkerOptions, WalkerPolicy
from .path_carver import PathCarver, PathOptions
from .field_analysis import FieldStats, analyze_field
from .engine import SculptEngine, EngineOptions

__all__ = ['HeightField', 'MaskLibrary', 'radial_falloff', 'mask_falloff', 'sample_bilinear',
           'Delay', 'Scheduler', 'MountainLifecycle', 'MountainOptions', 'Mountain', 'MountainState',
           'StrokeMountainBuilder', 'StrokeMountainOptions',
           'AutonomousWalker', 'WalkerOptions', 'WalkerPolicy', 'PathCarver', 'PathOptions',
           'FieldStats', 'analyze_field', 'SculptEngine', 'EngineOptions']
