"""Drawing engine: coordinate resolution, content snapping, plan interpretation."""

from app.engine.coordinates import CoordinateResolver, normalize_length, resolve_coordinate
from app.engine.interpreter import DrawingInterpreter, ExecutionResult
from app.engine.plan_parser import parse_drawing_plan
from app.engine.sampler import compute_weighted_content_center
from app.engine.snap import SnapResult, snap_point_to_existing_content

__all__ = [
    "CoordinateResolver",
    "normalize_length",
    "resolve_coordinate",
    "DrawingInterpreter",
    "ExecutionResult",
    "parse_drawing_plan",
    "compute_weighted_content_center",
    "SnapResult",
    "snap_point_to_existing_content",
]
