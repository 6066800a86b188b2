"""
app/workflows package marker.
"""

from app.workflows.base import SubmissionError, WorkflowHandler
from app.workflows.factory import HandlerRegistry, get_handler_registry
from app.workflows.field_mapper import map_fields

__all__ = [
    "HandlerRegistry",
    "SubmissionError",
    "WorkflowHandler",
    "get_handler_registry",
    "map_fields",
]
