"""
app/workflows/handlers package marker.
"""

from app.workflows.handlers.api_handler import ApiWorkflowHandler
from app.workflows.handlers.email_relay_handler import EmailRelayWorkflowHandler
from app.workflows.handlers.form_relay_handler import FormRelayWorkflowHandler

__all__ = [
    "ApiWorkflowHandler",
    "EmailRelayWorkflowHandler",
    "FormRelayWorkflowHandler",
]
