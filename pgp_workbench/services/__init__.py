"""
Key inspection, failure classification and secure session state.
"""

from pgp_workbench.services.error_classifier import ErrorClassifier
from pgp_workbench.services.key_inspector import KeyInspector
from pgp_workbench.services.session_state import SecureSession

__all__ = [
    "ErrorClassifier",
    "KeyInspector",
    "SecureSession",
]
