"""Admission filter protocol"""

from .protocol import AdmissionFilter

__all__ = ["AdmissionFilter"]
