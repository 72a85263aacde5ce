"""Admission filters"""

from .new_pair import NewPairFilter

__all__ = ["NewPairFilter"]
