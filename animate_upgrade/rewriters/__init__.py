"""Text rewriters applied to the recovered setup body."""

from .classes import ClassRewriteResult, ClassRewriter
from .references import ReferenceRewriter

__all__ = ["ClassRewriteResult", "ClassRewriter", "ReferenceRewriter"]
