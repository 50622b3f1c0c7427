"""Recipe (Dockerfile) generation: typed instructions, formatter, O-Saft generator."""

from .generate import generate, generate_text, recipe_context_files
from .instructions import render

__all__ = [
    "generate",
    "generate_text",
    "recipe_context_files",
    "render",
]
