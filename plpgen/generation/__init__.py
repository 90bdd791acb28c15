# plpgen/generation/__init__.py
"""
Template substitution and batch archive generation.
"""
from .batch import BatchJob, BatchState, generate_batch, load_template
from .options import GenerationOptions

__all__ = [
    "BatchJob",
    "BatchState",
    "GenerationOptions",
    "generate_batch",
    "load_template",
]
