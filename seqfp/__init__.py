"""
A python library to transform sequences element-wise.

The seqfp package contains functions to apply a function on every item
of a sequence (anything that supports indexing such as lists or arrays)
and gather the results, optionally flattening them, without writing the
iteration and error reporting boilerplate.

The sequential transforms feature on-demand evaluation where possible:
:func:`smap` only evaluates items when they are read.

The parallel transforms (:func:`parallel_map`, :func:`parallel_flatmap`)
evaluate all items concurrently, using one thread or process per item,
and return as soon as all items are done or one of them failed.
"""

from .errors import EvaluationError, seterr
from .mapping import (
    evaluate,
    every,
    every_indexed,
    flatmap,
    flatmap_indexed,
    smap,
    smap_indexed,
    starmap,
)
from .parallel import ParallelFlatMap, ParallelMap, parallel_flatmap, parallel_map

__all__ = [
    "EvaluationError",
    "seterr",
    "smap",
    "smap_indexed",
    "starmap",
    "flatmap",
    "flatmap_indexed",
    "every",
    "every_indexed",
    "evaluate",
    "ParallelMap",
    "ParallelFlatMap",
    "parallel_map",
    "parallel_flatmap",
]
