"""Miscellaneous tools for internal use."""

import logging
import numbers
from logging import NullHandler


def isint(x):
    """Return wether `x` is an integral number."""
    return isinstance(x, numbers.Integral)


def get_logger(name):
    logger = logging.getLogger(name)
    logger.addHandler(NullHandler())
    return logger


def basic_getitem(func):
    """Decorate a `__getitem__` method to add slicing support.

    Args:
        func (Callable[[Sequence, int], Any]):
            A `__getitem__` method that only accepts positive integer
            indices lower than the length of the sequence.

    Return:
        A `__getitem__` method that accepts negative indexing and
        slicing.
    """
    def getitem(self, key):
        if isinstance(key, slice):
            return SeqSlice(self, key)

        if not isint(key):
            raise TypeError(
                self.__class__.__name__ + " indices must be integers or "
                "slices, not " + key.__class__.__name__)

        size = len(self)
        if key < -size or key >= size:
            raise IndexError(self.__class__.__name__ + " index out of range")
        if key < 0:
            key = size + key

        return func(self, key)

    return getitem


def normalize_slice(start, stop, step, size):
    """Normalize slice parameters.

    Args:
        start (Optional[int]): start index
        stop (Optional[int]): stop index
        step (Optional[int]): step size
        size (int): size of the sliced sequence

    Return:
        (int, int, int): A triplet of integers start, stop, step such
        that the sliced indices are :code:`range(start, stop, step)`.
    """
    if step is None:
        step = 1
    elif step == 0:
        raise ValueError("slice step cannot be 0")

    start, stop, step = slice(start, stop, step).indices(size)
    numel = len(range(start, stop, step))

    return start, start + numel * step, step


class SeqSlice:
    """Lazy slice view over a sequence."""

    def __init__(self, sequence, key):
        start, stop, step = normalize_slice(
            key.start, key.stop, key.step, len(sequence))

        if isinstance(sequence, SeqSlice):  # collapse nested views
            start, stop, step = (
                sequence.start + start * sequence.step,
                sequence.start + stop * sequence.step,
                step * sequence.step)
            sequence = sequence.sequence

        self.sequence = sequence
        self.start = start
        self.stop = stop
        self.step = step

    def __len__(self):
        return abs(self.stop - self.start) // abs(self.step)

    def __iter__(self):
        for i in range(self.start, self.stop, self.step):
            yield self.sequence[i]

    @basic_getitem
    def __getitem__(self, key):
        return self.sequence[self.start + key * self.step]
