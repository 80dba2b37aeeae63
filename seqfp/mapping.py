from .errors import EvaluationError, format_stack, reraise_err, seterr
from .utils import basic_getitem


class Mapping(object):
    def __init__(self, f, *sequences):
        if not callable(f):
            raise TypeError("f must be callable")
        if len(sequences) <= 0:
            raise ValueError("at least one input sample must be provided")

        self.sequences = sequences
        self.f = f
        self.stack = format_stack(2)

    def __len__(self):
        return min(len(s) for s in self.sequences)

    def __iter__(self):
        i = 0
        try:
            for args in zip(*self.sequences):
                yield self.f(*args)
                i += 1

        except Exception as error:
            if seterr() == 'passthrough' or isinstance(error, EvaluationError):
                raise
            else:
                msg = "Failed to evaluate item {} in {} created at:\n{}".format(
                    i, self.__class__.__name__, self.stack)
                raise EvaluationError(msg) from error

    @basic_getitem
    def __getitem__(self, item):
        try:
            return self.f(*(l[item] for l in self.sequences))

        except Exception as cause:
            if seterr() == 'passthrough' or isinstance(cause, EvaluationError):
                raise
            else:
                msg = "Failed to evaluate item {} in {} created at:\n{}".format(
                    item, self.__class__.__name__, self.stack)
                raise EvaluationError(msg) from cause


class IndexedMapping(Mapping):
    def __init__(self, f, sequence, pass_sequence=False):
        if not callable(f):
            raise TypeError("f must be callable")

        if pass_sequence:
            super().__init__(
                lambda x, i: f(x, i, sequence), sequence, range(len(sequence)))
        else:
            super().__init__(f, sequence, range(len(sequence)))

        self.stack = format_stack(2)


def smap(f, *sequences):
    """Return a mapping of `f` over the sequence(s).

    Equivalent to :code:`[f(x) for x in sequence]` with on-demand evaluation.

    If several sequences are passed, they will be zipped together and their
    items will be passed as distinct arguments to f:
    :code:`[f(*x) for x in zip(*sequences)]`

    Example:

        >>> a = [1, 2, 3, 4]
        >>> print([v + 2 for v in a])
        [3, 4, 5, 6]
        >>> m = seqfp.smap(lambda x: x + 2, a)
        >>> print([v for v in m])
        [3, 4, 5, 6]
        >>> def do(y, z):
        ...     print("computing now")
        ...     return y + z
        ...
        >>> a, b = [1, 2, 3, 4], [4, 3, 2, 1]
        >>> m = seqfp.smap(do, a, b)
        >>> print([v for v in m])
        computing now
        computing now
        computing now
        computing now
        [5, 5, 5, 5]
    """
    return Mapping(f, *sequences)


def starmap(f, sequence):
    """Map a function over a sequence of argument tuples.

    A sequential equivalent of :func:`python:itertools.starmap`.
    """
    return smap(lambda x: f(*x), sequence)


def smap_indexed(f, sequence, pass_sequence=False):
    """Return a mapping of `f` over a sequence and the item indices.

    Equivalent to :code:`[f(x, i) for i, x in enumerate(sequence)]` with
    on-demand evaluation.

    Args:
        f (Callable): the function to map, it receives an item and its
            index (and the whole sequence if `pass_sequence` is set).
        sequence (Sequence): the input sequence.
        pass_sequence (bool): also pass `sequence` as a third argument to
            `f`: :code:`[f(x, i, sequence) for i, x in enumerate(sequence)]`.

    Example:

        >>> m = seqfp.smap_indexed(lambda x, i: x * i, [5, 5, 5])
        >>> list(m)
        [0, 5, 10]
    """
    return IndexedMapping(f, sequence, pass_sequence)


def flatmap(f, sequence, transform=None):
    """Map `f` over a sequence and concatenate the results.

    Equivalent to :code:`[y for x in sequence for y in f(x)]`, evaluation
    is immediate and stops at the first failure.

    Args:
        f (Callable[[Any], Iterable]): a function returning the values to
            emit for a given item.
        sequence (Sequence): the input sequence.
        transform (Optional[Callable[[Any, Any], Any]]): a function
            applied on every emitted value `y` along with the item `x`
            that produced it, the result contains :code:`transform(x, y)`
            instead of `y`.

    Returns:
        list: The flattened result.
    """
    if not callable(f):
        raise TypeError("f must be callable")
    if transform is not None and not callable(transform):
        raise TypeError("transform must be callable")

    return _flatmap(f, sequence, transform, "flatmap")


def _flatmap(f, sequence, transform, owner):
    result = []
    for i, x in enumerate(sequence):
        try:
            values = f(x)
            if transform is None:
                result.extend(values)
            else:
                result.extend(transform(x, y) for y in values)
        except Exception as error:
            reraise_err(i, error, owner)

    return result


def flatmap_indexed(f, sequence, pass_sequence=False):
    """Same as :func:`flatmap` but `f` also receives the item indices.

    Equivalent to :code:`[y for i, x in enumerate(sequence) for y in f(x, i)]`
    or :code:`f(x, i, sequence)` if `pass_sequence` is set.
    """
    if not callable(f):
        raise TypeError("f must be callable")

    def indexed(args):
        x, i = args
        return f(x, i, sequence) if pass_sequence else f(x, i)

    return _flatmap(indexed, list(zip(sequence, range(len(sequence)))),
                    None, "flatmap_indexed")


def every(predicate, sequence):
    """Return whether all items in a sequence satisfy `predicate`.

    Evaluation stops at the first item that does not satisfy the predicate.
    Empty sequences always pass.
    """
    if not callable(predicate):
        raise TypeError("predicate must be callable")

    for i, x in enumerate(sequence):
        try:
            passed = predicate(x)
        except Exception as error:
            reraise_err(i, error, "every")

        if not passed:
            return False

    return True


def every_indexed(predicate, sequence, pass_sequence=False):
    """Same as :func:`every` but `predicate` also receives the item indices
    (and the whole sequence if `pass_sequence` is set)."""
    if not callable(predicate):
        raise TypeError("predicate must be callable")

    for i, x in enumerate(sequence):
        try:
            if pass_sequence:
                passed = predicate(x, i, sequence)
            else:
                passed = predicate(x, i)
        except Exception as error:
            reraise_err(i, error, "every_indexed")

        if not passed:
            return False

    return True


def evaluate(thunks):
    """Call every function from a dictionary of thunks.

    Args:
        thunks (Mapping[Hashable, Callable[[], Any]]): functions taking no
            argument, indexed by key.

    Returns:
        dict: the value returned by each thunk under the same key.

    Example:

        >>> seqfp.evaluate({'a': lambda: 1, 'b': lambda: 2})
        {'a': 1, 'b': 2}
    """
    result = {}
    for k, thunk in thunks.items():
        try:
            result[k] = thunk()
        except Exception as error:
            reraise_err(repr(k), error, "evaluate")

    return result
