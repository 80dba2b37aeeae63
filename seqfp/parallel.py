from abc import ABC, abstractmethod
import multiprocessing
import pickle as pkl
import queue
import threading

from tblib import pickling_support

from .errors import format_stack, reraise_err, seterr
from .utils import get_logger


pickling_support.install()

logger = get_logger(__name__)

# marks the end of the outcome stream, outcomes are always tuples
CLOSED = None


# Work unit backends ----------------------------------------------------------

class AsyncBackend(ABC):
    """Run work units and carry their outcomes back to the collector.

    A work unit evaluates the callback on a single item and puts exactly
    one `(position, success, payload)` outcome in the conduit.
    """

    @abstractmethod
    def make_conduit(self, capacity):
        raise NotImplementedError

    @abstractmethod
    def spawn(self, f, position, item, conduit):
        """Start a work unit and return a handle with a `join()` method."""
        raise NotImplementedError

    def receive(self, outcome):
        return outcome

    def abandon(self, conduit):
        """Release remaining work units after the collector gave up."""


class ThreadBackend(AsyncBackend):
    """Thread-based work units."""

    def make_conduit(self, capacity):
        return queue.Queue(maxsize=capacity)

    def spawn(self, f, position, item, conduit):
        worker = threading.Thread(
            target=self.__class__.worker,
            args=(f, position, item, conduit),
            daemon=True)
        worker.start()
        return worker

    @staticmethod
    def worker(f, position, item, conduit):
        seterr('passthrough')

        try:
            value = f(item)
        except Exception as e:
            conduit.put((position, False, e))
        else:
            conduit.put((position, True, value))


class ProcessBackend(AsyncBackend):
    """Process-based work units.

    The callback and the items must be picklable, so should the values
    and errors returned by the callback.
    """

    def make_conduit(self, capacity):
        # unbounded, writers never wait on the collector
        return multiprocessing.Queue()

    def spawn(self, f, position, item, conduit):
        worker = multiprocessing.Process(
            target=self.__class__.worker,
            args=(f, position, item, conduit),
            daemon=True)
        worker.start()
        return worker

    def receive(self, outcome):
        position, success, payload = outcome
        try:
            return position, success, pkl.loads(payload)
        except Exception as e:
            return position, False, e

    def abandon(self, conduit):
        # a process cannot exit until its outcome is consumed from the pipe
        drainer = threading.Thread(
            target=discard_outcomes, args=(conduit,), daemon=True)
        drainer.start()

    @staticmethod
    def worker(f, position, item, conduit):
        seterr('passthrough')

        # collect value (or error trying)
        try:
            value = f(item)
        except Exception as e:
            value = e
            success = False
        else:
            success = True

        # serialize it
        try:
            payload = pkl.dumps(value, protocol=-1)

        except Exception as e:  # gracefully recover failed serialization
            logger.debug("failed to serialize outcome of item %d", position)
            if success:
                success = False
                msg = ("failed to send item {} to parent process, ".format(position)
                       + "is it picklable? Error message was:\n{}".format(e))
                payload = pkl.dumps(ValueError(msg))
            else:  # serialize error message because error can't be pickled
                payload = pkl.dumps(str(value))

        conduit.put((position, success, payload))


def close_conduit(workers, conduit):
    """Wait for all work units then signal that no more outcome will come."""
    for w in workers:
        w.join()

    conduit.put(CLOSED)


def discard_outcomes(conduit):
    while conduit.get() is not CLOSED:
        pass


# Fan-out / fan-in ------------------------------------------------------------

class ParallelTransform(ABC):
    """Evaluate a callback concurrently over all items of a sequence.

    Subclasses define how successful outcomes are assembled into the
    final result.
    """

    def __init__(self, f, method="thread", init_stack=None):
        if not callable(f):
            raise TypeError("f must be callable")

        if method == "thread":
            self.backend = ThreadBackend()
        elif method == "process":
            self.backend = ProcessBackend()
        else:
            raise ValueError("invalid method, must be 'thread' or 'process'")

        self.f = f
        self.method = method
        self.creation_stack = init_stack

    def task(self):
        """Return the function evaluated by each work unit."""
        return self.f

    @abstractmethod
    def new_accumulator(self, size):
        raise NotImplementedError

    @abstractmethod
    def assemble(self, accumulator, position, value):
        raise NotImplementedError

    def finalize(self, accumulator):
        return accumulator

    def __call__(self, sequence):
        size = len(sequence)
        if size == 0:
            return self.finalize(self.new_accumulator(0))

        # room for every outcome and the closing mark
        conduit = self.backend.make_conduit(size + 1)

        logger.debug("dispatching %d work units to %s workers", size, self.method)
        task = self.task()
        workers = []
        try:
            for position, item in enumerate(sequence):
                workers.append(self.backend.spawn(task, position, item, conduit))
        except BaseException:
            self.backend.abandon(conduit)
            raise
        finally:
            closer = threading.Thread(
                target=close_conduit, args=(workers, conduit), daemon=True)
            closer.start()

        try:
            accumulator, received = self.collect(conduit, size)

        except BaseException:
            self.backend.abandon(conduit)
            raise

        if received < size:
            raise RuntimeError("a worker died unexpectedly")

        return self.finalize(accumulator)

    def collect(self, conduit, size):
        accumulator = self.new_accumulator(size)
        received = 0

        while True:
            outcome = conduit.get()
            if outcome is CLOSED:
                break

            position, success, value = self.backend.receive(outcome)
            received += 1

            if not success:  # first error wins
                logger.debug("item %d failed, %d outcomes left unread",
                             position, size - received)
                reraise_err(position, value, self.__class__.__name__,
                            self.creation_stack)

            self.assemble(accumulator, position, value)

        return accumulator, received


class ParallelMap(ParallelTransform):
    """Concurrent mapping which preserves the order of the items."""

    def new_accumulator(self, size):
        return [None] * size

    def assemble(self, accumulator, position, value):
        accumulator[position] = value


class Flatten:
    """Materialize the values of a flatmap callback inside the work unit."""

    def __init__(self, f):
        self.f = f

    def __call__(self, item):
        return list(self.f(item))


class ParallelFlatMap(ParallelTransform):
    """Concurrent flatmap, values are concatenated in arrival order unless
    `ordered` is set."""

    def __init__(self, f, method="thread", ordered=False, init_stack=None):
        super().__init__(f, method, init_stack)
        self.ordered = ordered

    def task(self):
        return Flatten(self.f)

    def new_accumulator(self, size):
        return [None] * size if self.ordered else []

    def assemble(self, accumulator, position, value):
        if self.ordered:
            accumulator[position] = value
        else:
            accumulator.extend(value)

    def finalize(self, accumulator):
        if self.ordered:
            return [y for values in accumulator for y in values]
        else:
            return accumulator


def parallel_map(f, method="thread"):
    """Return a transform which maps `f` concurrently over a sequence.

    Calling the returned transform on a sequence starts one worker per
    item, each worker evaluates `f` on its item exactly once. The result
    is a list in the order of the input sequence:
    :code:`[f(x) for x in sequence]`, regardless of which items complete
    first.

    .. note::

        There is no limit on the number of concurrent workers, one is
        started per item.

    Args:
        f (Callable):
            The function to apply on each item.
        method (str):
            Type of workers (default `'thread'`):

            * `'thread'` uses :class:`python:threading.Thread` which
              has low overhead but allows only one active worker at a
              time, ideal for IO-bound operations.
            * `'process'` uses :class:`python:multiprocessing.Process`
              which provides full parallelism but requires `f`, the
              items and the results to be picklable.

    Returns:
        ParallelMap: A callable which takes a sequence and returns the
        list of mapped values.

    Raises:
        EvaluationError:
            When calling the transform, if `f` fails on any item. Only
            the first failure to be observed is reported, the call
            returns without waiting for the other workers. With
            :code:`seterr('passthrough')` the original error is raised
            instead.

    Example:

        >>> def fetch(url):
        ...     return "content of " + url
        >>> fetch_all = seqfp.parallel_map(fetch)
        >>> fetch_all(["a.html", "b.html"])
        ['content of a.html', 'content of b.html']
    """
    return ParallelMap(f, method, init_stack=format_stack())


def parallel_flatmap(f, method="thread", ordered=False):
    """Return a transform which flatmaps `f` concurrently over a sequence.

    Like :func:`parallel_map`, but `f` returns an iterable of values
    for each item and the transform returns all these values
    concatenated in a single list.

    By default the values of an item are appended as soon as that item
    completes, so the result is only guaranteed to contain the same
    values as :code:`flatmap(f, sequence)`, possibly in a different
    order. The values returned for a given item always remain
    contiguous and in their original order.

    Args:
        f (Callable[[Any], Iterable]):
            The function to apply on each item.
        method (str):
            Type of workers, see :func:`parallel_map`.
        ordered (bool):
            Concatenate the values following the order of the input
            items, the result is then equal to
            :code:`flatmap(f, sequence)` (default False).

    Returns:
        ParallelFlatMap: A callable which takes a sequence and returns the
        list of flattened values.
    """
    return ParallelFlatMap(f, method, ordered, init_stack=format_stack())
