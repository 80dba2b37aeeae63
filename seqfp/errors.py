import inspect
import threading


class EvaluationError(Exception):
    """Raised when a user callback fails on an item.

    The error raised by the callback is available as `__cause__`.
    """


# Settings --------------------------------------------------------------------

class ErrorConfig(threading.local):
    def __init__(self):
        super().__init__()
        self.passthrough = False


error_config = ErrorConfig()


def seterr(evaluation=None):
    """Set how callback failures are reported to the calling thread.

    Args:
        evaluation (str): one of:

            - `'wrap'` (default): raise :class:`EvaluationError`, naming
              the failing item and where the transform was created, with
              the callback error as its cause.
            - `'passthrough'`: raise the callback error itself, which is
              handy for step-by-step debugging.
            - `None`: leave unchanged.

    Returns:
        The current setting.

    The setting is stored per thread. Parallel transforms read it in the
    thread which called them, when the first failure is collected, so it
    does not matter which thread or process actually ran the callback.
    Workers always run in `'passthrough'` mode, the wrapping happens only
    once, on the caller side. An :class:`EvaluationError` raised by a
    nested transform is never wrapped a second time.
    """
    if evaluation == 'passthrough':
        error_config.passthrough = True
    elif evaluation == 'wrap':
        error_config.passthrough = False
    elif evaluation is not None:
        raise ValueError("evaluation must be 'wrap' or 'passthrough'")

    return 'passthrough' if error_config.passthrough else 'wrap'


def reraise_err(item, error, owner, stack_desc=None):
    """(re)Raise an evaluation error with contextual debug info.

    Args:
        item: index or key of the element which failed.
        error (Union[Exception, str]): the error raised by user code, or
            its description when the error itself could not be recovered
            (ex: unpicklable error from a worker process).
        owner (str): name of the transform which evaluated the item.
        stack_desc (Optional[str]): where the transform was created.
    """
    msg = "Failed to evaluate item {} in {}".format(item, owner)
    if stack_desc:
        msg += " created at:\n{}".format(stack_desc)

    if isinstance(error, str):
        msg += "\n\noriginal error was:\n{}".format(error)
        raise EvaluationError(msg)

    elif seterr() == "passthrough" or isinstance(error, EvaluationError):
        raise error

    else:
        raise EvaluationError(msg) from error


# Helpers ---------------------------------------------------------------------

def unindent(lines):
    if not lines:
        return []

    prefix = lines[0]
    while len(prefix) > 0 and not prefix.isspace():
        prefix = prefix[:-1]

    for line in lines[1:]:
        while not line.startswith(prefix):
            prefix = prefix[:-1]

    return [line[len(prefix):] for line in lines]


def format_stack(skip=1):
    """Describe the call stack of the caller, outermost frame first.

    Args:
        skip (int): number of innermost frames to omit besides the one of
            :func:`format_stack` itself.
    """
    out = ""
    for frame in inspect.stack()[:skip:-1]:
        _, filename, lineno, function, code_context, _ = frame
        out += "  File \"{}\", line {}, in {}\n".format(
            filename, lineno, function)
        for line in unindent(code_context):
            out += "    " + line

    return out
