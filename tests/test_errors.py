import threading

import pytest

from seqfp import EvaluationError, parallel_map, seterr, smap
from seqfp.errors import reraise_err


def test_seterr():
    assert seterr() == 'wrap'
    assert seterr('passthrough') == 'passthrough'
    assert seterr() == 'passthrough'
    assert seterr('wrap') == 'wrap'

    with pytest.raises(ValueError):
        seterr('ignore')


def test_seterr_is_thread_local():
    seterr('passthrough')
    seen = []

    t = threading.Thread(target=lambda: seen.append(seterr()))
    t.start()
    t.join()

    assert seen == ['wrap']
    assert seterr() == 'passthrough'


def test_reraise_err():
    cause = KeyError("a")

    seterr('wrap')
    with pytest.raises(EvaluationError) as excinfo:
        reraise_err(4, cause, "Dummy", "somewhere")
    assert str(excinfo.value).startswith("Failed to evaluate item 4 in Dummy")
    assert "somewhere" in str(excinfo.value)
    assert excinfo.value.__cause__ is cause

    # errors known only by their description
    with pytest.raises(EvaluationError) as excinfo:
        reraise_err(4, "KeyError('a')", "Dummy")
    assert "KeyError('a')" in str(excinfo.value)

    seterr('passthrough')
    with pytest.raises(KeyError):
        reraise_err(4, cause, "Dummy")


def test_creation_stack():
    def do(x):
        raise KeyError(x)

    m = smap(do, [1, 2])  # created here

    assert "test_creation_stack" in m.stack

    with pytest.raises(EvaluationError) as excinfo:
        m[0]
    assert "m = smap(do, [1, 2])" in str(excinfo.value)


def test_wrapped_once_across_workers():
    def do(x):
        raise KeyError(x)

    inner = smap(do, [1, 2])

    # the worker does not wrap, the caller wraps once
    seterr('wrap')
    with pytest.raises(EvaluationError) as excinfo:
        parallel_map(lambda i: inner[i])([0, 1])
    assert "ParallelMap" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, KeyError)

    seterr('passthrough')
    with pytest.raises(KeyError):
        parallel_map(lambda i: inner[i])([0, 1])
