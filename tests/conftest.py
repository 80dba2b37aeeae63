import pytest

from seqfp import seterr


@pytest.fixture(autouse=True)
def restore_error_setting():
    previous = seterr()
    yield
    seterr(previous)
