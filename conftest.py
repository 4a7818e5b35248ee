import pytest

from test_rpeg import TestResult


@pytest.fixture
def r(request):
    """Result record handed to harness-style test functions."""
    return TestResult(request.node.name)
