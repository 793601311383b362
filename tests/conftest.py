import io

import pytest

from interpreter import Interpreter
from memory import Memory
from parser import parse_source


@pytest.fixture
def run_source():
    """Parse and run source text; returns (stdout text, memory)."""

    def _run(source, stdin="", **options):
        out = io.StringIO()
        options.setdefault("prompts", False)
        interp = Interpreter(stdout=out, stdin=io.StringIO(stdin), **options)
        memory = interp.run(parse_source(source), Memory())
        return out.getvalue(), memory

    return _run


@pytest.fixture
def output_of(run_source):
    """Run source text and return its display output as a list of lines."""

    def _output(source, stdin=""):
        out, _memory = run_source(source, stdin)
        return out.splitlines()

    return _output
