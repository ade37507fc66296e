"""Resource limits of one lscript run. The defaults are the capacities the language has always had; the host driver can
override each of them from the command line.

Also holds the two process-wide settings a run needs from the Python runtime: room on the call stack for nesting as
deep as max_tokens allows, and int <-> str conversion without a digit limit. Both are changed only for the duration
of a `with` block and restored afterwards, so they are not safe to use from several threads at once.
"""

import sys
from contextlib import contextmanager
from dataclasses import dataclass


FRAMES_PER_TOKEN = 3  # upper bound of parser or evaluator frames that one token of nesting can take


@dataclass
class Limits:
    """Capacities shared by the lexer and the evaluator."""
    max_tokens: int = 2048           # including the trailing EOF token
    max_vars: int = 512              # distinct names in the variable table
    max_iterations: int = 1_000_000  # iterations of a single loop statement
    input_prompt: str = "> "         # written before every input statement reads a line

    def __post_init__(self):
        for name in ("max_tokens", "max_vars", "max_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    @property
    def max_frames(self):
        """Stack frames needed to walk the most deeply nested program of max_tokens tokens."""
        return self.max_tokens * FRAMES_PER_TOKEN


@contextmanager
def recursion_room(frames):
    """Raises the recursion limit by frames above the current one."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(previous + frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


@contextmanager
def unlimited_int_digits():
    """Lifts the digit limit on int <-> str conversion that Python 3.11 introduced."""
    if not hasattr(sys, "set_int_max_str_digits"):
        yield
        return

    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(0)
    try:
        yield
    finally:
        sys.set_int_max_str_digits(previous)
