# accounting/write_barrier.py
"""
Thread-local write contexts for engine-owned rows.

Journal entries, journal lines, account balances and numbering counters
may only be written while a matching context is pushed:

    with posting_writes_allowed():
        ...   # the posting engine persisting an entry and its deltas

    with command_writes_allowed():
        ...   # command-layer bookkeeping (numbering series, approvals)

    with bootstrap_writes_allowed():
        ...   # management commands seeding a ledger
"""

from contextlib import contextmanager
import threading


_state = threading.local()


def _context_stack() -> list[str]:
    stack = getattr(_state, "write_context_stack", None)
    if stack is None:
        stack = []
        _state.write_context_stack = stack
    return stack


def current_write_context() -> str | None:
    stack = _context_stack()
    return stack[-1] if stack else None


def write_context_allowed(allowed_contexts: set[str]) -> bool:
    ctx = current_write_context()
    if ctx is None:
        return False
    return ctx in allowed_contexts


@contextmanager
def _push_write_context(name: str):
    stack = _context_stack()
    stack.append(name)
    try:
        yield
    finally:
        stack.pop()


@contextmanager
def posting_writes_allowed():
    with _push_write_context("posting"):
        yield


@contextmanager
def command_writes_allowed():
    with _push_write_context("command"):
        yield


@contextmanager
def bootstrap_writes_allowed():
    with _push_write_context("bootstrap"):
        yield
