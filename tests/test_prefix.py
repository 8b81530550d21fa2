from __future__ import annotations

import threading

from logtool.prefix import caller_prefix


def _wrapper() -> str:
    return caller_prefix(1)


def test_prefix_names_direct_caller() -> None:
    prefix = caller_prefix()
    assert prefix.startswith(f"reqid-{threading.get_ident()} test_prefix.py ")
    assert prefix.endswith(" : ")


def test_skip_walks_up_the_stack() -> None:
    expected_line = test_skip_walks_up_the_stack.__code__.co_firstlineno + 2
    prefix = _wrapper()
    assert prefix.endswith(f"test_prefix.py {expected_line} : ")


def test_unknown_frame() -> None:
    assert caller_prefix(10_000).endswith(" ??? ")
