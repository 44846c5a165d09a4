"""
Verdicts for produced call graphs and realized buffers.

Mismatches are returned as data (a VerificationResult carrying a
MismatchReason), never raised, so the caller decides how to report them.
"""

from typing import Callable, List, Mapping, Optional, Sequence

import numpy as np

from .utils.logger import log_verdict


class MismatchReason:
    """Base class for structured failure reasons."""

    def describe(self) -> str:
        raise NotImplementedError()

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self):
        args = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({args})"


class CardinalityMismatch(MismatchReason):
    def __init__(self, expected_count: int, actual_count: int):
        self.expected_count = expected_count
        self.actual_count = actual_count

    def describe(self):
        return f"Expected {self.expected_count} callers instead of {self.actual_count}"


class MissingCaller(MismatchReason):
    def __init__(self, name: str):
        self.name = name

    def describe(self):
        return f"Expected {self.name} to be in the call graphs"


class CalleeMismatch(MismatchReason):
    """Callee sets of one caller differ. Both lists are stored sorted."""

    def __init__(self, caller: str, expected_callees: List[str], actual_callees: List[str]):
        self.caller = caller
        self.expected_callees = list(expected_callees)
        self.actual_callees = list(actual_callees)

    def describe(self):
        return (
            f"Expected callees of {self.caller} to be ({format_callees(self.expected_callees)}); "
            f"got ({format_callees(self.actual_callees)}) instead"
        )


class ImageMismatch(MismatchReason):
    def __init__(self, x: int, y: int, actual, expected):
        self.x = x
        self.y = y
        self.actual = actual
        self.expected = expected

    def describe(self):
        return f"im({self.x}, {self.y}) = {self.actual} instead of {self.expected}"


class VerificationResult:
    """Outcome of a check. Truthy when the check passed."""

    def __init__(self, reason: Optional[MismatchReason] = None):
        self.reason = reason

    @property
    def passed(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        return "OK" if self.reason is None else self.reason.describe()

    def __bool__(self):
        return self.passed

    def __repr__(self):
        return f"VerificationResult(reason={self.reason!r})"


def format_callees(callees: Sequence[str]) -> str:
    return ", ".join(callees)


@log_verdict
def check_call_graphs(
    result: Mapping[str, Sequence[str]], expected: Mapping[str, Sequence[str]]
) -> VerificationResult:
    """Compares a produced call graph against the expected one.

    Callee order is ignored; the caller set and each callee set must match
    exactly. Neither input is modified. Expected callers are checked in
    sorted order, so the reported discrepancy is deterministic.
    """
    if len(result) != len(expected):
        return VerificationResult(CardinalityMismatch(len(expected), len(result)))

    for caller in sorted(expected):
        if caller not in result:
            return VerificationResult(MissingCaller(caller))

        expected_callees = sorted(expected[caller])
        result_callees = sorted(result[caller])
        if expected_callees != result_callees:
            return VerificationResult(
                CalleeMismatch(caller, expected_callees, result_callees)
            )

    return VerificationResult()


def check_image(image, func: Callable[[int, int], int]) -> VerificationResult:
    """Compares a 2-D buffer, indexed [y, x], against func(x, y).

    Reports the first mismatch in row-major order.
    """
    im = np.asarray(image)
    if im.ndim != 2:
        raise ValueError(f"check_image expects a 2-D buffer, got shape {im.shape}")

    for y, x in np.ndindex(im.shape):
        expected = func(x, y)
        actual = im[y, x]
        if actual != expected:
            return VerificationResult(ImageMismatch(x, y, actual.item(), expected))
    return VerificationResult()
