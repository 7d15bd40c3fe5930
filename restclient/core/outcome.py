"""
Outcome values produced by every pipeline stage.

Stages never raise for expected failures; they return ``Failure`` so that the
resilience pipeline can decide what to do with it.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from restclient.shared.exceptions import RestClientError

V = TypeVar('V')


@dataclass(frozen=True)
class Success(Generic[V]):
    """A successful stage result."""
    value: V


@dataclass(frozen=True)
class Failure:
    """A failed stage result carrying the error that caused it."""
    error: RestClientError


Outcome = Union[Success[V], Failure]


def unwrap(outcome: "Outcome[V]") -> V:
    """Return the success value or raise the carried error."""
    if isinstance(outcome, Failure):
        raise outcome.error
    return outcome.value
