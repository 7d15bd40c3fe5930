"""
HTTP status classification.

Maps a response status code to either an accepted outcome or the error the
caller will eventually see. The mapping is a rule table so new codes can be
added without touching the classification logic.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional

from restclient.core.outcome import Failure, Outcome, Success
from restclient.shared.exceptions import (
    HttpStatusCategory, HttpStatusError, RestClientError, RestClientTimeoutError
)

ErrorFactory = Callable[[int, str], RestClientError]


def _status_error(category: HttpStatusCategory, message: str) -> ErrorFactory:
    def factory(status_code: int, url: str) -> RestClientError:
        return HttpStatusError(message.format(url=url), status_code=status_code, category=category, url=url)
    return factory


def _timeout_error(status_code: int, url: str) -> RestClientError:
    return RestClientTimeoutError(url, status_code=status_code)


DEFAULT_STATUS_RULES: Dict[int, ErrorFactory] = {
    400: _status_error(HttpStatusCategory.BAD_REQUEST, "Invalid request."),
    404: _status_error(HttpStatusCategory.NOT_FOUND, "URL {url} not found."),
    408: _timeout_error,
    500: _status_error(HttpStatusCategory.INTERNAL_ERROR, "An internal error occurred during the request."),
    502: _status_error(HttpStatusCategory.BAD_GATEWAY, "Bad gateway received from URL {url}."),
    503: _status_error(HttpStatusCategory.UNAVAILABLE, "The requested server is unavailable."),
    504: _timeout_error,
}

_unexpected = _status_error(HttpStatusCategory.UNEXPECTED, "An unexpected response was received.")


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code <= 299


@dataclass(frozen=True)
class StatusClassifier:
    """Decides whether a status code is accepted, and which error it maps to if not."""
    rules: Optional[Mapping[int, ErrorFactory]] = None

    def __post_init__(self):
        if self.rules is None:
            object.__setattr__(self, "rules", dict(DEFAULT_STATUS_RULES))

    def with_rule(self, status_code: int, factory: ErrorFactory) -> "StatusClassifier":
        """Return a classifier with one extra (or replaced) rule."""
        rules = dict(self.rules)
        rules[status_code] = factory
        return StatusClassifier(rules=rules)

    def classify(
        self,
        status_code: int,
        url: str,
        accept_any: bool = False,
        accepted: Optional[Iterable[int]] = None,
    ) -> Outcome[int]:
        if accept_any or is_success_status(status_code):
            return Success(status_code)
        if accepted and status_code in accepted:
            return Success(status_code)

        factory = self.rules.get(status_code, _unexpected)
        return Failure(factory(status_code, url))


default_classifier = StatusClassifier()


def classify_status(
    status_code: int,
    url: str,
    accept_any: bool = False,
    accepted: Optional[Iterable[int]] = None,
) -> Outcome[int]:
    """Classify with the default rule table."""
    return default_classifier.classify(status_code, url, accept_any=accept_any, accepted=accepted)
