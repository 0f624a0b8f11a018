# email_checker.py
import json
import logging
from typing import Iterable

logger = logging.getLogger(__name__)


class DomainListError(Exception):
    """The disposable domain source is missing or unusable."""


class DisposableDomains:
    """Read-only set of known disposable domains, loaded once at startup."""

    def __init__(self, domains: Iterable[str]):
        self._domains = frozenset(domains)

    def contains(self, domain: str) -> bool:
        # stored form is used as-is; callers lowercase the query
        return domain in self._domains

    def __contains__(self, domain) -> bool:
        return self.contains(domain)

    def __len__(self) -> int:
        return len(self._domains)


def load_domains(path: str) -> DisposableDomains:
    """Load a JSON array of domain strings from `path`.

    Raises DomainListError if the file is missing or is not a JSON array of
    strings. Serving with an empty set would pass every address as valid, so
    callers should treat this as fatal.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DomainListError(f"{path} not found") from e
    except (OSError, ValueError) as e:
        raise DomainListError(f"error reading or parsing {path}: {e}") from e

    if not isinstance(data, list) or not all(isinstance(d, str) for d in data):
        raise DomainListError(f"{path} must contain a JSON array of domain strings")

    domains = DisposableDomains(data)
    logger.info("Successfully loaded %d disposable domains from %s", len(domains), path)
    return domains
