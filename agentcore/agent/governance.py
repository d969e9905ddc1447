"""
Content Policy
==============

A simple term-based content policy applied to user input before any model
call, and to model output before it is returned or stored.

Matching is case-insensitive substring matching, which is coarse but
predictable. Terms come from BLOCKED_TERMS (comma-separated).
"""

from agentcore.errors import AIGovernanceError
from agentcore.utils.logger import Logger

logger = Logger("Governance")


class ContentPolicy:
    """
    Rejects text containing blocked terms.

    Example:
        policy = ContentPolicy(["password dump"])
        policy.check_input("please do a password dump")  # raises AIGovernanceError
    """

    def __init__(self, blocked_terms: list[str] | tuple[str, ...] = ()):
        self._terms: list[str] = []
        self.add_terms(blocked_terms)

    @property
    def blocked_terms(self) -> list[str]:
        return list(self._terms)

    def add_terms(self, terms: list[str] | tuple[str, ...]) -> None:
        for term in terms:
            term = term.strip()
            if term and term.lower() not in (t.lower() for t in self._terms):
                self._terms.append(term)

    def detect(self, text: str) -> list[str]:
        """Blocked terms found in `text`."""
        lower_text = text.lower()
        return [term for term in self._terms if term.lower() in lower_text]

    def check_input(self, text: str) -> None:
        """
        Raises:
            AIGovernanceError: category "blocked_input" if a term matches
        """
        self._check(text, "blocked_input")

    def check_output(self, text: str) -> None:
        """
        Raises:
            AIGovernanceError: category "blocked_output" if a term matches
        """
        self._check(text, "blocked_output")

    def _check(self, text: str, category: str) -> None:
        found = self.detect(text)
        if found:
            logger.warning(f"Content policy violation ({category})", {"terms": found})
            raise AIGovernanceError(
                f"Content policy violation: {len(found)} blocked term(s)",
                category=category,
                terms=found,
            )
