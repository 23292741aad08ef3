"""Eligibility verdict domain entity."""

from dataclasses import dataclass

ELIGIBLE = "eligible"


@dataclass(frozen=True)
class EligibilityVerdict:
    """Whether caching applies to a request, and which rules said no.

    Attributes:
        enabled: The final boolean verdict
        failed_rules: Names of the rules that rejected the request, in order
    """

    enabled: bool
    failed_rules: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.enabled

    @property
    def reason(self) -> str:
        """Name of the first rule that rejected the request."""
        return self.failed_rules[0] if self.failed_rules else ELIGIBLE

    @classmethod
    def eligible(cls) -> "EligibilityVerdict":
        return cls(enabled=True)

    @classmethod
    def rejected(cls, rule: str) -> "EligibilityVerdict":
        return cls(enabled=False, failed_rules=(rule,))

    def reject(self, rule: str) -> "EligibilityVerdict":
        """Return a copy narrowed to ineligible, recording ``rule``."""
        return EligibilityVerdict(enabled=False, failed_rules=(*self.failed_rules, rule))
