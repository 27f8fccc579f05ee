# goodie/core/route_guard.py
from dataclasses import dataclass
from urllib.parse import urlencode

from goodie.core.tokens import SessionClaims
from goodie.models.user import Role

ACCESS_DENIED_ERROR = "access-denied"


@dataclass(frozen=True)
class GuardRule:
    prefix: str
    allowed_roles: frozenset[Role]

    def matches(self, path: str) -> bool:
        # "/admin" protects "/admin" and "/admin/..." but not "/administrator"
        prefix = self.prefix.rstrip("/")
        return path == prefix or path.startswith(prefix + "/")


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    redirect_url: str | None = None


class RouteGuard:
    """
    Request-time authorization for protected path prefixes.

    evaluate() is a pure function of (path, decoded session). A missing,
    invalid or expired token all arrive here as None and are treated the
    same way. Nothing is cached between requests.
    """

    def __init__(self, rules: list[GuardRule], denied_redirect_path: str = "/"):
        self.rules = rules
        self.denied_redirect_path = denied_redirect_path

    @classmethod
    def for_admin_prefixes(cls, prefixes: list[str], denied_redirect_path: str = "/") -> "RouteGuard":
        rules = [GuardRule(prefix=p, allowed_roles=frozenset({Role.ADMIN})) for p in prefixes]
        return cls(rules, denied_redirect_path)

    def rule_for(self, path: str) -> GuardRule | None:
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None

    def evaluate(self, path: str, session: SessionClaims | None) -> GuardDecision:
        rule = self.rule_for(path)
        if rule is None:
            return GuardDecision(allowed=True)

        if session is None or session.role not in rule.allowed_roles:
            query = urlencode({"error": ACCESS_DENIED_ERROR})
            return GuardDecision(
                allowed=False,
                redirect_url=f"{self.denied_redirect_path}?{query}",
            )

        return GuardDecision(allowed=True)
