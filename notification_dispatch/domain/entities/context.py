"""Domain entity representing a course, account or user context."""

from __future__ import annotations

from dataclasses import dataclass

CONTEXT_TYPE_COURSE = "Course"
CONTEXT_TYPE_ACCOUNT = "Account"
CONTEXT_TYPE_USER = "User"


@dataclass
class Context:
    """Scope an asset belongs to.

    Courses point at their owning account through ``parent``; accounts point at
    their parent account. The chain is used to resolve inherited locales.
    """

    context_type: str
    context_id: int
    name: str | None = None
    locale: str | None = None
    root_account_id: int | None = None
    parent: Context | None = None

    def is_course(self) -> bool:
        return self.context_type == CONTEXT_TYPE_COURSE

    def is_account(self) -> bool:
        return self.context_type == CONTEXT_TYPE_ACCOUNT

    def account_chain(self) -> list[Context]:
        """Return the accounts above this context, nearest first."""

        chain: list[Context] = []
        current = self if self.is_account() else self.parent
        while current is not None:
            if current.is_account():
                chain.append(current)
            current = current.parent
        return chain


__all__ = [
    "Context",
    "CONTEXT_TYPE_COURSE",
    "CONTEXT_TYPE_ACCOUNT",
    "CONTEXT_TYPE_USER",
]
