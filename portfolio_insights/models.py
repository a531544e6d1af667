from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

LanguageTotals = Dict[str, int]


@dataclass(frozen=True, slots=True)
class Reference:
    kind: Literal["user", "repo"]
    owner: str
    repo: Optional[str] = None

    @classmethod
    def user(cls, owner: str) -> "Reference":
        return cls(kind="user", owner=owner)

    @classmethod
    def for_repo(cls, owner: str, repo: str) -> "Reference":
        return cls(kind="repo", owner=owner, repo=repo)

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}" if self.kind == "repo" else self.owner


@dataclass(frozen=True, slots=True)
class CommitSeries:
    points: Tuple[Tuple[str, int], ...] = ()

    @property
    def labels(self) -> List[str]:
        return [day for day, _ in self.points]

    @property
    def data(self) -> List[int]:
        return [count for _, count in self.points]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True, slots=True)
class IssueMix:
    open_issues: int = 0
    closed_issues: int = 0
    open_prs: int = 0
    closed_prs: int = 0

    def as_list(self) -> List[int]:
        return [self.open_issues, self.closed_issues, self.open_prs, self.closed_prs]


@dataclass(frozen=True, slots=True)
class RepoView:
    repo: Dict[str, Any]
    kind: str = field(default="repo", init=False)


@dataclass(frozen=True, slots=True)
class UserView:
    user: Dict[str, Any]
    repos: List[Dict[str, Any]] = field(default_factory=list)
    kind: str = field(default="user", init=False)


View = Union[RepoView, UserView]


@dataclass(frozen=True, slots=True)
class QueryResult:
    view: View
    language_totals: Optional[LanguageTotals] = None
    commit_series: Optional[CommitSeries] = None
    issue_mix: Optional[IssueMix] = None


@dataclass(frozen=True, slots=True)
class Kpi:
    label: str
    value: Any
