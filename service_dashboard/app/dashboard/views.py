"""View models derived from dashboard payloads.

Everything here is a pure function of the payloads returned by the
orchestrator. Payloads are read, never modified.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .orchestrator import DashboardResult

ALL_DIFFICULTIES = "All"
EXCLUDED_STAT_KEYS = ("userName", "totalProblemsSolved", "error")
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class ProfileHeader:
    name: str
    handle: str
    coding_score: Any
    designation: Optional[str] = None


@dataclass(frozen=True)
class StatCard:
    label: str
    value: Any
    color: str


@dataclass(frozen=True)
class DifficultyCount:
    difficulty: str
    count: Any

    @property
    def css_class(self) -> str:
        return f"difficulty-{self.difficulty.lower()}"


@dataclass(frozen=True)
class Problem:
    question: str
    url: str


@dataclass(frozen=True)
class ProblemSection:
    options: List[str]
    selected: str
    problems: List[Problem]


@dataclass(frozen=True)
class EmbedSnippet:
    image_url: str
    markdown: str


@dataclass(frozen=True)
class DashboardView:
    username: str
    header: ProfileHeader
    stat_cards: List[StatCard]
    difficulties: List[DifficultyCount]
    embed: EmbedSnippet
    problem_section: Optional[ProblemSection] = None


def build_header(profile: Dict[str, Any], username: str) -> ProfileHeader:
    return ProfileHeader(
        name=profile.get("fullName") or username,
        handle=f"@{username}",
        coding_score=profile.get("codingScore"),
        designation=profile.get("designation") or None,
    )


def build_stat_cards(profile: Dict[str, Any]) -> List[StatCard]:
    return [
        StatCard("Problems Solved", profile.get("problemsSolved"), "blue"),
        StatCard("Institute Rank", profile.get("instituteRank") or NOT_AVAILABLE, "purple"),
        StatCard("Articles", profile.get("articlesPublished"), "orange"),
        StatCard("Longest Streak", profile.get("longestStreak"), "green"),
    ]


def difficulty_breakdown(stats: Dict[str, Any]) -> List[DifficultyCount]:
    """Per-difficulty counts in payload order, skipping summary keys."""
    return [
        DifficultyCount(difficulty, count)
        for difficulty, count in stats.items()
        if difficulty not in EXCLUDED_STAT_KEYS
    ]


def difficulty_options(problems_by_difficulty: Dict[str, Any]) -> List[str]:
    return [ALL_DIFFICULTIES, *problems_by_difficulty.keys()]


def filter_problems(problems_by_difficulty: Dict[str, List[Dict[str, Any]]], selected: str) -> List[Problem]:
    """Problems for one difficulty, or every problem for ``All``.

    ``All`` concatenates the lists in key order. An unknown difficulty yields
    an empty list.
    """
    if selected == ALL_DIFFICULTIES:
        entries = [entry for group in problems_by_difficulty.values() for entry in (group or [])]
    else:
        entries = problems_by_difficulty.get(selected) or []

    return [
        Problem(question=entry.get("question", ""), url=entry.get("questionUrl", ""))
        for entry in entries
    ]


def embed_snippet(origin: str, username: str) -> EmbedSnippet:
    image_url = f"/api/stats/{quote(username, safe='')}?format=svg"
    return EmbedSnippet(
        image_url=image_url,
        markdown=f"![GFG Stats]({origin.rstrip('/')}{image_url})",
    )


def build_problem_section(problems: Dict[str, Any], selected: str) -> Optional[ProblemSection]:
    problems_by_difficulty = problems.get("Problems")
    if problems_by_difficulty is None:
        return None
    return ProblemSection(
        options=difficulty_options(problems_by_difficulty),
        selected=selected,
        problems=filter_problems(problems_by_difficulty, selected),
    )


def build_dashboard_view(
    result: DashboardResult,
    origin: str,
    selected_difficulty: str = ALL_DIFFICULTIES,
) -> DashboardView:
    """Assemble everything the home page renders for a successful search."""
    return DashboardView(
        username=result.username,
        header=build_header(result.profile, result.username),
        stat_cards=build_stat_cards(result.profile),
        difficulties=difficulty_breakdown(result.stats),
        embed=embed_snippet(origin, result.username),
        problem_section=build_problem_section(result.problems, selected_difficulty or ALL_DIFFICULTIES),
    )
