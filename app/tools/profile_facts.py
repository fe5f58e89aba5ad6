"""Profile/role facts fed into the cover letter prompt.

Pure functions of the request data (no I/O, deterministic):

- rank_role_keywords  — what the role cares about most
- pick_core_skills    — the developer's strongest skills
- derive_achievements — short achievement statements for the letter
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from app.models.request_models import DeveloperProfile, RoleInfo, Skill

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9+#.\-]*[A-Za-z0-9+#]|[A-Za-z]")

STOP_WORDS: frozenset[str] = frozenset(
    """
    a about above across after all also an and any are as at be been being both
    but by can could do does each etc for from has have having how if in into is
    it its job just least less like looking may more most must need new no not
    of on or other our out over own per plus preferred required role should so
    some strong such than that the their them then there these they this those
    through to team up use using very we well what when where which while who
    will with within work working would years year you your
    ability able candidate candidates experience experienced excellent good
    including knowledge skills skill understanding responsibilities requirements
    """.split()
)

_LEVEL_RANK: dict[str, int] = {
    "expert": 0,
    "advanced": 1,
    "proficient": 1,
    "intermediate": 2,
    "beginner": 3,
}


class ProfileFacts(BaseModel):
    """Derived facts consumed by the structured prompt variant."""

    keywords: list[str] = Field(default_factory=list)
    core_skills: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)


def _clean(items: Optional[Iterable[Optional[str]]]) -> list[str]:
    return [i.strip() for i in (items or []) if i and i.strip()]


def rank_role_keywords(role: RoleInfo, limit: int = 8) -> list[str]:
    """Return the role's most salient keywords, strongest first.

    Explicitly listed skills score higher than words mined from the title,
    requirements and description.  Ties keep first-seen order.
    """
    counts: Counter[str] = Counter()
    display: dict[str, str] = {}
    order: dict[str, int] = {}

    def _add(term: str, weight: int) -> None:
        key = term.lower()
        if key in STOP_WORDS or len(key) < 2:
            return
        counts[key] += weight
        display.setdefault(key, term)
        order.setdefault(key, len(order))

    for skill in _clean(role.skills) + _clean(role.ai_key_skills):
        _add(skill, 3)

    prose = [role.title, *_clean(role.requirements), role.ai_requirements_summary or "", role.description or ""]
    for text in prose:
        for word in _WORD_RE.findall(text):
            _add(word, 1)

    ranked = sorted(counts, key=lambda k: (-counts[k], order[k]))
    return [display[k] for k in ranked[:limit]]


def pick_core_skills(skills: Optional[list[Skill]], limit: int = 6) -> list[str]:
    """Return up to *limit* skill names ordered by proficiency level."""
    seen: set[str] = set()
    unique: list[Skill] = []
    for skill in skills or []:
        name = (skill.name or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        unique.append(skill)

    # sorted() is stable, so listing order survives within a level
    ranked = sorted(
        unique,
        key=lambda s: _LEVEL_RANK.get((s.level or "").strip().lower(), len(_LEVEL_RANK)),
    )
    return [s.name.strip() for s in ranked[:limit]]


def derive_achievements(
    profile: DeveloperProfile,
    provided: Optional[list[str]] = None,
    limit: int = 3,
) -> list[str]:
    """Return short achievement statements for the letter.

    Caller-provided achievements win.  Otherwise profile achievements are
    used, then experience bullets, then a statement synthesized from the most
    recent experience.
    """
    explicit = _clean(provided)
    if explicit:
        return explicit[:limit]

    statements: list[str] = []
    for ach in profile.achievements or []:
        title = (ach.title or "").strip()
        desc = (ach.description or "").strip()
        if title and desc:
            statements.append(f"{title}: {desc}")
        elif title or desc:
            statements.append(title or desc)

    for exp in profile.experience or []:
        statements.extend(_clean(exp.achievements))

    if not statements and profile.experience:
        latest = next((e for e in profile.experience if e.current), profile.experience[0])
        role = " at ".join(p for p in (latest.title, latest.company) if p)
        stack = ", ".join(_clean(latest.tech_stack)[:4])
        if role and stack:
            statements.append(f"Delivered production work as {role} using {stack}")
        elif role:
            statements.append(f"Delivered production work as {role}")

    return statements[:limit]


def build_profile_facts(
    profile: DeveloperProfile,
    role: RoleInfo,
    provided_achievements: Optional[list[str]] = None,
) -> ProfileFacts:
    """Compute every derived fact the prompt needs in one call."""
    return ProfileFacts(
        keywords=rank_role_keywords(role),
        core_skills=pick_core_skills(profile.skills),
        achievements=derive_achievements(profile, provided_achievements),
    )
