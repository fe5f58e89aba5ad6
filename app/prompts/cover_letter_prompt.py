"""Prompt templates for cover letter / outreach generation.

Two variants share one layout (SYSTEM, HEADER, COMPANY CONTEXT, ROLE
SPECIFICS, applicant block, TASK, Rules):

- rich_source         — the developer uploaded a CV; its raw text is embedded.
- structured_fallback — no CV text; derived core skills and achievements
                        stand in for it.

Each template is a sequence of lines.  ``Line`` is always rendered;
``OptionalSection`` is rendered only when its guard accepts the source value,
so a missing field drops the whole line instead of printing ``Field: None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Sequence, Union

from app.models.request_models import GenerationRequest, RequestType
from app.tools.profile_facts import ProfileFacts

# Target word window requested from the model, per request type
PROMPT_WORD_TARGETS: dict[RequestType, tuple[int, int]] = {
    RequestType.COVER_LETTER: (250, 300),
    RequestType.OUTREACH_MESSAGE: (150, 180),
}

DEFAULT_RECIPIENT = "Hiring Team"


class TemplateVariant(str, Enum):
    RICH_SOURCE = "rich_source"
    STRUCTURED_FALLBACK = "structured_fallback"


@dataclass(frozen=True)
class PromptInputs:
    request: GenerationRequest
    facts: ProfileFacts


@dataclass(frozen=True)
class RenderedPrompt:
    """A rendered prompt plus the raw template it came from."""

    raw_template: str
    prompt: str
    variant: TemplateVariant


# ── Line descriptors ──────────────────────────────────────────────────────────


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return any(_present(v) for v in value)
    return True


@dataclass(frozen=True)
class Line:
    """A line that always renders.  ``{name}`` placeholders come from ``fields``."""

    text: str
    fields: tuple[tuple[str, Callable[[PromptInputs], Any]], ...] = ()

    def raw(self) -> str:
        return self.text

    def render(self, inputs: PromptInputs) -> list[str]:
        values = {name: _to_text(source(inputs)) for name, source in self.fields}
        return [self.text.format(**values)]


@dataclass(frozen=True)
class OptionalSection:
    """A line rendered only when ``guard(source(inputs))`` holds.

    ``fmt`` contains a single ``{value}`` slot.
    """

    label: str
    source: Callable[[PromptInputs], Any]
    fmt: str
    guard: Callable[[Any], bool] = _present

    def raw(self) -> str:
        return self.fmt.replace("{value}", "{" + self.label + "}")

    def render(self, inputs: PromptInputs) -> list[str]:
        value = self.source(inputs)
        if not self.guard(value):
            return []
        return [self.fmt.replace("{value}", _to_text(value))]


TemplatePart = Union[Line, OptionalSection]


def _to_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if _present(v))
    if isinstance(value, Enum):
        return str(value.value)
    return str(value).strip()


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items if _present(item))


# ── Field sources ─────────────────────────────────────────────────────────────


def _profile(i: PromptInputs):
    return i.request.developer_profile


def _contact(i: PromptInputs, attr: str) -> Any:
    contact = _profile(i).contact_info
    return getattr(contact, attr) if contact is not None else None


def _role(i: PromptInputs):
    return i.request.role_info


def _company(i: PromptInputs):
    return i.request.company_info


def _kind_plural(i: PromptInputs) -> str:
    if i.request.request_type == RequestType.COVER_LETTER:
        return "cover letters"
    return "outreach messages"


def _word_window(i: PromptInputs) -> str:
    low, high = PROMPT_WORD_TARGETS[i.request.request_type]
    if i.request.request_type == RequestType.COVER_LETTER:
        return f"{low}-{high}-word cover letter"
    return f"{low}-{high}-word outreach message"


def _word_limits(i: PromptInputs) -> str:
    low, high = PROMPT_WORD_TARGETS[i.request.request_type]
    return f"{low} and {high}"


def _recipient(i: PromptInputs) -> str:
    manager = i.request.hiring_manager
    return manager.strip() if manager and manager.strip() else DEFAULT_RECIPIENT


def _first_fact(i: PromptInputs) -> Any:
    points = [p for p in (_company(i).attraction_points or []) if _present(p)]
    return points[0] if points else None


def _work_arrangement(i: PromptInputs) -> Any:
    role = _role(i)
    if _present(role.ai_work_arrangement):
        return role.ai_work_arrangement
    if role.remote:
        return "Remote"
    return None


# ── Shared sections ───────────────────────────────────────────────────────────

_SYSTEM: tuple[TemplatePart, ...] = (
    Line("SYSTEM:"),
    Line(
        "You are an elite career-coach copywriter who crafts concise, metrics-driven "
        "{kind_plural} with a {tone} yet professional voice.",
        (("kind_plural", _kind_plural), ("tone", lambda i: i.request.tone)),
    ),
    Line(""),
    Line("USER:"),
)

_HEADER: tuple[TemplatePart, ...] = (
    Line("<HEADER>"),
    OptionalSection("name", lambda i: _profile(i).name, "Name: {value}"),
    OptionalSection(
        "email",
        lambda i: _profile(i).profile_email or _profile(i).email,
        "Email: {value}",
    ),
    OptionalSection("phone", lambda i: _contact(i, "phone"), "Phone: {value}"),
    OptionalSection("linkedin", lambda i: _contact(i, "linkedin"), "LinkedIn: {value}"),
    OptionalSection("github", lambda i: _contact(i, "github"), "GitHub: {value}"),
    OptionalSection("website", lambda i: _contact(i, "website"), "Website: {value}"),
    Line(""),
)

_COMPANY: tuple[TemplatePart, ...] = (
    Line("<COMPANY CONTEXT>"),
    Line("Name: {company_name}", (("company_name", lambda i: _company(i).name),)),
    OptionalSection("company_industry", lambda i: _company(i).industry, "Industry: {value}"),
    OptionalSection("company_size", lambda i: _company(i).size, "Size: {value}"),
    OptionalSection("company_location", lambda i: _company(i).location, "Location: {value}"),
    OptionalSection("company_fact", _first_fact, 'Fact: "{value}"'),
    OptionalSection("company_description", lambda i: _company(i).description, "About: {value}"),
    OptionalSection("company_specialties", lambda i: _company(i).specialties, "Specialties: {value}"),
    OptionalSection("company_culture", lambda i: _company(i).culture_notes, "Culture: {value}"),
    Line(""),
)

_ROLE: tuple[TemplatePart, ...] = (
    Line("<ROLE SPECIFICS>"),
    Line("Title: {role_title}", (("role_title", lambda i: _role(i).title),)),
    OptionalSection("keywords", lambda i: i.facts.keywords, "TopKeywords: {value}"),
    OptionalSection("seniority", lambda i: _role(i).seniority, "Seniority: {value}"),
    OptionalSection("role_location", lambda i: _role(i).location, "Location: {value}"),
    OptionalSection("work_arrangement", _work_arrangement, "WorkArrangement: {value}"),
    OptionalSection("employment_type", lambda i: _role(i).employment_type, "EmploymentType: {value}"),
    OptionalSection("salary", lambda i: _role(i).salary, "Salary: {value}"),
    OptionalSection(
        "responsibilities", lambda i: _role(i).ai_core_responsibilities, "Responsibilities: {value}"
    ),
    OptionalSection(
        "requirements_summary", lambda i: _role(i).ai_requirements_summary, "Requirements: {value}"
    ),
    OptionalSection("job_source", lambda i: i.request.job_source, "FoundVia: {value}"),
    Line(""),
)

_RICH_APPLICANT: tuple[TemplatePart, ...] = (
    Line("<FULL CV CONTENT>"),
    Line("{cv_content}", (("cv_content", lambda i: _profile(i).mvp_content),)),
    OptionalSection("professional_title", lambda i: _profile(i).title, "Professional Title: {value}"),
    OptionalSection(
        "achievements",
        lambda i: _bullets(i.facts.achievements),
        "Highlighted Achievements:\n{value}",
    ),
    Line(""),
)

_STRUCTURED_APPLICANT: tuple[TemplatePart, ...] = (
    Line("<APPLICANT SNAPSHOT>"),
    OptionalSection("professional_title", lambda i: _profile(i).title, "Professional Title: {value}"),
    OptionalSection("about", lambda i: _profile(i).about, "About: {value}"),
    OptionalSection("core_skills", lambda i: i.facts.core_skills, "CoreSkills: {value}"),
    OptionalSection(
        "achievements",
        lambda i: _bullets(i.facts.achievements),
        "KeyAchievements:\n{value}",
    ),
    Line(""),
)


def _task(proof_source: str) -> tuple[TemplatePart, ...]:
    return (
        Line("<TASK>"),
        Line(
            "Write a {word_window} that follows this structure:",
            (("word_window", _word_window),),
        ),
        Line('1. Greeting: "Dear {recipient},".', (("recipient", _recipient),)),
        Line("2. Hook: cite role title + single company fact."),
        Line(f"3. Proof: weave achievements from {proof_source} & 3 keywords naturally."),
        Line("4. Alignment: explain how skills solve company need."),
        Line("5. CTA & sign-off."),
        Line(""),
        Line("Rules:"),
        Line("• First-person, no clichés, no invented data."),
        Line("• Address the named person exactly."),
        Line("• Write between {word_limits} words.", (("word_limits", _word_limits),)),
        Line("• Do NOT use asterisks (*), bullet points, bold formatting (**), or any markdown."),
        Line("• Write in plain paragraph format only."),
        Line("• Output ONLY the final letter text (no markdown, no extra commentary)."),
    )


RICH_SOURCE_TEMPLATE: tuple[TemplatePart, ...] = (
    *_SYSTEM, *_HEADER, *_COMPANY, *_ROLE, *_RICH_APPLICANT, *_task("the FULL CV CONTENT"),
)

STRUCTURED_FALLBACK_TEMPLATE: tuple[TemplatePart, ...] = (
    *_SYSTEM, *_HEADER, *_COMPANY, *_ROLE, *_STRUCTURED_APPLICANT, *_task("KeyAchievements"),
)

TEMPLATES: dict[TemplateVariant, tuple[TemplatePart, ...]] = {
    TemplateVariant.RICH_SOURCE: RICH_SOURCE_TEMPLATE,
    TemplateVariant.STRUCTURED_FALLBACK: STRUCTURED_FALLBACK_TEMPLATE,
}


# ── Public API ────────────────────────────────────────────────────────────────


def select_variant(request: GenerationRequest) -> TemplateVariant:
    """Pick the rich-source variant when the profile carries CV text."""
    if request.developer_profile.has_rich_source:
        return TemplateVariant.RICH_SOURCE
    return TemplateVariant.STRUCTURED_FALLBACK


def render_prompt(request: GenerationRequest, facts: ProfileFacts) -> RenderedPrompt:
    """Select a template variant and render it for *request*.

    Returns both the raw template (with ``{placeholders}``) and the rendered
    prompt sent to the model.
    """
    variant = select_variant(request)
    parts = TEMPLATES[variant]
    inputs = PromptInputs(request=request, facts=facts)

    rendered: list[str] = []
    for part in parts:
        rendered.extend(part.render(inputs))

    return RenderedPrompt(
        raw_template="\n".join(part.raw() for part in parts),
        prompt="\n".join(rendered),
        variant=variant,
    )
