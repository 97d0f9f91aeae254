"""Question files: markdown body plus optional YAML frontmatter overrides."""

from dataclasses import dataclass, field
from pathlib import Path

import frontmatter

from council.models import CouncilMember


@dataclass
class QuestionFile:
    content: str
    members: list[CouncilMember] = field(default_factory=list)
    chairman: str | None = None
    title: bool | None = None


def _members_from_meta(raw) -> list[CouncilMember]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    members: list[CouncilMember] = []
    for item in raw:
        if isinstance(item, dict):
            model = str(item.get("model", "")).strip()
            prompt = item.get("system_prompt")
            if model:
                members.append(CouncilMember(model=model, system_prompt=str(prompt).strip() if prompt else None))
        elif str(item).strip():
            members.append(CouncilMember(model=str(item).strip()))
    return members


def parse_question_file(file_path: Path) -> QuestionFile:
    """Parse a markdown question with optional frontmatter.

    Recognized keys: ``models`` (comma string or list of ids or of
    ``{model, system_prompt}`` maps), ``chairman`` and ``title`` (bool).
    Missing keys leave the field empty so config defaults apply.
    """
    post = frontmatter.load(str(file_path))
    meta = dict(post.metadata)
    chairman = meta.get("chairman")
    title = meta.get("title")
    return QuestionFile(
        content=post.content.strip(),
        members=_members_from_meta(meta.get("models")),
        chairman=str(chairman).strip() if chairman else None,
        title=bool(title) if title is not None else None,
    )
