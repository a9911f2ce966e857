"""Markdown rendering for concept sheets."""

import re

from conceptgen.models import ConceptSheet

NONE_INFERRED = "_None inferred_"
SEPARATOR = ["---", ""]


def slugify(name: str) -> str:
    """File-system friendly slug for a concept name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "concept"


def render_concept_sheet(sheet: ConceptSheet) -> str:
    """Render a concept sheet as a Markdown document.

    Sections are numbered Definition through Implementation. Lifecycle,
    Invariants, Commands, Events and Implementation are omitted when empty.
    """
    meta = sheet.metadata
    lines = [f"# {meta.name}", "", f"**Type:** {meta.type.value}"]
    if meta.bounded_context:
        lines.append(f"**Bounded Context:** {meta.bounded_context}")
    if meta.aggregate_root is not None:
        lines.append(f"**Aggregate Root:** {'Yes' if meta.aggregate_root else 'No'}")
    if meta.criticality:
        lines.append(f"**Criticality:** {meta.criticality.value}")
    lines += ["", *SEPARATOR]

    lines += ["## 1. Definition", "", "**Short Description:**", "", sheet.definition.short_description or "", ""]
    if sheet.definition.ubiquitous_language:
        lines += ["**Ubiquitous Language:**", "", sheet.definition.ubiquitous_language, ""]

    lines += [*SEPARATOR, "## 2. Structure", "", "### Fields", ""]
    if sheet.structure.fields:
        for field in sheet.structure.fields:
            entry = f"- `{field.name}: {field.type or 'unknown'}`"
            lines.append(f"{entry}: {field.description}" if field.description else entry)
    else:
        lines.append(NONE_INFERRED)
    lines += ["", "### Relationships", ""]
    if sheet.structure.relationships:
        lines += [f"- {rel.description}" for rel in sheet.structure.relationships]
    else:
        lines.append(NONE_INFERRED)
    lines.append("")

    lifecycle = sheet.lifecycle
    if lifecycle and (lifecycle.states or lifecycle.valid_transitions):
        lines += [*SEPARATOR, "## 3. Lifecycle", ""]
        if lifecycle.states:
            lines += ["**States:**", "", *[f"- `{s}`" for s in lifecycle.states], ""]
        if lifecycle.valid_transitions:
            lines += ["**Valid Transitions:**", "", *[f"- `{t}`" for t in lifecycle.valid_transitions], ""]

    if sheet.invariants:
        lines += [*SEPARATOR, "## 4. Invariants", ""]
        for inv in sheet.invariants:
            lines.append(f"- **{inv.rule}** ({inv.notes})" if inv.notes else f"- **{inv.rule}**")
        lines.append("")

    for number, title, operations in ((5, "Commands", sheet.commands), (6, "Events", sheet.events)):
        if operations:
            lines += [*SEPARATOR, f"## {number}. {title}", ""]
            for op in operations:
                lines.append(f"- **{op.name}**: {op.description}" if op.description else f"- **{op.name}**")
            lines.append("")

    if sheet.implementation:
        lines += [*SEPARATOR, "## 7. Implementation", ""]
        for link in sheet.implementation:
            target = link.path or ""
            if link.kind == "url":
                lines.append(f"- **{link.label}:** {target}")
            else:
                lines.append(f"- **{link.label}:** `{target}`")
        lines.append("")

    return "\n".join(lines)
