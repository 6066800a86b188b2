"""
app/workflows/transforms.py

Organization-specific payload normalizers.

Each transform is a pure function that reads the mapped application and
returns candidate fields. `apply_transforms` only writes a candidate when the
payload has no value for that field yet, so transforms can fill gaps but never
overwrite what the applicant provided.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from app.domain.application import is_defined

Transform = Callable[[Mapping[str, Any]], dict[str, Any]]

COMMON_GRANT_SOURCE = "common-grant-app"

_NEGATIVE_ANSWERS = {"no", "none", "n/a", "na", "nope", "nil", "0", "-", "false"}
_REFERENCE_PATTERN = re.compile(
    r"(?P<name>[^,;\n]+?)\s*,\s*(?P<email>[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})"
)
_LEADING_BULLET = re.compile(r"^[\s\-*•\d.)]+")


def _text(source: Mapping[str, Any], field_name: str) -> str | None:
    value = source.get(field_name)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def mark_common_grant_source(source: Mapping[str, Any]) -> dict[str, Any]:
    return {"source": COMMON_GRANT_SOURCE, "general_fund": True}


def derive_short_description(source: Mapping[str, Any]) -> dict[str, Any]:
    description = _text(source, "project_description")
    if description is None:
        return {}
    return {"short_description": description}


def normalize_prior_funding(source: Mapping[str, Any]) -> dict[str, Any]:
    """
    Split a free-text prior funding answer into a flag and its detail.
    """

    answer = _text(source, "existing_funding") or _text(source, "prior_funding")
    if answer is None:
        return {}
    if answer.lower().rstrip(".") in _NEGATIVE_ANSWERS:
        return {"has_received_funding": False}
    return {"has_received_funding": True, "what_funding": answer}


def extract_reference_contact(source: Mapping[str, Any]) -> dict[str, Any]:
    """
    Pull the first "Name, email@domain" pair out of the references block.
    """

    references = _text(source, "references")
    if references is None:
        return {}
    match = _REFERENCE_PATTERN.search(references)
    if match is None:
        return {}
    name = _LEADING_BULLET.sub("", match.group("name")).strip()
    candidates: dict[str, Any] = {"reference_email": match.group("email")}
    if name:
        candidates["reference_name"] = name
    return candidates


OPENSATS_REQUIRED_FIELDS = (
    "general_fund",
    "main_focus",
    "project_name",
    "short_description",
    "potential_impact",
    "website",
    "github",
    "free_open_source",
    "license",
    "duration",
    "timelines",
    "commitment",
    "proposed_budget",
    "has_received_funding",
    "what_funding",
    "your_name",
    "email",
    "are_you_lead",
    "other_lead",
    "personal_github",
    "other_contact",
    "references",
    "bios",
    "years_experience",
    "anything_else",
)


def ensure_required_fields(source: Mapping[str, Any]) -> dict[str, Any]:
    """
    Blank placeholders for every field the OpenSats API rejects when absent.
    """

    return {field_name: "" for field_name in OPENSATS_REQUIRED_FIELDS}


def derive_citizenship(source: Mapping[str, Any]) -> dict[str, Any]:
    country = _text(source, "country")
    if country is None:
        return {}
    return {"citizenship_country": " ".join(country.split())}


ORGANIZATION_TRANSFORMS: dict[str, tuple[Transform, ...]] = {
    "opensats": (
        mark_common_grant_source,
        derive_short_description,
        normalize_prior_funding,
        ensure_required_fields,
    ),
    "maelstrom": (
        extract_reference_contact,
        derive_citizenship,
    ),
}


def transforms_for(organization_id: str) -> tuple[Transform, ...]:
    return ORGANIZATION_TRANSFORMS.get(organization_id, ())


def apply_transforms(
    payload: Mapping[str, Any],
    source: Mapping[str, Any],
    transforms: Sequence[Transform],
) -> dict[str, Any]:
    """
    Run transforms in order, filling only fields the payload lacks.

    Transforms read from the mapped application overlaid with the payload
    built so far, so later transforms see earlier fills.
    """

    result = dict(payload)
    for transform in transforms:
        candidates = transform({**source, **result})
        for key, value in candidates.items():
            if not is_defined(result.get(key)):
                result[key] = value
    return result
