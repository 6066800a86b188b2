"""
app/workflows/field_mapper.py

Canonical-to-organization field renaming.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def map_fields(application: Mapping[str, Any], field_mapping: Mapping[str, str]) -> dict[str, Any]:
    """
    Copy canonical fields onto organization-specific names.

    For each source -> target pair the source value is copied when the source
    is present and the target is not. Existing keys are never removed or
    overwritten, so both names remain visible downstream. The input mapping is
    left untouched.
    """

    result = dict(application)
    for source_field, target_field in field_mapping.items():
        if application.get(source_field) is None:
            continue
        if result.get(target_field) is not None:
            continue
        result[target_field] = application[source_field]
    return result
