from __future__ import annotations

import pytest

from app.workflows.transforms import (
    COMMON_GRANT_SOURCE,
    OPENSATS_REQUIRED_FIELDS,
    apply_transforms,
    derive_citizenship,
    derive_short_description,
    extract_reference_contact,
    normalize_prior_funding,
    transforms_for,
)


def test_short_description_is_derived_when_absent() -> None:
    source = {"project_description": "A long description of the project."}

    result = apply_transforms({}, source, [derive_short_description])

    assert result["short_description"] == "A long description of the project."


def test_short_description_is_kept_when_present() -> None:
    source = {"project_description": "Long", "short_description": "Short"}

    result = apply_transforms({"short_description": "Short"}, source, [derive_short_description])

    assert result["short_description"] == "Short"


@pytest.mark.parametrize("answer", ["No", "none", "N/A", "nope."])
def test_negative_prior_funding_answers(answer: str) -> None:
    assert normalize_prior_funding({"existing_funding": answer}) == {"has_received_funding": False}


def test_prior_funding_detail_is_split_into_flag_and_text() -> None:
    candidates = normalize_prior_funding({"prior_funding": "  HRF grant in 2023  "})

    assert candidates == {"has_received_funding": True, "what_funding": "HRF grant in 2023"}


def test_prior_funding_does_not_overwrite_existing_answer() -> None:
    payload = {"has_received_funding": False, "what_funding": "Already described"}

    result = apply_transforms(payload, {"existing_funding": "Spiral"}, [normalize_prior_funding])

    assert result["has_received_funding"] is False
    assert result["what_funding"] == "Already described"


def test_reference_contact_is_extracted() -> None:
    references = "- Jane Doe, jane@example.org\n- John Roe, john@example.org"

    candidates = extract_reference_contact({"references": references})

    assert candidates == {"reference_name": "Jane Doe", "reference_email": "jane@example.org"}


def test_reference_without_email_yields_nothing() -> None:
    assert extract_reference_contact({"references": "Ask around on the mailing list"}) == {}


def test_citizenship_is_copied_from_normalized_country() -> None:
    assert derive_citizenship({"country": "  El   Salvador "}) == {"citizenship_country": "El Salvador"}


def test_opensats_transforms_fill_defaults_in_order() -> None:
    source = {"project_description": "Desc", "existing_funding": "Brink 2022"}

    result = apply_transforms({"project_name": "p"}, source, transforms_for("opensats"))

    assert result["source"] == COMMON_GRANT_SOURCE
    assert result["general_fund"] is True
    assert result["short_description"] == "Desc"
    assert result["has_received_funding"] is True
    assert result["what_funding"] == "Brink 2022"
    assert result["project_name"] == "p"


def test_unknown_organization_has_no_transforms() -> None:
    assert transforms_for("unknown") == ()


def test_apply_transforms_does_not_mutate_payload() -> None:
    payload = {"project_name": "p"}

    apply_transforms(payload, {"country": "Kenya"}, [derive_citizenship])

    assert payload == {"project_name": "p"}


def test_required_opensats_fields_are_filled_with_blanks() -> None:
    result = apply_transforms({"your_name": "Satoshi"}, {}, transforms_for("opensats"))

    assert set(OPENSATS_REQUIRED_FIELDS) <= set(result)
    assert result["your_name"] == "Satoshi"
    assert result["main_focus"] == ""
    assert result["general_fund"] is True


def test_required_fields_do_not_hide_derived_values() -> None:
    source = {"project_description": "Desc", "existing_funding": "no"}

    result = apply_transforms({"bios": None}, source, transforms_for("opensats"))

    assert result["short_description"] == "Desc"
    assert result["has_received_funding"] is False
    assert result["what_funding"] == ""
    assert result["bios"] == ""
