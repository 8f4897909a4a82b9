"""
Module to load flavor templates and select the ones that apply to a legacy
flavor part.

SPDX-License-Identifier: BSD-3-Clause
Copyright 2020 Intel Corporation
"""

import json
import os
from typing import Iterable, List

import jsonschema

from flavorconvert.common.exception import TemplateFormatError, TemplateIOError
from flavorconvert.conditions import Data, evaluate_condition
from flavorconvert.logger import Logger
from flavorconvert.types import FlavorPart, FlavorTemplateType

logger = Logger().logger()

_NULLABLE_TAG_LIST = {"type": ["array", "null"], "items": {"type": "string"}}

PCR_RULE_SCHEMA = {
    "type": "object",
    "required": ["pcr"],
    "properties": {
        "pcr": {
            "type": "object",
            "required": ["index", "bank"],
            "properties": {
                "index": {"type": "integer", "minimum": 0},
                "bank": {"type": "string"},
            },
        },
        "pcr_matches": {"type": "boolean"},
        "eventlog_equals": {
            "type": ["object", "null"],
            "properties": {
                "excluding_tags": _NULLABLE_TAG_LIST,
            },
        },
        "eventlog_includes": _NULLABLE_TAG_LIST,
    },
}

FLAVOR_TEMPLATE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Flavor template",
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "label": {"type": "string"},
        "condition": {"type": ["array", "null"], "items": {"type": "string"}},
        "flavor_parts": {
            "type": ["object", "null"],
            "properties": {
                part.value: {
                    "type": ["object", "null"],
                    "properties": {
                        "meta": {"type": ["object", "null"]},
                        "pcr_rules": {"type": ["array", "null"], "items": PCR_RULE_SCHEMA},
                    },
                }
                for part in FlavorPart
            },
        },
    },
}


def parse_template(template: str) -> FlavorTemplateType:
    """Parse and validate a flavor template given as JSON text.

    :param template: the template JSON
    :return: the template as a dict
    :raises TemplateFormatError: if the template is not valid JSON or does not
        follow the flavor template schema
    """
    try:
        parsed = json.loads(template)
    except json.decoder.JSONDecodeError as e:
        raise TemplateFormatError(f"Error in unmarshaling the flavor template: {e}") from e

    try:
        jsonschema.validate(instance=parsed, schema=FLAVOR_TEMPLATE_SCHEMA)
    except jsonschema.exceptions.ValidationError as e:
        raise TemplateFormatError(f"Flavor template does not follow the template schema: {e.message}") from e

    parsed_template: FlavorTemplateType = parsed
    return parsed_template


def template_applies(template: FlavorTemplateType, flavor_part: Data) -> bool:
    """Check whether every condition of the template holds on the flavor part.

    Templates without a label, and templates without conditions, never apply.
    """
    if not template.get("label"):
        return False

    conditions = template.get("condition") or []
    if not conditions:
        logger.debug("Flavor template %s has no conditions; skipping it", template["label"])
        return False

    for condition in conditions:
        if not evaluate_condition(condition, flavor_part):
            logger.debug("Flavor template %s does not apply: %s not satisfied", template["label"], condition)
            return False

    return True


def find_templates_to_apply(flavor_part: Data, templates: Iterable[str]) -> List[FlavorTemplateType]:
    """Return, in the given order, the parsed templates that apply to the flavor part.

    A malformed template aborts the selection.
    """
    selected: List[FlavorTemplateType] = []
    for template in templates:
        flavor_template = parse_template(template)

        if not flavor_template.get("label"):
            logger.debug("Ignoring flavor template %s without label", flavor_template.get("id", ""))
            continue

        if template_applies(flavor_template, flavor_part):
            logger.info("Applying flavor template %s", flavor_template["label"])
            selected.append(flavor_template)

    return selected


def load_templates(directory: str) -> List[str]:
    """Read all flavor template files in a directory, in file name order."""
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        raise TemplateIOError(path=directory) from e

    templates: List[str] = []
    for name in names:
        path = os.path.join(directory, name)
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                templates.append(f.read())
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateIOError(f"Error in reading the template file - {name}") from e
        logger.debug("Loaded flavor template file %s", path)

    return templates


def get_flavor_templates(flavor_part: Data, directory: str) -> List[FlavorTemplateType]:
    """Load the template library and select the templates for the flavor part."""
    return find_templates_to_apply(flavor_part, load_templates(directory))
