"""
Module to convert a legacy signed flavor part into a flavor collection that
follows the flavor template based schema.

SPDX-License-Identifier: BSD-3-Clause
Copyright 2020 Intel Corporation
"""

import copy
import json
from typing import Any, Dict, List, Optional, Union

import jsonschema

from flavorconvert.common.exception import FlavorPartFormatError
from flavorconvert.logger import Logger
from flavorconvert.pcr_rules import build_rule_index
from flavorconvert.projector import project_measurements
from flavorconvert.templates import get_flavor_templates
from flavorconvert.types import FlavorTemplateType, LegacyFlavorPartType, PcrLogType, SignedFlavorType

logger = Logger().logger()

_LEGACY_EVENT_SCHEMA = {
    "type": "object",
    "properties": {
        "label": {"type": "string"},
        "digest_type": {"type": "string"},
        "value": {"type": "string"},
    },
}

_LEGACY_FEATURE_SCHEMA = {
    "type": ["object", "null"],
    "properties": {"enabled": {"type": ["boolean", "string", "null"]}},
}

_LEGACY_PCR_MAP_SCHEMA = {
    "type": ["object", "null"],
    "additionalProperties": {
        "type": "object",
        "additionalProperties": {
            "type": "object",
            "required": ["value"],
            "properties": {
                "value": {"type": "string"},
                "event": {"type": ["array", "null"], "items": _LEGACY_EVENT_SCHEMA},
            },
        },
    },
}

LEGACY_FLAVOR_PART_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Legacy signed flavor part",
    "type": "object",
    "required": ["signed_flavors"],
    "properties": {
        "signed_flavors": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["flavor"],
                "properties": {
                    "flavor": {
                        "type": "object",
                        "properties": {
                            "meta": {
                                "type": ["object", "null"],
                                "properties": {
                                    "description": {
                                        "type": ["object", "null"],
                                        "properties": {
                                            "flavor_template_ids": {
                                                "type": ["array", "null"],
                                                "items": {"type": "string"},
                                            },
                                        },
                                    },
                                },
                            },
                            "hardware": {
                                "type": ["object", "null"],
                                "properties": {
                                    "feature": {
                                        "type": ["object", "null"],
                                        "additionalProperties": _LEGACY_FEATURE_SCHEMA,
                                    },
                                },
                            },
                            "pcrs": _LEGACY_PCR_MAP_SCHEMA,
                        },
                    },
                    "signature": {"type": ["string", "null"]},
                },
            },
        },
    },
}


def parse_flavor_part(data: Union[str, bytes]) -> LegacyFlavorPartType:
    """Parse and validate a legacy signed flavor part.

    :raises FlavorPartFormatError: if the data is not JSON or is not a legacy
        flavor part. Already converted flavor collections are rejected too.
    """
    try:
        parsed = json.loads(data)
    except (json.decoder.JSONDecodeError, UnicodeDecodeError) as e:
        raise FlavorPartFormatError(f"Error in parsing the old flavor part json: {e}") from e

    try:
        jsonschema.validate(instance=parsed, schema=LEGACY_FLAVOR_PART_SCHEMA)
    except jsonschema.exceptions.ValidationError as e:
        raise FlavorPartFormatError(f"Input is not a legacy signed flavor part: {e.message}") from e

    flavor_part: LegacyFlavorPartType = parsed
    return flavor_part


def feature_enabled(flavor: Dict[str, Any], feature: str) -> bool:
    """Check whether the hardware feature block reports the feature as enabled"""
    features = (flavor.get("hardware") or {}).get("feature") or {}
    enabled = (features.get(feature) or {}).get("enabled")
    return enabled is True or enabled == "true"


def _description(flavor: Dict[str, Any]) -> Dict[str, Any]:
    if flavor.get("meta") is None:
        flavor["meta"] = {}
    if flavor["meta"].get("description") is None:
        flavor["meta"]["description"] = {}
    description: Dict[str, Any] = flavor["meta"]["description"]
    return description


def flavor_part_name(flavor: Dict[str, Any]) -> str:
    description = (flavor.get("meta") or {}).get("description") or {}
    return str(description.get("flavor_part", ""))


def update_meta(flavor: Dict[str, Any]) -> None:
    """Derive the feature flags of the meta description from the hardware block.

    CBNT takes precedence over SUEFI; at most one flag is set.
    """
    if feature_enabled(flavor, "CBNT"):
        _description(flavor)["cbnt_enabled"] = True
    elif feature_enabled(flavor, "SUEFI"):
        _description(flavor)["suefi_enabled"] = True


def convert_signed_flavor(signed_flavor: SignedFlavorType, templates: List[FlavorTemplateType]) -> SignedFlavorType:
    """Convert one signed flavor; the input is left unchanged.

    Every template adds its id to the flavor template ids of the meta
    description. The PCR logs come from the last template that has PCR rules
    for the flavor part; projections of earlier templates are discarded.
    """
    converted: SignedFlavorType = copy.deepcopy(signed_flavor)
    flavor = converted["flavor"]

    update_meta(flavor)

    # The result is a flavor collection, not a set of signed flavors
    converted["signature"] = ""

    pcrs = flavor.get("pcrs")
    if pcrs is None:
        return converted

    part = flavor_part_name(flavor)
    pcr_logs: Optional[List[PcrLogType]] = None
    for template in templates:
        description = _description(flavor)
        if description.get("flavor_template_ids") is None:
            description["flavor_template_ids"] = []
        description["flavor_template_ids"].append(template.get("id", ""))

        rule_index = build_rule_index(part, template)
        if not rule_index.rules:
            continue

        if pcr_logs is not None:
            logger.warning(
                "Flavor template %s replaces the PCR logs of a previous template for flavor part %s",
                template.get("label", ""),
                part,
            )
        pcr_logs = project_measurements(pcrs, rule_index)

    del flavor["pcrs"]
    flavor["pcr_logs"] = pcr_logs if pcr_logs is not None else []

    return converted


def convert_flavor_part(
    flavor_part: LegacyFlavorPartType, templates: List[FlavorTemplateType]
) -> List[SignedFlavorType]:
    """Convert all signed flavors of a legacy flavor part with the selected templates."""
    return [convert_signed_flavor(signed_flavor, templates) for signed_flavor in flavor_part["signed_flavors"]]


def convert(data: Union[str, bytes], templates_dir: str) -> List[SignedFlavorType]:
    """Parse a legacy flavor part, select its templates and convert it."""
    flavor_part = parse_flavor_part(data)
    templates = get_flavor_templates(flavor_part, templates_dir)
    if not templates:
        logger.warning("No flavor template applies to the flavor part")
    return convert_flavor_part(flavor_part, templates)
