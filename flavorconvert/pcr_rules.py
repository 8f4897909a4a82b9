from typing import Dict, List, NamedTuple, Optional

from flavorconvert.logger import Logger
from flavorconvert.types import FlavorPart, FlavorTemplateType, PcrRuleType

logger = Logger().logger()


class PcrRuleIndex(NamedTuple):
    """PCR rules of one template for one flavor part category.

    banks maps each PCR index to the bank of its rule, in rule order. A later
    rule for an index already seen replaces the bank but keeps the position.
    rules is the rule list the index was built from, in template order.
    """

    banks: Dict[int, str]
    rules: List[PcrRuleType]


EMPTY_RULE_INDEX = PcrRuleIndex({}, [])


def to_flavor_part(name: str) -> Optional[FlavorPart]:
    try:
        return FlavorPart(name)
    except ValueError:
        return None


def rules_by_part(template: FlavorTemplateType) -> Dict[FlavorPart, List[PcrRuleType]]:
    """Map every flavor part category to the PCR rules the template defines for it."""
    flavor_parts = template.get("flavor_parts") or {}
    rules: Dict[FlavorPart, List[PcrRuleType]] = {}
    for part in FlavorPart:
        part_rules = flavor_parts.get(part.value) or {}
        rules[part] = list(part_rules.get("pcr_rules") or [])
    return rules


def build_rule_index(flavor_part: str, template: FlavorTemplateType) -> PcrRuleIndex:
    """Build the PCR rule index of a template for a flavor part category.

    An unknown category, or a category without rules in the template, gives
    an empty index.
    """
    part = to_flavor_part(flavor_part)
    if part is None:
        logger.debug("Unknown flavor part %s; no PCR rules apply", flavor_part)
        return EMPTY_RULE_INDEX

    rules = rules_by_part(template)[part]
    if not rules:
        logger.debug("Flavor template %s has no PCR rules for %s", template.get("label", ""), part)
        return EMPTY_RULE_INDEX

    banks: Dict[int, str] = {}
    for rule in rules:
        banks[int(rule["pcr"]["index"])] = rule["pcr"]["bank"]

    return PcrRuleIndex(banks, rules)
