import unittest

from flavorconvert.pcr_rules import EMPTY_RULE_INDEX, build_rule_index, rules_by_part, to_flavor_part
from flavorconvert.types import FlavorPart


def rule(index, bank="SHA256", **kwargs):
    r = {"pcr": {"index": index, "bank": bank}, "pcr_matches": True}
    r.update(kwargs)
    return r


TEMPLATE = {
    "id": "t1",
    "label": "t1",
    "condition": ["//host_info/vendor//*[text()='Linux']"],
    "flavor_parts": {
        "PLATFORM": {"pcr_rules": [rule(0), rule(7, eventlog_includes=["shim"]), rule(0, "SHA384")]},
        "OS": {"pcr_rules": []},
        "HOST_UNIQUE": None,
    },
}


class TestPcrRules(unittest.TestCase):
    def test_to_flavor_part(self):
        self.assertEqual(to_flavor_part("PLATFORM"), FlavorPart.PLATFORM)
        self.assertEqual(to_flavor_part("HOST_UNIQUE"), FlavorPart.HOST_UNIQUE)
        self.assertIsNone(to_flavor_part("SOFTWARE"))
        self.assertIsNone(to_flavor_part("platform"))

    def test_rules_by_part_covers_every_part(self):
        rules = rules_by_part(TEMPLATE)
        self.assertEqual(set(rules.keys()), set(FlavorPart))
        self.assertEqual(len(rules[FlavorPart.PLATFORM]), 3)
        self.assertEqual(rules[FlavorPart.OS], [])
        self.assertEqual(rules[FlavorPart.HOST_UNIQUE], [])

        self.assertEqual(rules_by_part({"label": "x"}), {part: [] for part in FlavorPart})

    def test_build_rule_index(self):
        index = build_rule_index("PLATFORM", TEMPLATE)
        # The later rule for PCR 0 replaces the bank and keeps the position
        self.assertEqual(list(index.banks.items()), [(0, "SHA384"), (7, "SHA256")])
        self.assertEqual(len(index.banks), 2)
        self.assertEqual(index.rules, TEMPLATE["flavor_parts"]["PLATFORM"]["pcr_rules"])

    def test_build_rule_index_without_rules(self):
        self.assertEqual(build_rule_index("OS", TEMPLATE), EMPTY_RULE_INDEX)
        self.assertEqual(build_rule_index("HOST_UNIQUE", TEMPLATE), EMPTY_RULE_INDEX)
        self.assertEqual(build_rule_index("SOFTWARE", TEMPLATE), EMPTY_RULE_INDEX)
        self.assertEqual(build_rule_index("", TEMPLATE), EMPTY_RULE_INDEX)
        self.assertEqual(EMPTY_RULE_INDEX.banks, {})


if __name__ == "__main__":
    unittest.main()
