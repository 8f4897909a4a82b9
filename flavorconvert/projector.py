"""
Module to project the PCR values and event logs of a legacy flavor into the
PCR logs of the new flavor schema.

SPDX-License-Identifier: BSD-3-Clause
Copyright 2020 Intel Corporation
"""

from typing import List, Optional

from flavorconvert.common.algorithms import same_bank
from flavorconvert.logger import Logger
from flavorconvert.pcr_rules import PcrRuleIndex
from flavorconvert.types import (
    EventlogEqualsType,
    LegacyEventType,
    LegacyPcrMapType,
    LegacyPcrValueType,
    NewEventType,
    PcrLogType,
    PcrRuleType,
)

logger = Logger().logger()


def pcr_key(index: int) -> str:
    """Key of a PCR in the legacy per-bank PCR map, e.g. 'pcr_7'"""
    return f"pcr_{index}"


def empty_pcr_log() -> PcrLogType:
    return {"pcr": {"index": 0, "bank": ""}, "measurement": "", "pcr_matches": False}


def positional_rule(rules: List[PcrRuleType], slot: int) -> PcrRuleType:
    """Return the rule whose flags apply to the PCR log at the given slot.

    The rule is picked by its position in the template, not by the PCR it
    targets. Both only agree while every rule targets a distinct PCR index
    and the legacy bank matches the bank of every rule before it.
    """
    return rules[slot]


def translate_events(events: List[LegacyEventType]) -> List[NewEventType]:
    """Translate legacy events into new schema events, keeping their order."""
    return [
        {
            "type_id": event.get("digest_type", ""),
            "tags": [event.get("label", "")],
            "measurement": event.get("value", ""),
        }
        for event in events
    ]


def project_pcr(
    pcr_log: PcrLogType, pcr_index: int, bank: str, expected: LegacyPcrValueType, rule: PcrRuleType
) -> None:
    """Fill a PCR log slot from a legacy PCR value and the rule of that slot."""
    pcr_log["pcr"] = {"index": pcr_index, "bank": bank}
    pcr_log["measurement"] = expected.get("value", "")
    pcr_log["pcr_matches"] = bool(rule.get("pcr_matches", False))

    events: Optional[List[LegacyEventType]] = expected.get("event")
    if events is None:
        return

    equals_rule = rule.get("eventlog_equals")
    if equals_rule is not None:
        eventlog_equals: EventlogEqualsType = {"events": translate_events(events)}
        if equals_rule.get("excluding_tags") is not None:
            eventlog_equals["exclude_tags"] = list(equals_rule["excluding_tags"])
        pcr_log["eventlog_equals"] = eventlog_equals

    if rule.get("eventlog_includes") is not None:
        pcr_log["eventlog_includes"] = translate_events(events)


def project_measurements(pcrs: LegacyPcrMapType, rule_index: PcrRuleIndex) -> List[PcrLogType]:
    """Project the legacy PCR map onto the PCR logs described by the rule index.

    There is one PCR log per indexed PCR. For every legacy bank the indexed
    PCRs are visited in order, and visiting stops at the first rule of a
    different bank. The slot written advances with every PCR visited, found
    in the legacy bank or not, so slots that are never written stay empty.
    Later banks overwrite the slots written by earlier ones.
    """
    pcr_logs = [empty_pcr_log() for _ in range(len(rule_index.banks))]

    for bank, pcr_map in pcrs.items():
        slot = 0
        for pcr_index, rule_bank in rule_index.banks.items():
            if not same_bank(bank, rule_bank):
                logger.debug(
                    "Bank %s does not match the bank %s of PCR %d; skipping remaining rules", bank, rule_bank, pcr_index
                )
                break

            expected = pcr_map.get(pcr_key(pcr_index))
            if expected is not None:
                project_pcr(pcr_logs[slot], pcr_index, bank, expected, positional_rule(rule_index.rules, slot))
            else:
                logger.debug("No %s measurement for PCR %d", bank, pcr_index)

            slot += 1

    return pcr_logs
