import enum
import sys
from typing import Any, Dict, List, TypedDict

if sys.version_info >= (3, 11):
    from typing import NotRequired, Required
else:
    from typing_extensions import NotRequired, Required


class FlavorPart(str, enum.Enum):
    """Flavor part categories"""

    PLATFORM = "PLATFORM"
    OS = "OS"
    HOST_UNIQUE = "HOST_UNIQUE"

    def __str__(self) -> str:
        return self.value


### Legacy (signed) flavor part types


class LegacyEventType(TypedDict):
    label: NotRequired[str]
    digest_type: Required[str]
    value: Required[str]
    info: NotRequired[Dict[str, Any]]


class LegacyPcrValueType(TypedDict):
    value: Required[str]
    event: NotRequired[List[LegacyEventType]]


# Bank name -> "pcr_<index>" -> measurement
LegacyPcrMapType = Dict[str, Dict[str, LegacyPcrValueType]]


class SignedFlavorType(TypedDict):
    flavor: Required[Dict[str, Any]]
    signature: NotRequired[str]


class LegacyFlavorPartType(TypedDict):
    signed_flavors: Required[List[SignedFlavorType]]


### Flavor template types


class PcrType(TypedDict):
    index: Required[int]
    bank: Required[str]


class EventlogEqualsRuleType(TypedDict):
    excluding_tags: NotRequired[List[str]]


class PcrRuleType(TypedDict):
    pcr: Required[PcrType]
    pcr_matches: NotRequired[bool]
    eventlog_equals: NotRequired[EventlogEqualsRuleType]
    eventlog_includes: NotRequired[List[str]]


class FlavorPartRulesType(TypedDict):
    meta: NotRequired[Dict[str, Any]]
    pcr_rules: NotRequired[List[PcrRuleType]]


class FlavorTemplateType(TypedDict):
    id: NotRequired[str]
    label: NotRequired[str]
    condition: NotRequired[List[str]]
    flavor_parts: NotRequired[Dict[str, FlavorPartRulesType]]


### New flavor schema types


class NewEventType(TypedDict):
    type_id: str
    tags: List[str]
    measurement: str


class EventlogEqualsType(TypedDict):
    events: List[NewEventType]
    exclude_tags: NotRequired[List[str]]


class PcrLogType(TypedDict):
    pcr: Required[PcrType]
    measurement: Required[str]
    pcr_matches: Required[bool]
    eventlog_equals: NotRequired[EventlogEqualsType]
    eventlog_includes: NotRequired[List[NewEventType]]
