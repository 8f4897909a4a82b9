import json
import types
import typing

from flavorconvert.logger import Logger

# This module evaluates the activation conditions of flavor templates
# against a legacy flavor part document.
# Template conditions are written against the host manifest ("host_info"),
# so each one is translated to the equivalent query on the legacy document.

# Data is the type of Python data that corresponds to JSON values.
Data = typing.Union[int, float, str, bool, typing.Mapping[str, "Data"], typing.List["Data"], None]

logger = Logger().logger()


def json_text(value: Data) -> typing.Optional[str]:
    """Render a JSON scalar the way it is written in a document, None for containers"""
    if isinstance(value, (dict, list)):
        return None
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value)


class DocumentQuery(typing.NamedTuple):
    """Query for a key path, anchored at any depth, whose value has the given text.

    The textual form is the XPath-like notation used by flavor templates,
    e.g. //hardware/feature/CBNT/enabled//*[text()='true']
    """

    path: typing.Tuple[str, ...]
    expected: str

    def __str__(self) -> str:
        if not self.path:
            return ""
        return "//" + "/".join(self.path) + f"//*[text()='{self.expected}']"

    def evaluate(self, document: Data) -> typing.List[Data]:
        """Return every value in the document selected by this query"""
        if not self.path:
            return []
        found: typing.List[Data] = []
        for node in _walk(document):
            for value in _follow(node, self.path):
                if self._has_text(value):
                    found.append(value)
        return found

    def matches(self, document: Data) -> bool:
        return any(v is not None for v in self.evaluate(document))

    def _has_text(self, value: Data) -> bool:
        if isinstance(value, list):
            return any(json_text(v) == self.expected for v in value)
        return json_text(value) == self.expected


def _walk(node: Data) -> typing.Iterator[Data]:
    """Pre-order traversal of all objects in a document"""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            yield current
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))


def _follow(node: Data, path: typing.Tuple[str, ...]) -> typing.Iterator[Data]:
    """Yield the values reached from node by following path as child keys"""
    if not path:
        yield node
        return
    if isinstance(node, dict):
        if path[0] in node:
            yield from _follow(node[path[0]], path[1:])
    elif isinstance(node, list):
        # A named child of an array is the named child of any of its elements
        for elt in node:
            if isinstance(elt, dict):
                yield from _follow(elt, path)


# Unknown conditions resolve to this query, which selects nothing
EMPTY_QUERY = DocumentQuery((), "")

CONDITION_QUERIES: typing.Mapping[str, DocumentQuery] = types.MappingProxyType(
    {
        "//host_info/tboot_installed//*[text()='true']": DocumentQuery(
            ("meta", "description", "tboot_installed"), "true"
        ),
        "//host_info/hardware_features/SUEFI/enabled//*[text()='true']": DocumentQuery(
            ("hardware", "feature", "SUEFI", "enabled"), "true"
        ),
        "//host_info/hardware_features/cbnt/enabled//*[text()='true']": DocumentQuery(
            ("hardware", "feature", "CBNT", "enabled"), "true"
        ),
        "//host_info/vendor//*[text()='Linux']": DocumentQuery(("meta", "vendor"), "INTEL"),
        "//host_info/tpm_version//*[text()='2.0']": DocumentQuery(("meta", "description", "tpm_version"), "2.0"),
    }
)


def resolve_condition(condition: str) -> DocumentQuery:
    """Translate a template condition into a query on the legacy flavor part"""
    query = CONDITION_QUERIES.get(condition)
    if query is None:
        logger.debug("Unknown template condition %s; it will not be satisfied", condition)
        return EMPTY_QUERY
    return query


def evaluate_condition(condition: str, document: Data) -> bool:
    """Check whether the legacy flavor part satisfies the template condition"""
    query = resolve_condition(condition)
    result = query.matches(document)
    logger.debug("Condition %s (query %s) evaluated to %s", condition, query, result)
    return result
