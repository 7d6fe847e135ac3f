"""Heuristic extraction of attribute schemas from Terraform provider Go source.

This is not a Go parser. It locates a ``map[string]*schema.Schema`` literal
using an ordered list of structural patterns (first match wins), then walks
the literal's top-level entries and reads the handful of property keys the
plugin SDK uses. Anything it does not recognise is ignored.
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from core.errors import ParseError

from .models import (
    NESTING_LIST,
    NESTING_SET,
    NESTING_SINGLE,
    BlockType,
    Schema,
    SchemaAttribute,
)

logger = logging.getLogger(__name__)

_SCHEMA_MAP = r"map\[string\]\*schema\.Schema\s*\{"

# Ordered; the first pattern with a usable match decides the section.
SECTION_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [
    ("schema-field", re.compile(r"\bSchema:\s*" + _SCHEMA_MAP)),
    (
        "schema-func",
        re.compile(r"\bSchemaFunc:\s*func\(\)\s*map\[string\]\*schema\.Schema\s*\{\s*return\s+" + _SCHEMA_MAP),
    ),
    (
        "schema-accessor",
        re.compile(r"\bfunc\s+\w+Schema\(\)\s*map\[string\]\*schema\.Schema\s*\{\s*return\s+" + _SCHEMA_MAP),
    ),
    ("schema-var", re.compile(r"\bvar\s+\w+Schema\s*=\s*" + _SCHEMA_MAP)),
]

GO_TYPE_MAP: Dict[str, str] = {
    "String": "string",
    "Bool": "bool",
    "Int": "number",
    "Float": "number",
    "List": "list",
    "Set": "set",
    "Map": "map",
}

_NESTED_RESOURCE_PREFIX = re.compile(r"Elem:\s*&schema\.Resource\s*\{\s*$")
_LEADING_NOISE = r"(?:\s|//[^\n]*(?:\n|$)|/\*.*?\*/)*"
_ENTRY_RE = re.compile(_LEADING_NOISE + r'"([^"\\]+)"\s*:\s*(.*)\Z', re.S)
_FIELD_RE = re.compile(_LEADING_NOISE + r"([A-Za-z_]\w*)\s*:\s*(.*)\Z", re.S)
_BLOCK_OPEN_RE = re.compile(r"(?:&?schema\.Schema\s*)?\{")
_GO_TYPE_RE = re.compile(r"schema\.Type(\w+)")
_STRING_LITERAL_RE = re.compile(r'"((?:[^"\\\n]|\\.)*)"|`([^`]*)`', re.S)
_FUNC_REF_RE = re.compile(r"[A-Za-z_][\w.]*")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?\Z")

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\", "'": "'"}


def _skip_quoted(text: str, start: int, quote: str) -> int:
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n":
            break
        i += 1
    raise ParseError(f"Unterminated string literal at offset {start}")


def _code_chars(text: str, start: int = 0) -> Iterator[Tuple[int, str]]:
    """Yield (index, char) for characters outside string literals and comments."""
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "/" and text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        if ch == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ParseError(f"Unterminated block comment at offset {i}")
            i = end + 2
            continue
        if ch in ('"', "'"):
            i = _skip_quoted(text, i, ch)
            continue
        if ch == "`":
            end = text.find("`", i + 1)
            if end == -1:
                raise ParseError(f"Unterminated raw string at offset {i}")
            i = end + 1
            continue
        yield i, ch
        i += 1


def find_matching_brace(text: str, open_index: int) -> int:
    """Index of the ``}`` closing the ``{`` at ``open_index``."""
    depth = 0
    for i, ch in _code_chars(text, open_index):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    raise ParseError(f"Unbalanced braces in section starting at offset {open_index}")


def split_top_level(body: str) -> List[str]:
    """Split a composite-literal body on commas that are not nested."""
    segments = []
    depth = 0
    last = 0
    for i, ch in _code_chars(body):
        if ch in "{[(":
            depth += 1
        elif ch in "}])":
            depth -= 1
        elif ch == "," and depth == 0:
            segments.append(body[last:i])
            last = i + 1
    segments.append(body[last:])
    return [segment for segment in segments if segment.strip()]


def _unquote(raw: str) -> str:
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            out.append(_ESCAPES.get(raw[i + 1], raw[i + 1]))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _string_value(value: str) -> Optional[str]:
    """Concatenated string literal(s) of a value, or None when it is not a literal."""
    value = value.strip()
    if not value or value[0] not in ('"', "`"):
        return None
    parts = []
    for match in _STRING_LITERAL_RE.finditer(value):
        quoted, raw = match.groups()
        parts.append(_unquote(quoted) if quoted is not None else raw)
    return "".join(parts)


def _bool_value(value: Optional[str]) -> bool:
    return (value or "").strip() == "true"


def _int_value(value: Optional[str]) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        return 0


def _literal(value: str) -> Any:
    value = value.strip()
    text = _string_value(value)
    if text is not None:
        return text
    if value in ("true", "false"):
        return value == "true"
    if _NUMBER_RE.match(value):
        return float(value) if "." in value else int(value)
    return None


def map_go_type(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    match = _GO_TYPE_RE.search(value)
    if not match:
        return None
    kind = match.group(1)
    return GO_TYPE_MAP.get(kind, kind.lower())


def _section_bounds(text: str, pattern: "re.Pattern[str]") -> Optional[Tuple[int, int]]:
    for match in pattern.finditer(text):
        # A nested block's own Schema map is not the resource's top level.
        if _NESTED_RESOURCE_PREFIX.search(text[max(0, match.start() - 200):match.start()]):
            continue
        open_index = match.end() - 1
        return open_index, find_matching_brace(text, open_index)
    return None


def locate_schema_section(text: str) -> Optional[Tuple[str, str]]:
    """Return (pattern name, section body) for the first matching pattern."""
    for name, pattern in SECTION_PATTERNS:
        bounds = _section_bounds(text, pattern)
        if bounds:
            open_index, close_index = bounds
            return name, text[open_index + 1:close_index]
    return None


def _fields(body: str) -> Dict[str, str]:
    fields = {}
    for segment in split_top_level(body):
        match = _FIELD_RE.match(segment)
        if match:
            fields[match.group(1)] = match.group(2).strip()
    return fields


def _validation_refs(fields: Dict[str, str]) -> Optional[List[str]]:
    refs = []
    for key in ("ValidateFunc", "ValidateDiagFunc"):
        value = fields.get(key)
        if not value:
            continue
        match = _FUNC_REF_RE.match(value)
        if match:
            refs.append(match.group(0))
    return refs or None


def _parse_nested_resource(elem: str) -> Optional[Tuple[Dict[str, SchemaAttribute], Dict[str, BlockType]]]:
    match = SECTION_PATTERNS[0][1].search(elem)
    if not match:
        return None
    open_index = match.end() - 1
    close_index = find_matching_brace(elem, open_index)
    return parse_schema_map(elem[open_index + 1:close_index])


def parse_attribute(body: str) -> Tuple[SchemaAttribute, Optional[BlockType]]:
    """Parse one ``"name": { ... }`` property list."""
    fields = _fields(body)
    attr_type = map_go_type(fields.get("Type"))
    deprecated_text = _string_value(fields.get("Deprecated", ""))

    attribute = SchemaAttribute(
        description=_string_value(fields.get("Description", "")) or "",
        required=_bool_value(fields.get("Required")),
        optional=_bool_value(fields.get("Optional")),
        computed=_bool_value(fields.get("Computed")),
        type=attr_type,
        force_new=True if _bool_value(fields.get("ForceNew")) else None,
        sensitive=True if _bool_value(fields.get("Sensitive")) else None,
        deprecated=True if deprecated_text else None,
        default=_literal(fields["Default"]) if "Default" in fields else None,
        validation_refs=_validation_refs(fields),
    )

    block = None
    elem = fields.get("Elem")
    if elem and "schema.Resource" in elem:
        parsed = _parse_nested_resource(elem)
        if parsed is not None:
            nested, _ = parsed
            attribute.elem_type = "resource"
            attribute.nested = nested
            nesting = attr_type if attr_type in (NESTING_LIST, NESTING_SET) else NESTING_SINGLE
            block = BlockType(
                nesting=nesting,
                attributes=nested,
                min_items=_int_value(fields.get("MinItems")),
                max_items=_int_value(fields.get("MaxItems")),
                description=attribute.description,
            )
    elif elem and "schema.Schema" in elem:
        attribute.elem_type = map_go_type(elem)

    return attribute, block


def parse_schema_map(body: str) -> Tuple[Dict[str, SchemaAttribute], Dict[str, BlockType]]:
    """Parse the entries of a ``map[string]*schema.Schema`` literal body."""
    attributes: Dict[str, SchemaAttribute] = {}
    block_types: Dict[str, BlockType] = {}
    for segment in split_top_level(body):
        match = _ENTRY_RE.match(segment)
        if not match:
            continue
        name, value = match.group(1), match.group(2)
        opening = _BLOCK_OPEN_RE.match(value)
        closing = value.rfind("}")
        if not opening or closing < opening.end():
            # e.g. "tags": tftags.TagsSchema(); the value is not a literal we can read
            continue
        attribute, block = parse_attribute(value[opening.end():closing])
        attributes[name] = attribute
        if block is not None:
            block_types[name] = block
    return attributes, block_types


def parse_go_schema(text: str, source: Optional[str] = None) -> Schema:
    """Extract a Schema from provider source text.

    Returns an empty Schema when no section pattern matches. Raises
    ParseError when a section is found but cannot be delimited.
    """
    located = locate_schema_section(text)
    if located is None:
        logger.debug(f"No schema section found in {source or 'source'}")
        return Schema()
    pattern_name, body = located
    attributes, block_types = parse_schema_map(body)
    logger.debug(
        f"Parsed {len(attributes)} attributes and {len(block_types)} block types "
        f"from {source or 'source'} using {pattern_name}"
    )
    return Schema(attributes=attributes, block_types=block_types)
