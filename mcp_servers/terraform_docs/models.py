"""Canonical schema, repository and fetch-outcome types."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

ORIGIN_EXTRACTED = "extracted"
ORIGIN_CURATED = "curated-fallback"
ORIGIN_GENERIC = "generic-fallback"

NESTING_LIST = "list"
NESTING_SET = "set"
NESTING_SINGLE = "single"


@dataclass
class SchemaAttribute:
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    type: Optional[str] = None
    elem_type: Optional[str] = None
    nested: Optional[Dict[str, "SchemaAttribute"]] = None
    force_new: Optional[bool] = None
    sensitive: Optional[bool] = None
    deprecated: Optional[bool] = None
    default: Any = None
    validation_refs: Optional[List[str]] = None

    def __post_init__(self):
        # required wins when a source marks an attribute both ways
        if self.required and self.optional:
            self.optional = False

    @property
    def is_block(self) -> bool:
        return bool(self.nested) or self.elem_type == "resource"


@dataclass
class BlockType:
    nesting: str
    attributes: Dict[str, SchemaAttribute] = field(default_factory=dict)
    min_items: int = 0
    max_items: int = 0
    description: str = ""

    def as_attribute(self) -> SchemaAttribute:
        """View of this block as a block-typed attribute with nested children."""
        return SchemaAttribute(
            description=self.description or "",
            required=self.min_items > 0,
            optional=self.min_items == 0,
            type=self.nesting if self.nesting in (NESTING_LIST, NESTING_SET) else None,
            elem_type="resource",
            nested=dict(self.attributes),
        )


@dataclass
class Schema:
    attributes: Dict[str, SchemaAttribute] = field(default_factory=dict)
    block_types: Dict[str, BlockType] = field(default_factory=dict)
    resource_name: Optional[str] = None
    provider_name: Optional[str] = None
    source_url: Optional[str] = None
    origin: str = ORIGIN_EXTRACTED

    def all_attributes(self) -> Dict[str, SchemaAttribute]:
        """Attributes plus any block types not already present as attributes."""
        merged = dict(self.attributes)
        for name, block in self.block_types.items():
            if name not in merged:
                merged[name] = block.as_attribute()
        return merged

    def is_empty(self) -> bool:
        return not self.attributes and not self.block_types


@dataclass(frozen=True)
class GitHubRepo:
    owner: str
    name: str
    default_branch: str = "main"
    schema_patterns: Tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


FETCH_SUCCESS = "success"
FETCH_EMPTY = "empty"
FETCH_FAILURE = "failure"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one candidate-path fetch; failures are values, not exceptions."""

    status: str
    path: str
    body: str = ""
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == FETCH_SUCCESS

    @classmethod
    def success(cls, path: str, body: str) -> "FetchOutcome":
        if not body.strip():
            return cls(status=FETCH_EMPTY, path=path)
        return cls(status=FETCH_SUCCESS, path=path, body=body)

    @classmethod
    def failure(cls, path: str, error: str, status_code: Optional[int] = None) -> "FetchOutcome":
        return cls(status=FETCH_FAILURE, path=path, error=error, status_code=status_code)


def schema_to_api(schema: Schema) -> Dict[str, Any]:
    """Flatten the recursive schema into the externally exposed shape."""
    attributes: Dict[str, Dict[str, Any]] = {}
    for name, attr in schema.all_attributes().items():
        entry: Dict[str, Any] = {
            "description": attr.description,
            "required": attr.required,
        }
        if attr.type:
            entry["type"] = attr.type
        if attr.nested:
            entry["nested"] = True
        attributes[name] = entry
    return {"attributes": attributes}
