"""
Core data model: snapshots and the versions that place them in a history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticSerializationError

from ..errors import InvalidInputError
from .providers import Clock, system_clock


def _thaw(value: Any) -> Any:
    """Plain, independent copy of (possibly frozen) nested containers."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


def _freeze(value: Any) -> Any:
    """Read-only view of nested containers: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


class Snapshot(BaseModel):
    """
    Immutable document content plus metadata captured at one point in time.

    ``metadata`` is copied on construction and exposed read-only, so neither
    the caller's dict nor a reader of a committed version can change it.
    """

    model_config = ConfigDict(frozen=True)

    content: StrictStr
    metadata: Dict[str, Any] = Field(default_factory=dict, validate_default=True)
    author: StrictStr = ""
    message: StrictStr = ""
    created_at: datetime

    @field_validator("metadata", mode="before")
    @classmethod
    def _copy_metadata(cls, value: Any) -> Any:
        return _thaw(value) if isinstance(value, Mapping) else value

    @field_validator("metadata", mode="after")
    @classmethod
    def _freeze_metadata(cls, value: Dict[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_serializer("metadata")
    def _serialize_metadata(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return _thaw(value)

    @model_validator(mode="after")
    def _check_serializable(self) -> Snapshot:
        try:
            self.model_dump(mode="json")
        except PydanticSerializationError as e:
            raise ValueError(f"metadata must be JSON serializable: {e}") from e
        return self

    @classmethod
    def create(
        cls,
        content: Any,
        author: str = "",
        message: str = "",
        metadata: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None,
    ) -> Snapshot:
        """
        Build a snapshot, timestamped by ``clock``.

        Raises:
            InvalidInputError: if content is not text or a field is malformed
        """
        try:
            return cls(
                content=content,
                author=author,
                message=message,
                metadata=metadata or {},
                created_at=(clock or system_clock)(),
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid snapshot: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Snapshot:
        """Create from dictionary."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid snapshot: {e}") from e


@dataclass(frozen=True)
class VersionMetadata:
    """Listing view of a version, without its content."""

    document_id: str
    sequence: int
    parent_sequence: Optional[int]
    author: str
    message: str
    created_at: datetime
    committed_by: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "sequence": self.sequence,
            "parent_sequence": self.parent_sequence,
            "author": self.author,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "committed_by": self.committed_by,
        }


@dataclass(frozen=True)
class Version:
    """A snapshot placed at a sequence position in a document's history."""

    document_id: str
    sequence: int
    snapshot: Snapshot
    parent_sequence: Optional[int] = None
    committed_by: str = ""

    @property
    def content(self) -> str:
        return self.snapshot.content

    def summary(self) -> VersionMetadata:
        """Metadata-only view used for cheap listings."""
        return VersionMetadata(
            document_id=self.document_id,
            sequence=self.sequence,
            parent_sequence=self.parent_sequence,
            author=self.snapshot.author,
            message=self.snapshot.message,
            created_at=self.snapshot.created_at,
            committed_by=self.committed_by,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "document_id": self.document_id,
            "sequence": self.sequence,
            "parent_sequence": self.parent_sequence,
            "committed_by": self.committed_by,
            "snapshot": self.snapshot.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Version:
        """Create from dictionary."""
        return cls(
            document_id=data["document_id"],
            sequence=data["sequence"],
            snapshot=Snapshot.from_dict(data["snapshot"]),
            parent_sequence=data.get("parent_sequence"),
            committed_by=data.get("committed_by", ""),
        )
