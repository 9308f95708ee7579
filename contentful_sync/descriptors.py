"""Content type and entry descriptors, and loading them from disk."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class DescriptorError(ValueError):
    """A descriptor is missing or malformed."""
    pass


class FieldDefinition(BaseModel):
    """One field of a content type, plus its optional editor appearance."""

    model_config = ConfigDict(extra="allow")

    id: str
    appearance: Optional[Dict[str, Any]] = None

    def to_api(self) -> Dict[str, Any]:
        """Field body as submitted, without the appearance hint."""
        return self.model_dump(exclude={"appearance"}, exclude_unset=True)


class ContentTypeDescriptor(BaseModel):
    """A locally defined content model."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    fields: List[FieldDefinition] = Field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        """Request body for the content type PUT."""
        body = self.model_dump(exclude={"id", "fields"}, exclude_unset=True)
        body["fields"] = [field.to_api() for field in self.fields]
        return body

    def editor_controls(self) -> List[Dict[str, Any]]:
        """Editor interface controls for every field carrying an appearance."""
        return [
            {"fieldId": field.id, **field.appearance}
            for field in self.fields
            if field.appearance is not None
        ]


class EntryDescriptor(BaseModel):
    """A locally defined entry, in remote (``sys``) or flat form."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    sys: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
    fields: Dict[str, Any] = Field(default_factory=dict)

    @property
    def entry_id(self) -> Optional[str]:
        return self.sys.get("id") or self.id

    @property
    def content_type_id(self) -> Optional[str]:
        content_type = self.sys.get("contentType")
        if isinstance(content_type, Mapping):
            ct_id = (content_type.get("sys") or {}).get("id")
            if ct_id:
                return ct_id
        return self.content_type

    def to_api(self) -> Dict[str, Any]:
        """Request body for entry create and update calls."""
        return {"fields": self.fields}


class DirectorySource:
    """Descriptor documents read from ``*.json`` files in one directory."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def documents(self) -> Iterator[Tuple[str, Any]]:
        if not self.path.is_dir():
            raise DescriptorError(f"Descriptor directory not found: {self.path}")

        for file_path in sorted(self.path.glob("*.json")):
            if file_path.name.startswith("."):
                continue
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    yield file_path.name, json.load(f)
            except json.JSONDecodeError as e:
                raise DescriptorError(f"Invalid JSON in {file_path}: {e}") from e


class InMemorySource:
    """Descriptor documents supplied directly by the caller."""

    def __init__(self, documents: Mapping[str, Any]):
        self._documents = dict(documents)

    def documents(self) -> Iterator[Tuple[str, Any]]:
        yield from sorted(self._documents.items(), key=lambda item: item[0])


def flatten(items: Any) -> List[Any]:
    """Flatten arbitrarily nested lists and tuples into one flat list."""
    if not isinstance(items, (list, tuple)):
        return [items]

    flat: List[Any] = []
    stack = [iter(items)]
    while stack:
        for item in stack[-1]:
            if isinstance(item, (list, tuple)):
                stack.append(iter(item))
                break
            flat.append(item)
        else:
            stack.pop()
    return flat


def _documents(source: Any) -> Iterable[Tuple[str, Any]]:
    if isinstance(source, (str, Path)):
        source = DirectorySource(source)
    return source.documents()


def load_content_types(source: Any) -> List[ContentTypeDescriptor]:
    """Load content type descriptors from a source or directory path."""
    descriptors = []
    for name, document in _documents(source):
        for data in flatten(document):
            try:
                descriptors.append(ContentTypeDescriptor.model_validate(data))
            except ValidationError as e:
                raise DescriptorError(f"Invalid content type descriptor in {name}: {e}") from e
    return descriptors


def load_entries(source: Any) -> List[EntryDescriptor]:
    """Load entry descriptors, flattening nested lists, from a source or path."""
    descriptors = []
    for name, document in _documents(source):
        for data in flatten(document):
            if not isinstance(data, Mapping):
                raise DescriptorError(f"Entry descriptor in {name} is not an object: {data!r}")
            try:
                descriptors.append(EntryDescriptor.model_validate(data))
            except ValidationError as e:
                raise DescriptorError(f"Invalid entry descriptor in {name}: {e}") from e
    return descriptors
