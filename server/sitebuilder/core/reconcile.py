# sitebuilder/core/reconcile.py
"""
File reconciliation.

v0 reports the generated files of a chat in three different record shapes,
depending on API version and on whether the turn created the chat or
continued it:

    A  {name, content, type, size}           self-describing (relay output)
    B  {lang, meta: {file}, source}          legacy code-block shape
    C  {name, content, object: "file"}       follow-up shape, no type/size

normalize() turns any of them into a CanonicalFile. reconcile() folds one
turn's batch into the file collection kept for the conversation. A follow-up
turn sometimes reports only the files it touched and sometimes a fresh
snapshot; nothing in the payload says which, so overlap of file names with
the previous turn's batch decides between merge and replace.
"""
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

EXTENSION_TYPES = {
    "tsx": "tsx",
    "jsx": "jsx",
    "ts": "typescript",
    "js": "javascript",
    "css": "css",
    "html": "html",
    "json": "json",
    "md": "markdown",
}


class RecordShape(str, Enum):
    SELF_DESCRIBING = "self_describing"  # A
    LEGACY_SOURCE = "legacy_source"      # B
    MINIMAL = "minimal"                  # C, and any other {name, content}
    UNKNOWN = "unknown"


class CanonicalFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content: str
    type: str
    size: int


# name -> CanonicalFile; dicts keep insertion order and in-place assignment keeps position
FileCollection = Dict[str, CanonicalFile]


class ReconciliationState(BaseModel):
    """
    previous_batch is None until the first non-empty batch arrives for the
    conversation; after that it always holds the last normalized batch.
    """
    model_config = ConfigDict(frozen=True)

    previous_batch: Optional[List[CanonicalFile]] = None
    files: FileCollection = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ReconciliationState":
        return cls()


def type_for_name(name: str) -> str:
    ext = name.split(".")[-1].lower()
    return EXTENSION_TYPES.get(ext, "text")


def classify(raw: Any) -> RecordShape:
    if not isinstance(raw, Mapping):
        return RecordShape.UNKNOWN
    if raw.get("name") and raw.get("content"):
        if raw.get("type") and raw.get("size"):
            return RecordShape.SELF_DESCRIBING
        return RecordShape.MINIMAL
    if raw.get("lang") and raw.get("source"):
        return RecordShape.LEGACY_SOURCE
    return RecordShape.UNKNOWN


def normalize(raw: Any) -> Optional[CanonicalFile]:
    """Return the canonical form of one raw record, or None if it matches no known shape."""
    shape = classify(raw)

    if shape is RecordShape.SELF_DESCRIBING:
        try:
            return CanonicalFile(
                name=str(raw["name"]),
                content=str(raw["content"]),
                type=str(raw["type"]),
                size=int(raw["size"]),
            )
        except (TypeError, ValueError):
            # size that is not a number; fall back to deriving it
            shape = RecordShape.MINIMAL

    if shape is RecordShape.MINIMAL:
        name = str(raw["name"])
        content = str(raw["content"])
        return CanonicalFile(name=name, content=content, type=type_for_name(name), size=len(content))

    if shape is RecordShape.LEGACY_SOURCE:
        lang = str(raw["lang"])
        meta = raw.get("meta")
        meta_file = meta.get("file") if isinstance(meta, Mapping) else None
        source = str(raw["source"])
        return CanonicalFile(
            name=str(meta_file) if meta_file else f"file.{lang}",
            content=source,
            type=lang,
            size=len(source),
        )

    logger.debug("Dropping file record with unknown shape: %r", raw)
    return None


def normalize_batch(batch: Iterable[Any]) -> List[CanonicalFile]:
    return [f for f in (normalize(r) for r in batch) if f is not None]


def _collect(files: Iterable[CanonicalFile]) -> FileCollection:
    out: FileCollection = {}
    for f in files:
        out[f.name] = f
    return out


def reconcile(state: ReconciliationState, incoming_batch: Optional[Iterable[Any]]) -> ReconciliationState:
    """
    Fold one turn's raw file batch into the conversation's file collection.
    The input state is not modified; a new state is returned.
    """
    batch = list(incoming_batch or [])
    if not batch:
        # nothing generated this turn clears the view
        return ReconciliationState(previous_batch=state.previous_batch, files={})

    incoming = normalize_batch(batch)
    if len(incoming) < len(batch):
        logger.info("Dropped %d unrecognized file record(s)", len(batch) - len(incoming))

    incoming_names = {f.name for f in incoming}
    replace = (
        state.previous_batch is None
        or not state.files
        or not any(prev.name in incoming_names for prev in state.previous_batch)
    )

    if replace:
        files = _collect(incoming)
        logger.debug("Replaced file collection with %d file(s)", len(files))
    else:
        files = dict(state.files)
        for f in incoming:
            existing = files.get(f.name)
            if existing is not None:
                files[f.name] = existing.model_copy(update={"content": f.content, "size": f.size, "type": f.type})
            else:
                files[f.name] = f
        logger.debug("Merged %d file(s) into collection of %d", len(incoming), len(files))

    return ReconciliationState(previous_batch=incoming, files=files)


def valid_files(files: FileCollection) -> List[CanonicalFile]:
    """Files complete enough to display: non-empty name, content, type and size."""
    return [f for f in files.values() if f and f.name and f.content and f.type and f.size]
