import math
import warnings
from dataclasses import dataclass, field, fields
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from errors import DuplicateFileIdWarning
from logger import log

EMPTY_MAP = MappingProxyType({})

# camelCase keys accepted from host descriptors
_KEY_ALIASES = {
    "isDir": "is_directory",
    "is_dir": "is_directory",
    "isDirectory": "is_directory",
    "isHidden": "is_hidden",
    "isSymlink": "is_symlink",
    "isEncrypted": "is_encrypted",
    "ext": "extension",
    "modDate": "modified",
    "mtime": "modified",
    "childrenCount": "child_count",
    "childCount": "child_count",
    "thumbnailUrl": "thumbnail_url",
}


def derive_extension(name, is_directory=False):
    if is_directory:
        return ""
    stem = name.lstrip(".")
    if "." not in stem:
        return ""
    return stem.rsplit(".", 1)[1]


@dataclass(frozen=True)
class FileRecord:
    id: str
    name: str
    extension: str = ""
    is_directory: bool = False
    is_hidden: bool = False
    is_symlink: bool = False
    is_encrypted: bool = False
    openable: bool = True
    selectable: bool = True
    draggable: bool = True
    droppable: bool = False
    size: Optional[int] = None
    modified: Optional[datetime] = None
    child_count: Optional[int] = None
    color: Optional[str] = None
    icon: Any = None
    thumbnail_url: Optional[str] = None
    # Host-defined properties, kept apart from the core fields
    extra: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAP, compare=False)

    @classmethod
    def create(cls, id, name, **kwargs):
        """Build a record, filling per-type defaults for flags the caller left out."""
        if not isinstance(id, str) or not id:
            raise ValueError(f"File id must be a non-empty string, got {id!r}")
        if not isinstance(name, str):
            raise ValueError(f"File {id!r} has no name")

        is_dir = bool(kwargs.pop("is_directory", False))
        if kwargs.get("extension") is None:
            kwargs["extension"] = derive_extension(name, is_dir)
        kwargs.setdefault("is_hidden", name.startswith("."))
        # Folders accept drops by default, plain files do not
        kwargs.setdefault("droppable", is_dir)

        modified = kwargs.get("modified")
        if isinstance(modified, (int, float)):
            kwargs["modified"] = datetime.fromtimestamp(modified)

        extra = kwargs.pop("extra", None) or {}
        return cls(id=id, name=name, is_directory=is_dir,
                   extra=MappingProxyType(dict(extra)), **kwargs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FileRecord":
        known = {f.name for f in fields(cls)} - {"extra"}
        core, extra = {}, dict(data.get("extra") or {})
        for key, value in data.items():
            if key == "extra":
                continue
            name = _KEY_ALIASES.get(key, key)
            if name in known:
                core[name] = value
            else:
                extra[key] = value
        if "id" not in core or "name" not in core:
            raise ValueError(f"File descriptor needs 'id' and 'name': {dict(data)!r}")
        file_id = core.pop("id")
        name = core.pop("name")
        return cls.create(file_id, name, extra=extra, **core)


@dataclass(frozen=True)
class NormalizedFiles:
    files: tuple
    file_map: Mapping[str, FileRecord]
    duplicate_ids: tuple = ()


def normalize_files(items) -> NormalizedFiles:
    """
    Validate an incoming file array. None entries are loading placeholders.
    Duplicate ids are reported (warning + log) but never raise; the first
    occurrence wins in the id map.
    """
    files = []
    file_map = {}
    duplicates = []
    for item in items or ():
        if item is None:
            files.append(None)
            continue
        if isinstance(item, FileRecord):
            record = item
        elif isinstance(item, Mapping):
            record = FileRecord.from_mapping(item)
        else:
            raise TypeError(f"Unsupported file entry: {item!r}")

        if record.id in file_map:
            if record.id not in duplicates:
                duplicates.append(record.id)
        else:
            file_map[record.id] = record
        files.append(record)

    if duplicates:
        msg = f"Duplicate file ids in file array: {', '.join(duplicates)}"
        log.warning(msg)
        warnings.warn(msg, DuplicateFileIdWarning, stacklevel=2)

    return NormalizedFiles(tuple(files), MappingProxyType(file_map), tuple(duplicates))


# --- Capability checks (placeholders are never actionable) ---

def is_selectable(f):
    return f is not None and f.selectable


def is_openable(f):
    return f is not None and f.openable


def is_draggable(f):
    return f is not None and f.draggable


def is_droppable(f):
    return f is not None and f.droppable


def format_size(size_bytes):
    if size_bytes is None: return ""
    if size_bytes <= 0: return "0 B"
    size_name = ("B", "KB", "MB", "GB", "TB")
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(size_name) - 1)
    p = math.pow(1024, i)
    s = round(size_bytes / p, 2)
    return f"{s} {size_name[i]}"
