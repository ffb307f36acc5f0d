from .content import ContentCreate, ContentDetail, ContentUpdate, MetadataIn, MetadataOut, TagsAttach, TagsAttachResult
from .content_version import (
    ContentSnapshot,
    ContentVersionOut,
    FieldChange,
    MetadataSnapshot,
    PaginatedVersions,
    VersionComparison,
    VersionRef,
)

# Define the public API of this module
__all__ = [
    "ContentCreate",
    "ContentDetail",
    "ContentUpdate",
    "MetadataIn",
    "MetadataOut",
    "TagsAttach",
    "TagsAttachResult",
    "ContentSnapshot",
    "ContentVersionOut",
    "FieldChange",
    "MetadataSnapshot",
    "PaginatedVersions",
    "VersionComparison",
    "VersionRef",
]
