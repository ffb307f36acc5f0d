from .content import Content, ContentMetadata
from .content_tags import content_tags
from .content_version import ContentVersion
from .tag import Tag

__all__ = [
    "Content",
    "ContentMetadata",
    "content_tags",
    "ContentVersion",
    "Tag",
]
