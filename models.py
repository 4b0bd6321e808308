"""Data models for the Notion to Obsidian conversion pipeline."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger('notion_obsidian_converter')

NOTION_IMPORTS_FOLDER = "Notion Imports"


class ConversionFormat(Enum):
    """Output shapes a database can be converted into."""
    SEPARATE_PAGES = "separate-pages"
    DATAVIEW_TABLE = "dataview-table"
    MARKDOWN_TABLE = "markdown-table"
    OBSIDIAN_BASE = "obsidian-base"


class PropertyKind(Enum):
    """Notion property types understood by the converter."""
    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    OTHER = "other"

    @classmethod
    def from_type_name(cls, type_name: Optional[str]) -> 'PropertyKind':
        """Map a raw Notion type string to a kind, unknown types become OTHER."""
        try:
            return cls(type_name)
        except ValueError:
            return cls.OTHER


class BlockKind(Enum):
    """Notion block types understood by the converter."""
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    CODE = "code"
    QUOTE = "quote"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_type_name(cls, type_name: Optional[str]) -> 'BlockKind':
        """Map a raw Notion block type to a kind, unknown types become UNSUPPORTED."""
        try:
            return cls(type_name)
        except ValueError:
            return cls.UNSUPPORTED


@dataclass(frozen=True)
class RichTextRun:
    """One styled span of Notion rich text."""

    plain_text: str
    href: Optional[str] = None


@dataclass(frozen=True)
class PropertyValue:
    """
    A typed Notion property value.

    Only the payload field that matches ``kind`` is meaningful; the others
    keep their defaults.
    """

    kind: PropertyKind
    rich_text: Tuple[RichTextRun, ...] = ()
    number: Optional[float] = None
    select: Optional[str] = None
    multi_select: Tuple[str, ...] = ()
    date_start: Optional[str] = None
    checkbox: Optional[bool] = None
    text: Optional[str] = None  # url, email, phone_number
    type_name: str = ""

    @property
    def is_title(self) -> bool:
        return self.kind is PropertyKind.TITLE


@dataclass(frozen=True)
class ContentBlock:
    """A single top-level content block of a Notion page."""

    id: str
    kind: BlockKind
    rich_text: Optional[Tuple[RichTextRun, ...]] = None
    language: str = ""
    type_name: str = ""


@dataclass(frozen=True)
class NotionRecord:
    """A Notion page that belongs to a database."""

    id: str
    created_time: str
    last_edited_time: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)
    url: Optional[str] = None

    @property
    def title_property_name(self) -> Optional[str]:
        """Name of the title property, or None if the page has none."""
        for name, prop in self.properties.items():
            if prop.is_title:
                return name
        return None

    @property
    def has_title(self) -> bool:
        name = self.title_property_name
        if name is None:
            return False
        return bool(''.join(run.plain_text for run in self.properties[name].rich_text))

    @property
    def title(self) -> str:
        """Joined title text, falling back to ``Page <id>``."""
        name = self.title_property_name
        if name is not None:
            text = ''.join(run.plain_text for run in self.properties[name].rich_text)
            if text:
                return text
        return f"Page {self.id}"

    def other_properties(self) -> List[Tuple[str, PropertyValue]]:
        """All properties except the title, in source order."""
        return [(name, prop) for name, prop in self.properties.items() if not prop.is_title]


@dataclass
class NotionDatabase:
    """Metadata of a Notion database or data source."""

    id: str
    title: str = "Untitled Database"
    object_type: str = "database"  # 'database' or 'data_source'
    properties: Dict[str, str] = field(default_factory=dict)  # name -> Notion type
    url: Optional[str] = None

    @property
    def is_data_source(self) -> bool:
        return self.object_type == "data_source"

    @property
    def title_property_name(self) -> str:
        for name, type_name in self.properties.items():
            if type_name == PropertyKind.TITLE.value:
                return name
        return "Title"

    @property
    def other_property_names(self) -> List[str]:
        return [
            name for name, type_name in self.properties.items()
            if type_name != PropertyKind.TITLE.value
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize database summary to dictionary."""
        return {
            'id': self.id,
            'title': self.title,
            'object_type': self.object_type,
            'properties': list(self.properties),
            'url': self.url
        }


@dataclass
class ConversionJob:
    """Parameters of a single database conversion."""

    database_id: str
    conversion_format: ConversionFormat = ConversionFormat.SEPARATE_PAGES
    output_path: str = "./output"
    obsidian_vault_path: Optional[str] = None
    create_notion_folder: bool = True
    conversion_id: Optional[str] = None

    def resolve_output_dir(self, folder_name: str) -> str:
        """
        Compute the directory the converted files are written to.

        Args:
            folder_name: Sanitized database title

        Returns:
            Output directory path
        """
        if self.obsidian_vault_path:
            if self.create_notion_folder:
                return os.path.join(self.obsidian_vault_path, NOTION_IMPORTS_FOLDER, folder_name)
            return os.path.join(self.obsidian_vault_path, folder_name)
        return os.path.join(self.output_path, folder_name)


@dataclass
class ConversionResult:
    """Outcome of a finished conversion job."""

    success: bool
    database_title: str
    files_created: int
    output_path: str
    files: List[str] = field(default_factory=list)
    obsidian_integration: bool = False
    conversion_id: Optional[str] = None
    conversion_format: str = ConversionFormat.SEPARATE_PAGES.value
    records_total: int = 0
    records_failed: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary."""
        return {
            'success': self.success,
            'database': self.database_title,
            'files_created': self.files_created,
            'output_path': self.output_path,
            'files': list(self.files),
            'obsidian_integration': self.obsidian_integration,
            'conversion_id': self.conversion_id,
            'conversion_format': self.conversion_format,
            'records_total': self.records_total,
            'records_failed': self.records_failed,
            'duration_seconds': self.duration_seconds
        }


__all__ = [
    'BlockKind',
    'ContentBlock',
    'ConversionFormat',
    'ConversionJob',
    'ConversionResult',
    'NotionDatabase',
    'NotionRecord',
    'PropertyKind',
    'PropertyValue',
    'RichTextRun',
    'NOTION_IMPORTS_FOLDER'
]
