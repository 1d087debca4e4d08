from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class TextFragment:
    x: float
    y: float
    text: str = ""
    width: Optional[float] = None
    height: Optional[float] = None
    font_size: Optional[float] = None
    bold: bool = False
    italic: bool = False

    @property
    def style(self) -> Optional[str]:
        if self.bold and self.italic:
            return "bold-italic"
        if self.bold:
            return "bold"
        if self.italic:
            return "italic"
        return None


@dataclass(frozen=True)
class ImageRegion:
    x: float
    y: float
    width: float
    height: float


@dataclass
class Page:
    number: int
    fragments: List[TextFragment] = field(default_factory=list)
    images: List[ImageRegion] = field(default_factory=list)
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass
class Document:
    pages: List[Page] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)
    source_name: Optional[str] = None


@dataclass
class Line:
    key: int
    fragments: List[TextFragment] = field(default_factory=list)

    @property
    def y(self) -> float:
        # keys are y scaled by 10
        return self.key / 10

    def __len__(self) -> int:
        return len(self.fragments)


@dataclass
class Cell:
    x_start: float
    width: float
    fragments: List[TextFragment] = field(default_factory=list)
    is_header: bool = False

    @property
    def text(self) -> str:
        return " ".join(f.text for f in self.fragments)


@dataclass
class Table:
    rows: Dict[int, List[Cell]] = field(default_factory=dict)

    @property
    def row_keys(self) -> List[int]:
        return sorted(self.rows)


@dataclass
class Heading:
    level: int
    y_key: int
    text: str


@dataclass
class Paragraph:
    y_key: int
    fragments: List[TextFragment] = field(default_factory=list)
    styled: bool = False


@dataclass
class ListItem:
    y_key: int
    fragments: List[TextFragment] = field(default_factory=list)
    styled: bool = False


@dataclass
class RawText:
    fragment: TextFragment


@dataclass
class TableBlock:
    page_number: int
    tables: List[Table] = field(default_factory=list)


@dataclass
class ImageBlock:
    images: List[ImageRegion] = field(default_factory=list)


DocumentNode = Union[Heading, Paragraph, ListItem, RawText, TableBlock, ImageBlock]


@dataclass
class PageLayout:
    number: int
    nodes: List[DocumentNode] = field(default_factory=list)


@dataclass
class Statistics:
    tables: int = 0
    lists: int = 0
    headings: int = 0
    images: int = 0
    characters: int = 0
    words: int = 0
    processing_time: int = 0

    def merge(self, other: "Statistics") -> None:
        """Add the detection counters of `other` (one page) into this total."""
        self.tables += other.tables
        self.lists += other.lists
        self.headings += other.headings
        self.images += other.images

    def to_dict(self) -> Dict[str, int]:
        return {
            "detected_tables": self.tables,
            "detected_lists": self.lists,
            "detected_headings": self.headings,
            "detected_images": self.images,
            "processing_time": self.processing_time,
            "character_count": self.characters,
            "word_count": self.words,
        }
