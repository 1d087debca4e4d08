"""High-level orchestration: assemble pages and render XML."""

from .assemble import (
    Profile,
    PIPELINES,
    assemble_document,
)
from .process import (
    ConversionResult,
    build_tags,
    convert_document,
    convert_file,
)

__all__ = [
    "Profile",
    "PIPELINES",
    "assemble_document",
    "ConversionResult",
    "build_tags",
    "convert_document",
    "convert_file",
]
