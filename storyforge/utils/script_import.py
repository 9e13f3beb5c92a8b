"""
StoryForge Script Import

Reads a screenplay from disk into plain text for analysis.

Supported formats:
    .txt  plain UTF-8 text
    .fdx  Final Draft XML; paragraph types shape the layout
    .pdf  text extracted page by page with pypdf
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Union

from pypdf import PdfReader

from storyforge.core.exceptions import ImportFormatError, UnsupportedFormatError
from storyforge.core.logging_config import get_logger
from storyforge.utils.file_utils import read_text

logger = get_logger("utils.script_import")

SUPPORTED_EXTENSIONS = (".txt", ".pdf", ".fdx")


def _paragraph_text(paragraph: ET.Element) -> str:
    return "".join(node.text or "" for node in paragraph.iter("Text"))


def parse_fdx(xml_text: str) -> str:
    """
    Flatten Final Draft XML into screenplay-shaped text.

    Scene headings are uppercased after a blank line, character cues are
    uppercased on their own line, parentheticals are wrapped in parentheses
    and every other paragraph is copied as-is.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ImportFormatError(f"Invalid Final Draft file: {e}")

    chunks = []
    for paragraph in root.iter("Paragraph"):
        kind = paragraph.get("Type", "")
        text = _paragraph_text(paragraph)

        if kind == "Scene Heading":
            chunks.append(f"\n\n{text.upper()}\n")
        elif kind == "Character":
            chunks.append(f"\n{text.upper()}\n")
        elif kind == "Parenthetical":
            chunks.append(f"({text})\n")
        else:
            chunks.append(f"{text}\n")

    return "".join(chunks).strip()


def parse_pdf(path: Path) -> str:
    """Extract text from every page, pages separated by a blank line."""
    try:
        reader = PdfReader(str(path))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise ImportFormatError(f"Failed to read PDF {path}: {e}")
    return "\n\n".join(pages).strip()


def import_script(path: Union[str, Path]) -> str:
    """
    Read a script file into plain text.

    Raises:
        UnsupportedFormatError: extension is not .txt, .fdx or .pdf
        ImportFormatError: the file exists but cannot be parsed
    """
    path = Path(path)
    extension = path.suffix.lower()

    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(extension, SUPPORTED_EXTENSIONS)

    if extension == ".txt":
        text = read_text(path)
    elif extension == ".fdx":
        text = parse_fdx(read_text(path))
    else:
        text = parse_pdf(path)

    logger.info(f"Imported {path.name} ({len(text)} chars)")
    return text
