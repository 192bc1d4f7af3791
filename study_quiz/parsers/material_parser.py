"""Load study material from .txt, .md, .docx and .pdf files as plain text.

Markdown is reduced to its prose: headings, emphasis markers, table pipes,
code fences, images and link targets are stripped.  Word documents are read
with python-docx (paragraphs, then table cells); PDFs with PyMuPDF, page by
page.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

MIN_MATERIAL_LENGTH = 50
SUPPORTED_SUFFIXES = (".txt", ".md", ".markdown", ".docx", ".pdf")


class MaterialError(ValueError):
    pass


@dataclass
class StudyMaterial:
    text: str
    word_count: int
    source_file: str


def strip_markdown(text: str) -> str:
    lines = []
    in_fence = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        # Table separator rows: |---|:---:|
        if re.fullmatch(r"\|?[\s:|-]+\|?", stripped) and "-" in stripped:
            continue
        if stripped in ("---", "***", "___"):
            continue
        line = re.sub(r"^\s{0,3}#{1,6}\s*", "", line)
        line = re.sub(r"^\s*>\s?", "", line)
        line = re.sub(r"^\s*(?:[-*+]|\d+\.)\s+", "", line)
        line = re.sub(r"!\[([^\]]*)\]\([^)]*\)", r"\1", line)
        line = re.sub(r"\[([^\]]+)\]\([^)]*\)", r"\1", line)
        line = re.sub(r"(\*\*|__|\*|`)", "", line)
        if stripped.startswith("|"):
            cells = [c.strip() for c in line.strip().strip("|").split("|")]
            line = " ".join(c for c in cells if c)
        lines.append(line.rstrip())
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


def extract_docx_text(path: Path) -> str:
    import docx
    from docx.opc.exceptions import PackageNotFoundError

    try:
        document = docx.Document(str(path))
    except (PackageNotFoundError, KeyError, ValueError) as e:
        raise MaterialError(f"{path.name} is not a readable Word document: {e}") from e

    lines = [p.text.strip() for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" ".join(c.text.strip() for c in row.cells if c.text.strip()))
    return "\n".join(line for line in lines if line)


def extract_pdf_text(path: Path) -> str:
    import fitz  # PyMuPDF

    try:
        with fitz.open(str(path)) as doc:
            pages = [page.get_text("text") or "" for page in doc]
    except RuntimeError as e:
        raise MaterialError(f"{path.name} is not a readable PDF: {e}") from e
    return "\n".join(p.strip() for p in pages if p.strip())


def parse_material_text(text: str, source: str = "<text>") -> StudyMaterial:
    text = text.strip()
    if len(text) < MIN_MATERIAL_LENGTH:
        raise MaterialError(
            f"{source} is too short or empty; provide at least {MIN_MATERIAL_LENGTH} characters"
        )
    return StudyMaterial(text=text, word_count=len(text.split()), source_file=source)


def parse_material_file(path: Path) -> StudyMaterial:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise MaterialError(
            f"Unsupported file type: {suffix or path.name}. Use one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    if not path.exists():
        raise MaterialError(f"File not found: {path}")

    if suffix == ".docx":
        text = extract_docx_text(path)
    elif suffix == ".pdf":
        text = extract_pdf_text(path)
    else:
        text = path.read_text(encoding="utf-8", errors="replace")
        if suffix in (".md", ".markdown"):
            text = strip_markdown(text)
    return parse_material_text(text, source=path.name)
