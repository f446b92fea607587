# File: site_harvest/report/context.py
"""site_harvest.report.context: plain-text rendering of a combined document.

The text is meant as input for a text-completion service together with a
user question. Nothing is truncated.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from site_harvest.aggregator import CombinedDocument
from site_harvest.logger import logger

__all__ = ["build_context", "relevant_content", "question_keywords"]

_STOP_WORDS = frozenset(
    "what how when where why who is are the a an and or but in on at to for of with by can will "
    "would should could may might do does did have has had be been being was were am this that "
    "these those".split()
)
_WORD_RE = re.compile(r"[a-z]+")


def build_context(document: CombinedDocument, question: Optional[str] = None) -> str:
    """Render metadata, articles, sections, headings, tables, lists, paragraphs and links."""
    parts: List[str] = []
    if document.url:
        parts.append(f"Website URL: {document.url}\n")
    if document.title:
        parts.append(f"Page Title: {document.title}\n\n")
    for label, value in (("Description", document.description), ("Keywords", document.keywords), ("Author", document.author)):
        if value:
            parts.append(f"{label}: {value}\n\n")

    if document.articles:
        parts.append("Articles:\n")
        for i, article in enumerate(document.articles, 1):
            parts.append(f"Article {i}: {article.title}\n{article.content}\n\n")

    if document.sections:
        parts.append("Page Sections:\n")
        for section in document.sections:
            parts.append(f"Section: {section.heading}\n{section.content}\n\n")

    if document.headings:
        parts.append("Page Structure (Headings):\n")
        parts.extend(f"{h.level.upper()}: {h.text}\n" for h in document.headings)
        parts.append("\n")

    if document.tables:
        parts.append("Tables:\n")
        for i, table in enumerate(document.tables, 1):
            parts.append(f"Table {i}:\n")
            if table.caption:
                parts.append(f"Caption: {table.caption}\n")
            if table.headers:
                parts.append(f"Headers: {' | '.join(table.headers)}\n")
            parts.extend(" | ".join(cell.text for cell in row) + "\n" for row in table.rows)
            parts.append("\n")

    if document.lists:
        parts.append("Lists:\n")
        for i, block in enumerate(document.lists, 1):
            parts.append(f"{block.kind.upper()} List {i}:\n")
            parts.extend(f"- {item}\n" for item in block.items)
            parts.append("\n")

    if document.paragraphs:
        parts.append("Page Content:\n")
        parts.extend(f"{p}\n\n" for p in document.paragraphs)

    if document.links:
        parts.append("Important Links:\n")
        for link in document.links:
            line = f"- [{link.text}]({link.url})"
            if link.title:
                line += f" ({link.title})"
            parts.append(line + "\n")
        parts.append("\n")

    if question:
        parts.append(f"Question: {question}\n")

    context = "".join(parts)
    logger.debug(
        "Context for %s: %d chars, %d links, %d tables, %d paragraphs",
        document.url,
        len(context),
        len(document.links),
        len(document.tables),
        len(document.paragraphs),
    )
    return context


def question_keywords(question: str) -> List[str]:
    """Alphabetic words of *question* longer than two letters, minus stop words."""
    return [w for w in question.lower().split() if len(w) > 2 and w not in _STOP_WORDS and _WORD_RE.fullmatch(w)]


def _score(text: str, keywords: List[str]) -> int:
    lowered = text.lower()
    return sum(1 for k in keywords if k in lowered)


def relevant_content(document: CombinedDocument, question: str, limit: int = 8) -> List[str]:
    """Snippets of *document* that mention the most keywords of *question*."""
    keywords = question_keywords(question)
    scored: List[Tuple[int, str]] = []
    scored.extend((_score(p, keywords), p) for p in document.paragraphs)
    for block in document.lists:
        scored.extend((_score(item, keywords), f"{block.kind} item: {item}") for item in block.items)
    for table in document.tables:
        for row in table.rows:
            row_text = " ".join(cell.text for cell in row)
            scored.append((_score(row_text, keywords), f"Table data: {row_text}"))
    scored.extend((_score(a.content, keywords), f"{a.title}: {a.content}") for a in document.articles)
    scored.extend((_score(s.content, keywords), f"{s.heading}: {s.content}") for s in document.sections)

    ranked = sorted((item for item in scored if item[0] > 0), key=lambda item: -item[0])
    return [text for _, text in ranked[:limit]]
