"""
Chunk metadata extraction.

Produces a one-line summary, keyword tags and a category for a chunk,
either with deterministic rules or with a chat model that falls back to
the rules when its answer cannot be used.

Dependencies: langchain_core, memo_index.models.metadata
System role: Enrichment step of the indexing pipeline
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections import Counter

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from memo_index.core.exceptions import MetadataExtractionError
from memo_index.models.metadata import ExtractedMetadata

logger = logging.getLogger(__name__)

MAX_TAGS = 5
MAX_SUMMARY_CHARS = 100
MAX_PROMPT_CHARS = 2000

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "should", "could", "may", "might", "must", "can", "this",
    "that", "these", "those", "it", "its", "not",
})

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "technical": (
        "code", "function", "class", "api", "bug", "algorithm", "data",
        "programming", "software", "development", "typescript", "javascript",
        "python", "rust", "java", "database", "server", "client",
    ),
    "diary": ("today", "yesterday", "tomorrow", "feel", "feeling", "mood"),
    "reading": ("book", "author", "chapter", "read", "reading"),
    "idea": ("idea", "inspiration", "maybe", "perhaps", "creative"),
}
CATEGORIES = (*CATEGORY_KEYWORDS, "work")

_HEADER_LINE = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_HEADER_MARKER = re.compile(r"^#+\s+", re.MULTILINE)
_SENTENCE_END = re.compile(r"[.!?。！？]")
_EMPHASIS = re.compile(r"[*_`]")


def normalize_tags(tags: list[str]) -> list[str]:
    """Lowercase, strip, dedupe (first occurrence wins) and cap at five tags."""
    seen: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen[:MAX_TAGS]


class MetadataExtractor(ABC):
    """Extracts summary, tags and category from chunk text."""

    @abstractmethod
    async def extract(self, text: str) -> ExtractedMetadata:
        """
        Extract metadata for one chunk.

        Raises:
            MetadataExtractionError: When extraction fails
        """


class RuleBasedMetadataExtractor(MetadataExtractor):
    """
    Deterministic extractor.

    Summary is the first markdown header, otherwise the first sentence cut to
    100 characters. Tags are the five most frequent words longer than two
    characters that are not stop words. Category is the one whose keywords
    occur most often, falling back to the default category.
    """

    def __init__(self, default_category: str = "note") -> None:
        self._default_category = default_category

    @property
    def default_category(self) -> str:
        return self._default_category

    async def extract(self, text: str) -> ExtractedMetadata:
        return self.extract_sync(text)

    def extract_sync(self, text: str) -> ExtractedMetadata:
        if not text or not text.strip():
            return ExtractedMetadata(summary="", tags=[], category=self._default_category)
        return ExtractedMetadata(
            summary=self._summary(text),
            tags=self._keywords(text),
            category=self._category(text),
        )

    @staticmethod
    def _summary(text: str) -> str:
        header = _HEADER_LINE.search(text)
        if header:
            return header.group(1).strip()
        body = _HEADER_MARKER.sub("", text).strip()
        first_sentence = _SENTENCE_END.split(body, maxsplit=1)[0]
        return first_sentence.strip()[:MAX_SUMMARY_CHARS]

    @staticmethod
    def _keywords(text: str) -> list[str]:
        clean = _EMPHASIS.sub("", _HEADER_MARKER.sub("", text)).lower()
        counts = Counter(
            word for word in clean.split() if len(word) > 2 and word not in STOP_WORDS
        )
        # most_common keeps first-seen order among equal counts
        return [word for word, _ in counts.most_common(MAX_TAGS)]

    def _category(self, text: str) -> str:
        lowered = text.lower()
        scores = {
            category: sum(1 for keyword in keywords if keyword in lowered)
            for category, keywords in CATEGORY_KEYWORDS.items()
        }
        best = max(scores.values())
        if best == 0:
            return self._default_category
        return next(category for category, score in scores.items() if score == best)


class LLMMetadataExtractor(MetadataExtractor):
    """
    Chat-model extractor with rule-based fallback.

    Usage:
        extractor = LLMMetadataExtractor(ChatOllama(model="llama3.2:3b", format="json"))
        metadata = await extractor.extract("# Caching\\n\\nLRU eviction ...")
    """

    def __init__(
        self,
        model: BaseChatModel,
        fallback: RuleBasedMetadataExtractor | None = None,
    ) -> None:
        """
        Initialize extractor.

        Args:
            model: Chat model answering with a JSON object
            fallback: Extractor used when the model fails (rules by default)
        """
        self._model = model
        self._fallback = fallback or RuleBasedMetadataExtractor()

    async def extract(self, text: str) -> ExtractedMetadata:
        if not text or not text.strip():
            return await self._fallback.extract(text)

        try:
            response = await self._model.ainvoke([HumanMessage(content=self._build_prompt(text))])
            return self._parse_response(response.content)
        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Model extraction failed ({type(e).__name__}: {e}), "
                "falling back to rules"
            )
            return await self._fallback.extract(text)

    @staticmethod
    def _build_prompt(text: str) -> str:
        if len(text) > MAX_PROMPT_CHARS:
            text = text[:MAX_PROMPT_CHARS] + "..."
        categories = ", ".join(CATEGORIES)
        return f"""Analyze the following markdown passage and extract its key information.

PASSAGE:
\"\"\"
{text}
\"\"\"

Respond in JSON format ONLY (no markdown, no extra text):
{{
    "summary": "<one sentence, 10-30 words>",
    "tags": ["<keyword>", "<keyword>", "<keyword>"],
    "category": "<one of: {categories}>"
}}

Pick the 3-5 most important keywords as tags."""

    def _parse_response(self, response_text: str) -> ExtractedMetadata:
        """
        Parse the model's JSON answer.

        Handles answers wrapped in markdown code fences.

        Raises:
            MetadataExtractionError: When the answer is not a JSON object
        """
        text = response_text if isinstance(response_text, str) else str(response_text)
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif "```" in text:
            text = text.split("```")[1].split("```")[0]

        try:
            data = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise MetadataExtractionError(
                "Metadata response is not valid JSON",
                details={"response": text[:200]},
            ) from e
        if not isinstance(data, dict):
            raise MetadataExtractionError(
                "Metadata response is not a JSON object",
                details={"type": type(data).__name__},
            )

        category = str(data.get("category", "")).strip().lower()
        if category not in CATEGORIES:
            category = self._fallback.default_category

        tags = data.get("tags", [])
        return ExtractedMetadata(
            summary=str(data.get("summary", "")).strip(),
            tags=normalize_tags(tags if isinstance(tags, list) else []),
            category=category,
        )
