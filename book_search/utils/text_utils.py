"""
Text utility functions for the Book Search service.

Provides page-text cleaning, the page-break sentinel used to flatten
and re-split extracted books, and the normalization applied to page
text and queries before matching.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional, Tuple


# Form feed separates pages in flattened text; clean_text strips it from page content.
PAGE_BREAK = "\f"

TATWEEL = "ـ"

_ARABIC_PUNCTUATION = ".،:؛؟!"

_ARABIC_REPLACEMENTS = {}
for _variants, _target in (
    ("أإآٱٲٳٵ", "ا"),
    ("ىيئٸۑۍێې", "ي"),
    ("ة", "ه"),
    ("ؤۄۅۆۇۈۉۊ", "و"),
):
    for _char in _variants:
        _ARABIC_REPLACEMENTS[_char] = _target

# Hamza forms, harakat, Quranic marks and tatweel are dropped entirely
for _code in (0x0621, 0x0674, 0x0670, 0x0640):
    _ARABIC_REPLACEMENTS[chr(_code)] = ""
for _code in list(range(0x064B, 0x0660)) + list(range(0x06D6, 0x06EE)):
    _ARABIC_REPLACEMENTS[chr(_code)] = ""

# Lower-casing one cluster at a time never yields the word-final sigma
FINAL_SIGMA = "\u03c2"
SIGMA = "\u03c3"


def clean_text(text: str) -> str:
    """
    Normalize and clean extracted page text.

    Removes control characters (including the page-break sentinel),
    normalizes whitespace, and handles common PDF extraction artifacts
    such as tatweel and spaces before Arabic punctuation.

    Args:
        text: Raw text from PDF extraction.

    Returns:
        Cleaned text string.
    """
    if not text:
        return ""

    # Presentation forms become base letters
    text = unicodedata.normalize("NFKC", text)

    text = "".join(
        char for char in text
        if not unicodedata.category(char).startswith("C")
        or char in "\n\t"
    )

    text = text.replace(TATWEEL, "")

    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(rf" ([{_ARABIC_PUNCTUATION}])", r"\1", text)
    text = re.sub(r"\n{3,}", "\n\n", text)

    lines = [line.strip() for line in text.split("\n")]
    text = "\n".join(lines)

    return text.strip()


def join_pages(pages: List[str]) -> str:
    """
    Flatten a page list into one string separated by PAGE_BREAK.

    Args:
        pages: Ordered page texts.

    Returns:
        Single string; split_pages() recovers the list.
    """
    return PAGE_BREAK.join(page.replace(PAGE_BREAK, "\n") for page in pages)


def split_pages(text: str) -> List[str]:
    """
    Split flattened text on PAGE_BREAK.

    Blank pages are kept as empty strings so list index i
    always corresponds to page number i + 1.

    Args:
        text: Text produced by join_pages().

    Returns:
        Ordered list of page texts.
    """
    return text.split(PAGE_BREAK)


@dataclass
class NormalizedText:
    """
    Search-normalized text with a mapping back to the original.

    Attributes:
        text: Lower-cased (and optionally Arabic-normalized) text.
        starts: Original start index for each normalized character,
                or None when the mapping is the identity.
        ends: Original end index (exclusive) for each normalized character,
              or None when the mapping is the identity.
    """
    text: str
    starts: Optional[List[int]] = None
    ends: Optional[List[int]] = None

    def original_span(self, start: int, end: int) -> Tuple[int, int]:
        """
        Map a [start, end) range of normalized text to the original text.

        Args:
            start: Start index in normalized text.
            end: Exclusive end index in normalized text (end > start).

        Returns:
            Tuple of (original_start, original_end).
        """
        if self.starts is None:
            return start, end
        return self.starts[start], self.ends[end - 1]


def normalize_for_search(text: str, arabic: bool = True) -> NormalizedText:
    """
    Normalize text for case-insensitive matching.

    Each base character is grouped with its combining marks, NFKC-normalized
    and lower-cased. Final sigma folds to sigma so case never
    decides a Greek match. With arabic=True, letter variants are unified (alef,
    yeh, waw, ta marbuta) and hamza, diacritics and tatweel are removed.
    Every output character remembers the original span it came from so
    matches can be cut from the original text.

    Args:
        text: Page text or query.
        arabic: Whether to apply Arabic letter normalization.

    Returns:
        NormalizedText with offset mapping.
    """
    if not text:
        return NormalizedText("")

    if text.isascii():
        return NormalizedText(text.lower())

    if not arabic:
        lowered = text.lower()
        if len(lowered) == len(text) and unicodedata.is_normalized("NFKC", text):
            return NormalizedText(lowered.replace(FINAL_SIGMA, SIGMA))

    chars: List[str] = []
    starts: List[int] = []
    ends: List[int] = []

    i = 0
    length = len(text)

    while i < length:
        j = i + 1
        while j < length and unicodedata.combining(text[j]):
            j += 1

        for char in unicodedata.normalize("NFKC", text[i:j]).lower():
            if char == FINAL_SIGMA:
                char = SIGMA

            if arabic:
                char = _ARABIC_REPLACEMENTS.get(char, char)
                if not char:
                    continue

            chars.append(char)
            starts.append(i)
            ends.append(j)

        i = j

    return NormalizedText("".join(chars), starts, ends)


def normalize_text(text: str, arabic: bool = True) -> str:
    """
    Normalize text for matching without keeping the offset mapping.

    Args:
        text: Text to normalize, typically a search query.
        arabic: Whether to apply Arabic letter normalization.

    Returns:
        Normalized text.
    """
    return normalize_for_search(text, arabic).text


if __name__ == "__main__":
    sample = "  الكِتَابُ   الأوَّل\f ـــ مقدمة ؟ "

    print("=== clean_text ===")
    print(repr(clean_text(sample)))

    print("\n=== join/split ===")
    flat = join_pages(["Page one", "", "Page three"])
    print(repr(flat), split_pages(flat))

    print("\n=== normalize_for_search ===")
    normalized = normalize_for_search("الكِتَابُ الأوَّل")
    print(repr(normalized.text))
    print(normalized.original_span(0, 5))
