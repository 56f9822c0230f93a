"""Interactive UI components for category entry."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .categories import Category, lookup

logger = logging.getLogger(__name__)


class CategoryCompleter(Completer):
    """Fuzzy search completer for category names."""

    def __init__(self, categories: list[Category]):
        """Initialize the completer with available categories."""
        self.categories = categories
        self.by_lower_name = {cat.name.lower(): cat.name for cat in categories}

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for cat in self.categories:
            if not query or fuzzy_match(query, cat.name.lower()):
                yield Completion(
                    text=cat.name,
                    start_position=-len(document.text),
                    display=f"{cat.icon} {cat.name}",
                )

    def resolve(self, text: str) -> str:
        """Canonical spelling of a known category, or the text as typed."""
        return self.by_lower_name.get(text.strip().lower(), text.strip())


def fuzzy_match(query: str, text: str) -> bool:
    """
    Fuzzy match: all characters in query must appear in order in text.

    Example:
        query="gro" matches "groceries"
        query="fdd" matches "food & dining"
    """
    query_idx = 0
    for char in text:
        if query_idx < len(query) and char == query[query_idx]:
            query_idx += 1
    return query_idx == len(query)


def select_category_interactive(
    categories: list[Category],
    description: str,
    suggested: str | None = None,
) -> str | None:
    """
    Interactive category selection with fuzzy search.

    Known categories are completed; any other non-empty text is accepted as
    a custom category.

    Args:
        categories: Categories offered for completion
        description: What is being categorized (shown as a header)
        suggested: Optional category to pre-fill

    Returns:
        Selected category name, or None to skip
    """
    print(f"\n📝 Categorize: {description}")
    print("   Type to search, press Enter to confirm, Ctrl+C to skip\n")

    completer = CategoryCompleter(categories)
    session: PromptSession[str] = PromptSession(completer=completer)

    try:
        result = session.prompt(
            "Category: ",
            default=suggested or "",
            complete_while_typing=True,
        )
    except KeyboardInterrupt:
        print("\n⏭️  Skipped")
        return None
    except EOFError:
        return None

    if not result.strip():
        return None

    name = completer.resolve(result)
    logger.info(f"User selected category: {lookup(name).name}")
    return name
