"""
Option filtering for the dashboard's select widgets.

- filter_options: single-value searchable select over {value, label} options
- SuggestiveList: multi-value free-text list with suggestions and a size cap
"""

from typing import Dict, Iterable, List, Optional

TARGET_ROLE_SUGGESTIONS = [
    'Software Engineer',
    'Frontend Developer',
    'Backend Developer',
    'Full Stack Developer',
    'DevOps Engineer',
    'Data Scientist',
    'Product Manager',
    'UX Designer',
    'UI Designer',
    'Instructional Designer',
    'Project Manager',
    'Business Analyst',
    'Quality Assurance Engineer',
    'Technical Writer',
]

TARGET_INDUSTRY_SUGGESTIONS = [
    'Higher Education',
    'Technology',
    'Healthcare',
    'Financial Services',
    'E-commerce',
    'Consulting',
    'Manufacturing',
    'Retail',
    'Media & Entertainment',
    'Telecommunications',
    'Energy',
    'Transportation',
    'Real Estate',
    'Non-profit',
]

SUGGESTIONS = {
    "target_roles": TARGET_ROLE_SUGGESTIONS,
    "target_industries": TARGET_INDUSTRY_SUGGESTIONS,
}


def filter_options(options: Iterable[Dict[str, str]], search_term: str = "") -> List[Dict[str, str]]:
    """Case-insensitive substring match on the option label."""
    term = (search_term or "").lower()
    return [option for option in options if term in option["label"].lower()]


def parse_items(value: Optional[str]) -> List[str]:
    """Split a comma-separated entry into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class SuggestiveList:
    """Selected items of a suggestive multi-select; never holds more than max_items."""

    def __init__(self, items: Iterable[str] = (), suggestions: Iterable[str] = (), max_items: Optional[int] = None):
        self.max_items = max_items
        self.suggestions = list(suggestions)
        self.items: List[str] = []
        for item in items:
            self.add(item)

    @classmethod
    def from_text(cls, value: Optional[str], suggestions: Iterable[str] = (), max_items: Optional[int] = None):
        return cls(parse_items(value), suggestions, max_items)

    @property
    def is_full(self) -> bool:
        return self.max_items is not None and len(self.items) >= self.max_items

    def add(self, entry: str) -> bool:
        """Add a suggestion or free-text entry. Returns False when ignored."""
        entry = (entry or "").strip()
        if not entry or self.is_full or entry in self.items:
            return False
        self.items.append(entry)
        return True

    def remove(self, entry: str) -> None:
        self.items = [item for item in self.items if item != entry]

    def is_custom(self, entry: str) -> bool:
        """True when the entry matches none of the suggestions."""
        entry = entry.lower()
        return not any(suggestion.lower() == entry for suggestion in self.suggestions)

    def matching_suggestions(self, search: str = "") -> List[str]:
        """Suggestions containing the search term that are not already selected."""
        search = (search or "").lower()
        return [
            suggestion for suggestion in self.suggestions
            if search in suggestion.lower() and suggestion not in self.items
        ]

    def to_text(self) -> str:
        return ", ".join(self.items)


def cap_items(items: Optional[Iterable[str]], max_items: int) -> List[str]:
    """Normalise a submitted list the way the suggestive select does."""
    return SuggestiveList(items or (), max_items=max_items).items
