"""
Catalog search and category filtering for the public project pages.
"""

from urllib.parse import quote
import re

from ..projects.routes import PROJECT_CATEGORIES, DEFAULT_CATEGORY


def _category(project):
    return project.get('category') or DEFAULT_CATEGORY


def matches_query(project, query):
    """Case-insensitive substring match on title, description, technologies and category."""
    query = query.lower()
    return (
        query in (project.get('title') or '').lower()
        or query in (project.get('description') or '').lower()
        or any(query in str(tech).lower() for tech in project.get('technologies') or [])
        or query in _category(project).lower()
    )


def filter_projects(projects, query='', categories=None):
    """Apply the category selection, then the search query. Order is kept.

    An empty category selection means all categories; a blank query matches everything.
    """
    filtered = list(projects)

    if categories:
        selected = set(categories)
        filtered = [p for p in filtered if _category(p) in selected]

    if query and query.strip():
        filtered = [p for p in filtered if matches_query(p, query)]

    return filtered


def toggle_category(selected, category):
    """Return a new selection with *category* added or removed."""
    selected = list(selected or [])
    if category in selected:
        return [c for c in selected if c != category]
    return selected + [category]


def clean_categories(values):
    """Keep only known categories, de-duplicated, in the order given."""
    seen = []
    for value in values or []:
        if value in PROJECT_CATEGORIES and value not in seen:
            seen.append(value)
    return seen


def whatsapp_quote_url(number, title):
    """WhatsApp click-to-chat link asking about *title*. None when the number has no digits."""
    digits = re.sub(r'\D', '', number or '')
    if not digits:
        return None
    message = quote(f"Hello, I'm interested in discussing your project: {title}", safe='')
    return f"https://wa.me/{digits}?text={message}"
