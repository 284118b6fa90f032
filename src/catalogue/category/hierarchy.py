"""Read-side helpers over the category tree.

These walk the Category repository directly: the tree is small, changes
rarely, and callers (the API, product review, product publication) need
answers that are consistent with the last committed write.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from catalogue.category.category import Category

_QUERY_LIMIT = 1000


def _repo():
    return current_domain.repository_for(Category)


def all_categories(active_only=False):
    query = _repo()._dao.query
    if active_only:
        query = query.filter(is_active=True)
    return sorted(query.limit(_QUERY_LIMIT).all().items, key=lambda c: (c.display_order, c.name))


def main_categories(active_only=True):
    return [c for c in all_categories(active_only) if not c.parent_id]


def children_of(parent_id, active_only=True):
    return [c for c in all_categories(active_only) if c.parent_id and str(c.parent_id) == str(parent_id)]


def subtree_ids(category_id):
    """Ids of `category_id` and every category below it, active or not."""
    children = {}
    for category in all_categories():
        if category.parent_id:
            children.setdefault(str(category.parent_id), []).append(str(category.id))

    found = []
    pending = [str(category_id)]
    while pending:
        current = pending.pop()
        if current in found:
            continue
        found.append(current)
        pending.extend(children.get(current, []))
    return found


def search_categories(term, active_only=True):
    needle = (term or "").strip().lower()
    if not needle:
        return []
    return [c for c in all_categories(active_only) if needle in c.name.lower()]


def find_by_slug(slug):
    results = _repo()._dao.query.filter(slug=slug).all().items
    return results[0] if results else None


def ancestor_chain(category_id):
    """Return the categories from the root down to `category_id` (inclusive).

    A corrupted tree with a cycle stops at the first revisited node.
    """
    repo = _repo()
    chain = []
    seen = set()
    current_id = category_id
    while current_id and str(current_id) not in seen:
        seen.add(str(current_id))
        try:
            category = repo.get(current_id)
        except ObjectNotFoundError:
            break
        chain.append(category)
        current_id = category.parent_id
    chain.reverse()
    return chain


def is_category_controlled(category_id) -> bool:
    """A category is controlled if it, or any ancestor, carries the flag."""
    if not category_id:
        return False
    return any(c.is_controlled for c in ancestor_chain(category_id))


def would_create_cycle(category_id, new_parent_id) -> bool:
    if not new_parent_id:
        return False
    if str(new_parent_id) == str(category_id):
        return True
    return any(str(c.id) == str(category_id) for c in ancestor_chain(new_parent_id))


def build_tree(active_only=True):
    """Nest categories as dicts: {id, name, slug, is_controlled, children: [...]}."""
    categories = all_categories(active_only)
    nodes = {
        str(c.id): {
            "id": str(c.id),
            "name": c.name,
            "slug": c.slug,
            "is_controlled": c.is_controlled,
            "children": [],
        }
        for c in categories
    }
    roots = []
    for category in categories:
        node = nodes[str(category.id)]
        parent = nodes.get(str(category.parent_id)) if category.parent_id else None
        if parent is None:
            roots.append(node)
        else:
            parent["children"].append(node)
    return roots
