"""
Permission resolution.

Computes a user's effective authorization surface from the stored
user -> role -> permission associations, and renders the permission
forest used for menus.

Every call re-reads from the database; there is no in-process cache of
permission sets, so a revoked grant takes effect on the next request.
"""

from collections import defaultdict
from typing import Any, Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.models.rbac import Permission, Role
from rbac_admin.repositories.permission import PermissionRepository
from rbac_admin.repositories.user import UserRepository

ROOT_PARENT_ID = 0


def _sort_key(node: Mapping[str, Any]) -> tuple[int, int]:
    return (node.get("sort_order") or 0, node["id"])


def build_permission_tree(nodes: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """
    Build a forest from a flat list of serialized permissions.

    Each input mapping needs at least ``id`` and ``parent_id`` (``sort_order``
    is used for ordering when present). Roots are the nodes whose
    ``parent_id`` is 0. Siblings are ordered by (sort_order, id) at every
    level. A node without children has no ``children`` key at all.

    Nodes whose parent is not in the input are unreachable from a root and
    are left out of the tree; they still appear in flat listings.

    The parent -> children index is built in one pass, so the whole build is
    O(n log n) for the sorting.
    """
    children_by_parent: dict[int, list[dict[str, Any]]] = defaultdict(list)
    for node in nodes:
        item = {key: value for key, value in node.items() if key != "children"}
        children_by_parent[item.get("parent_id") or ROOT_PARENT_ID].append(item)

    def render(parent_id: int, seen: frozenset[int]) -> list[dict[str, Any]]:
        level = sorted(children_by_parent.get(parent_id, ()), key=_sort_key)
        rendered = []
        for item in level:
            # A cycle can only come from corrupt rows; cut it rather than recurse forever.
            if item["id"] in seen:
                continue
            node = dict(item)
            children = render(item["id"], seen | {item["id"]})
            if children:
                node["children"] = children
            rendered.append(node)
        return rendered

    return render(ROOT_PARENT_ID, frozenset())


def flatten_permission_tree(tree: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Depth-first flattening of a tree back into node mappings without ``children``."""
    flat: list[dict[str, Any]] = []
    for node in tree:
        flat.append({key: value for key, value in node.items() if key != "children"})
        flat.extend(flatten_permission_tree(node.get("children", ())))
    return flat


class PermissionResolver:
    """Reads a user's effective roles and permissions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.permissions = PermissionRepository(db)

    async def get_user_roles(self, user_id: int) -> list[Role]:
        """Enabled roles assigned to the user."""
        return await self.users.get_roles(user_id)

    async def get_user_role_codes(self, user_id: int) -> set[str]:
        return {role.code for role in await self.get_user_roles(user_id)}

    async def get_user_permissions(self, user_id: int) -> list[Permission]:
        """
        Deduplicated union of enabled permissions over the user's enabled
        roles, ordered by (sort_order, id).
        """
        return await self.permissions.get_user_permissions(user_id)

    async def get_user_permission_codes(self, user_id: int) -> set[str]:
        return {perm.code for perm in await self.get_user_permissions(user_id)}

    async def is_code_unique(self, code: str, exclude_id: int | None = None) -> bool:
        """Whether no permission other than ``exclude_id`` uses ``code``."""
        return await self.permissions.is_code_unique(code, exclude_id)
