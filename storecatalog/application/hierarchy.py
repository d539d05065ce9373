"""Parent-category resolution and cycle checks."""

from storecatalog.catalog.repository import CategoryRepository
from storecatalog.domain.exceptions import CategoryCycleError, InvalidReferenceError
from storecatalog.domain.value_objects import EntityId


class CategoryHierarchyValidator:
    """Validates parent-category references.

    A parent must be a well-formed id of an existing category. When a
    category is re-parented, the ancestor chain of the new parent is
    walked so the hierarchy never becomes cyclic.
    """

    def __init__(self, repository: CategoryRepository) -> None:
        """Initialize validator.

        Args:
            repository: Category repository.
        """
        self.repository = repository

    async def resolve_parent(
        self,
        parent_id: str | None,
        category_id: str | None = None,
    ) -> str | None:
        """Resolve a candidate parent reference.

        Args:
            parent_id: Candidate parent id; None or "" for a top-level category.
            category_id: Id of the category being updated; None on create.

        Returns:
            Normalized parent id, or None.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            InvalidReferenceError: If no category has that id.
            CategoryCycleError: If the assignment would create a cycle.
        """
        if not parent_id:
            return None

        parent = str(EntityId.parse(parent_id, entity="parent category"))

        if category_id is not None and parent == category_id:
            raise CategoryCycleError(category_id, parent)

        if not await self.repository.exists(parent):
            raise InvalidReferenceError("parent category", parent)

        if category_id is not None:
            await self._ensure_acyclic(category_id, parent)

        return parent

    async def _ensure_acyclic(self, category_id: str, parent_id: str) -> None:
        # A chain longer than the number of categories is already cyclic
        remaining = await self.repository.count()
        current: str | None = parent_id

        while remaining > 0:
            current = await self.repository.get_parent_id(current)
            if current is None:
                return
            if current == category_id:
                raise CategoryCycleError(category_id, parent_id)
            remaining -= 1

        raise CategoryCycleError(category_id, parent_id)
