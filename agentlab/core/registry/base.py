"""Id-keyed registry shared by every plugin and definition registry."""

from typing import Generic, TypeVar

from agentlab.core.errors import DuplicateRegistrationError, NotRegisteredError

T = TypeVar("T")


class Registry(Generic[T]):
    """
    Holds items keyed by their ``id`` attribute.

    Registration never overwrites: a duplicate id raises
    DuplicateRegistrationError. Subclasses decide whether ``get`` of an
    unknown id returns None or raises.
    """

    kind: str = "item"

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    def register(self, item: T) -> None:
        item_id = getattr(item, "id")
        if item_id in self._items:
            raise DuplicateRegistrationError(
                f'{self.kind.capitalize()} with id "{item_id}" is already registered'
            )
        self._items[item_id] = item

    def has(self, item_id: str) -> bool:
        return item_id in self._items

    def ids(self) -> list[str]:
        return list(self._items)

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def _require(self, item_id: str) -> T:
        try:
            return self._items[item_id]
        except KeyError:
            available = ", ".join(self._items) or "(none)"
            raise NotRegisteredError(
                f'No {self.kind} registered with id "{item_id}". Available ids: {available}'
            ) from None

    # Declared last: annotations above still resolve to the builtin list
    def list(self) -> list[T]:
        return list(self._items.values())
