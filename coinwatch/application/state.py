"""
Application Layer: Observable State
Holds the current value of a screen and notifies subscribers on every change.
"""
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

class StateHolder(Generic[T]):
    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Registers callback; returns a function that unregisters it"""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def clear_subscribers(self) -> None:
        self._subscribers.clear()
