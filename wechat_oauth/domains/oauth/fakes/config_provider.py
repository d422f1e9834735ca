"""Fake client option provider for testing."""

from typing import Any, Mapping


class FakeClientConfigProvider:
    """In-memory fake for ClientConfigProvider.

    Seed options in the constructor or with ``set``; ``lookups`` counts how
    often the factory asked for them.
    """

    def __init__(self, **options: Any) -> None:
        self._options: dict[str, Any] = dict(options)
        self.lookups = 0

    def set(self, **options: Any) -> None:
        self._options.update(options)

    def get_options(self) -> Mapping[str, Any]:
        self.lookups += 1
        return dict(self._options)
