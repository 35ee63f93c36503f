"""
Switch store for a wkhtmltopdf document.

Every name is normalized on the way in, so "pageSize", "PageSize" and
"page-size" address the same slot. Each mutation calls on_change, which the
owning Document uses to drop its cached PDF.
"""

from typing import Any, Callable, Dict, ItemsView, Iterator, Mapping, Optional

from wkpdf.contexts.rendering.arguments import normalize_switch_name


class SwitchSet:
    """
    Ordered mapping of normalized switch name -> value.

    Values: True emits a bare flag, False/None omit the switch, anything else
    is stringified. Insertion order is kept so command lines are reproducible.
    """

    def __init__(
        self,
        initial: Optional[Mapping[str, Any]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._values: Dict[str, Any] = {}
        self._on_change = on_change
        for name, value in (initial or {}).items():
            self._values[normalize_switch_name(name)] = value

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def set(self, name: str, value: Any) -> "SwitchSet":
        self._values[normalize_switch_name(name)] = value
        self._changed()
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(normalize_switch_name(name), default)

    def remove(self, name: str) -> "SwitchSet":
        """Remove a switch; removing one that was never set changes nothing."""
        name = normalize_switch_name(name)
        if name in self._values:
            del self._values[name]
            self._changed()
        return self

    def update(self, values: Mapping[str, Any]) -> "SwitchSet":
        for name, value in values.items():
            self._values[normalize_switch_name(name)] = value
        self._changed()
        return self

    def items(self) -> ItemsView[str, Any]:
        return self._values.items()

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        self.remove(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._values.get(normalize_switch_name(name)) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SwitchSet({self._values!r})"
