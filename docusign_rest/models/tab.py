"""
Model Tabs

Tabs of an existing envelope, identified by label and tab id. Assigning
a value marks the tab dirty so only changed tabs are sent back.
"""

from typing import Any, Dict, Iterable, List, Optional, Type


class Tab:
    """Base tab; only subclasses belong to a concrete collection."""

    collection_name = 'tabs'

    def __init__(self, label: Any = None, value: Any = None, id: Optional[str] = None):
        self.id = id
        self.label = label
        self._value = value
        self.dirty = False

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any):
        self._value = value
        self.dirty = True

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'tabId': self.id,
            'tabLabel': None if self.label is None else str(self.label),
            'locked': True,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def for_collection(cls, collection_name: str) -> Optional[Type['Tab']]:
        """Concrete tab class for a provider collection name, or None."""
        for subclass in cls.__subclasses__():
            if subclass.collection_name == collection_name:
                return subclass
        return None

    @staticmethod
    def group(tabs: Optional[Iterable[Any]]) -> Optional[Dict[str, List['Tab']]]:
        """
        Group tabs by collection name.

        Plain Tab instances and non-tabs are skipped. Returns None for
        empty input.
        """
        if not tabs:
            return None

        grouped: Dict[str, List[Tab]] = {}
        for tab in tabs:
            if isinstance(tab, Tab) and type(tab) is not Tab:
                grouped.setdefault(tab.collection_name, []).append(tab)
        return grouped

    def __repr__(self) -> str:
        return f"{type(self).__name__}(label={self.label!r}, value={self._value!r}, id={self.id!r})"


class TextTab(Tab):
    collection_name = 'textTabs'

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['value'] = '' if self.value is None else str(self.value)
        return data


class CheckboxTab(Tab):
    collection_name = 'checkboxTabs'

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.value is not None:
            data['selected'] = self.value
        return data
