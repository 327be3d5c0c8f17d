"""
Tabs Updater

Loads a recipient's tabs by label, lets the caller change values, and
sends back only the changed ones.

Usage:
    updater = TabsUpdater(envelope_id, '1', client=client)
    updater.set('first_name', 'George')
    updater.execute()
"""

import logging
from typing import Any, Dict, List, Optional

from ..client import DocuSignClient
from .tab import Tab

logger = logging.getLogger(__name__)


class TabsUpdater:
    """
    Tab values of one envelope recipient, keyed by label.

    Only collections with a model tab class (text, checkbox) are loaded.
    Tabs are fetched once, at construction.
    """

    def __init__(self, envelope_id: str, recipient_id: str, client: Optional[DocuSignClient] = None):
        self.envelope_id = envelope_id
        self.recipient_id = recipient_id
        self.client = client if client is not None else DocuSignClient()
        self._tabs = self._load_tabs()

    def _load_tabs(self) -> Dict[str, Tab]:
        metadata = self.client.retrieve_tabs(self.envelope_id, self.recipient_id)
        tabs: Dict[str, Tab] = {}

        for collection_name, entries in (metadata or {}).items():
            tab_class = Tab.for_collection(collection_name)
            if tab_class is None or not isinstance(entries, list):
                continue
            for entry in entries:
                label = str(entry.get('tabLabel'))
                tabs[label] = tab_class(id=entry.get('tabId'), label=label)

        logger.debug(f"Loaded {len(tabs)} tab(s) for recipient {self.recipient_id} of {self.envelope_id}")
        return tabs

    def set(self, label: Any, value: Any) -> Optional[Tab]:
        """Set a tab's value; unknown labels are ignored and return None."""
        tab = self._tabs.get(str(label))
        if tab is not None:
            tab.value = value
        return tab

    def __getitem__(self, label: Any) -> Optional[Tab]:
        return self._tabs.get(str(label))

    def updates(self) -> Dict[str, List[Dict[str, Any]]]:
        """Changed tabs grouped by collection name."""
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for tab in self._tabs.values():
            if tab.dirty:
                grouped.setdefault(tab.collection_name, []).append(tab.to_dict())
        return grouped

    def execute(self) -> Optional[Dict[str, Any]]:
        """Send changed tabs; no request is made when nothing changed."""
        updates = self.updates()
        if not updates:
            return None
        return self.client.modify_tabs(self.envelope_id, self.recipient_id, updates)
