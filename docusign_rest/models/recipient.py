"""
Model Recipient

A signer bound to a template role, carrying model tabs.
"""

from typing import Any, Dict, Iterable, List, Optional

from .tab import Tab


class Recipient:
    """
    A template-role signer.

    Embedded recipients get a clientUserId (client_id, else email) so the
    provider suppresses email and expects an embedded view.
    """

    def __init__(
        self,
        id: Any = None,
        role_name: Optional[str] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        embedded: bool = False,
        client_id: Optional[str] = None,
        tabs: Optional[List[Tab]] = None
    ):
        self.id = id
        self.role_name = role_name
        self.name = name
        self.email = email
        self.embedded = embedded
        self.client_id = client_id
        self.tabs = list(tabs) if tabs else []

    @property
    def client_user_id(self) -> Optional[str]:
        if not self.embedded:
            return None
        return self.client_id or self.email

    def to_dict(self) -> Dict[str, Any]:
        grouped = Tab.group(self.tabs)
        data = {
            'recipientId': None if self.id is None else str(self.id),
            'roleName': self.role_name,
            'email': self.email,
            'clientUserId': self.client_user_id,
            'embedded': self.embedded,
            'name': self.name,
            'tabs': {name: [t.to_dict() for t in tabs] for name, tabs in grouped.items()} if grouped else None,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def merge(cls, recipients: Iterable['Recipient']) -> List['Recipient']:
        """
        Collapse recipients sharing an id into one.

        The first occurrence supplies name/email/role; tabs from later
        occurrences are appended. The result is ordered by id.
        """
        merged: Dict[str, Recipient] = {}
        for recipient in recipients or []:
            key = str(recipient.id)
            if key in merged:
                merged[key].tabs.extend(recipient.tabs)
                continue
            merged[key] = cls(
                id=recipient.id,
                role_name=recipient.role_name,
                name=recipient.name,
                email=recipient.email,
                embedded=recipient.embedded,
                client_id=recipient.client_id,
                tabs=recipient.tabs
            )

        return sorted(merged.values(), key=lambda r: _id_sort_key(r.id))

    def __repr__(self) -> str:
        return f"Recipient(id={self.id!r}, role_name={self.role_name!r}, email={self.email!r})"


def _id_sort_key(value: Any):
    text = str(value)
    return (0, int(text), '') if text.isdigit() else (1, 0, text)
