"""
Envelope Models

Object layer over the client for envelopes built from composite
templates and for updating tabs on existing envelopes. Payloads use the
compact shape (unset fields omitted).
"""

from .tab import Tab, TextTab, CheckboxTab
from .recipient import Recipient
from .templates import Template, ServerTemplate, InlineTemplate, CompositeTemplate
from .envelope import Envelope
from .tabs_updater import TabsUpdater

__all__ = [
    'Tab',
    'TextTab',
    'CheckboxTab',
    'Recipient',
    'Template',
    'ServerTemplate',
    'InlineTemplate',
    'CompositeTemplate',
    'Envelope',
    'TabsUpdater',
]
