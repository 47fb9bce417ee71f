"""
Dialog helpers: slot filling and answer generation.
"""

from .slots import Slot, SlotManager, SLOT_FILL_KEY
from .answers import Answer, NlgManager, render_template, evaluate_condition

__all__ = [
    'Slot',
    'SlotManager',
    'SLOT_FILL_KEY',
    'Answer',
    'NlgManager',
    'render_template',
    'evaluate_condition',
]
