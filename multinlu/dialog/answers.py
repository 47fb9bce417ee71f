"""
NLG Manager - answer templates per locale and intent

Answers are templates with {name} placeholders filled from the context.
An answer may carry a condition, a small boolean expression over context
values such as `hero == "spiderman" and age > 18`, and only qualifies
when it evaluates true.
"""

import ast
import logging
import operator
import random
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

_COMPARATORS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}

_LITERAL_NAMES = {"true": True, "false": False, "null": None, "undefined": None}

# ===, !==, && and || are accepted as aliases
_CONDITION_REWRITES = (("===", "=="), ("!==", "!="), ("&&", " and "), ("||", " or "))


class _TemplateContext(dict):
    def __missing__(self, key):
        return ""


def render_template(template: str, context: Dict[str, Any]) -> str:
    """Render a {name} template; unknown names render as empty text"""
    try:
        return template.format_map(_TemplateContext(context))
    except (ValueError, IndexError, AttributeError) as e:
        logger.warning(f"Could not render template '{template}': {e}")
        return template


def _evaluate_node(node: ast.AST, context: Dict[str, Any]) -> Any:
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body, context)
    if isinstance(node, ast.Constant):
        return node.value
    if isinstance(node, ast.Name):
        if node.id in _LITERAL_NAMES:
            return _LITERAL_NAMES[node.id]
        return context.get(node.id)
    if isinstance(node, (ast.List, ast.Tuple)):
        return [_evaluate_node(item, context) for item in node.elts]
    if isinstance(node, ast.BoolOp):
        values = (_evaluate_node(value, context) for value in node.values)
        return all(values) if isinstance(node.op, ast.And) else any(values)
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not):
        return not _evaluate_node(node.operand, context)
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
        return -_evaluate_node(node.operand, context)
    if isinstance(node, ast.Compare):
        left = _evaluate_node(node.left, context)
        for op, comparator in zip(node.ops, node.comparators):
            right = _evaluate_node(comparator, context)
            if not _COMPARATORS[type(op)](left, right):
                return False
            left = right
        return True
    raise ValueError(f"Unsupported expression: {type(node).__name__}")


def evaluate_condition(condition: Optional[str], context: Dict[str, Any]) -> bool:
    """Evaluate an answer condition; invalid conditions never match"""
    if not condition or not condition.strip():
        return True
    expression = condition
    for source, target in _CONDITION_REWRITES:
        expression = expression.replace(source, target)
    try:
        return bool(_evaluate_node(ast.parse(expression.strip(), mode="eval"), context))
    except (SyntaxError, ValueError, TypeError, KeyError) as e:
        logger.debug(f"Condition '{condition}' not satisfied: {e}")
        return False


@dataclass
class Answer:
    """Answer template with optional condition."""

    response: str
    condition: Optional[str] = None


class NlgManager:
    """
    Stores answers per locale and intent and picks one for a context.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.responses: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}  # locale -> intent -> answers
        self._rng = rng or random.Random()

    def add_answer(self, locale: str, intent: str, answer: str, condition: Optional[str] = None) -> None:
        answers = self.responses.setdefault(locale, {}).setdefault(intent, [])
        entry = {"response": answer, "condition": condition}
        if entry not in answers:
            answers.append(entry)

    def remove_answer(self, locale: str, intent: str, answer: str, condition: Optional[str] = None) -> None:
        answers = self.responses.get(locale, {}).get(intent)
        if not answers:
            return
        entry = {"response": answer, "condition": condition}
        if entry in answers:
            answers.remove(entry)
        if not answers:
            del self.responses[locale][intent]

    def find_answer(self, locale: Optional[str], intent: str, context: Dict[str, Any]) -> Optional[Answer]:
        """Pick one of the answers whose condition holds for the context"""
        candidates = [
            entry for entry in self.responses.get(locale or "", {}).get(intent, [])
            if evaluate_condition(entry.get("condition"), context)
        ]
        if not candidates:
            return None
        entry = self._rng.choice(candidates)
        return Answer(response=entry["response"], condition=entry.get("condition"))

    def render(self, template: str, context: Dict[str, Any]) -> str:
        return render_template(template, context)

    def load(self, responses: Optional[Dict[str, Any]]) -> None:
        self.responses = {
            locale: {intent: [dict(entry) for entry in answers] for intent, answers in intents.items()}
            for locale, intents in (responses or {}).items()
        }

    def clear(self) -> None:
        self.responses = {}
