"""
Predicate evaluation against AST nodes.

Evaluation is total: a predicate about a capability the node does not have
(decorators on a function, a name on an anonymous class) is a non-match,
never an error. Nodes are only ever inspected through the capability
Protocols in riviere.common.types.
"""

from __future__ import annotations

import re
from typing import Any, assert_never

from riviere.common.types import (
    ClassMember,
    ClassShaped,
    Decoratable,
    DocBearing,
    Nameable,
    SourceLocated,
)
from riviere.services.config_models import (
    AndPredicate,
    ExtendsClassPredicate,
    HasDecoratorArgs,
    HasDecoratorPredicate,
    HasJSDocPredicate,
    ImplementsInterfacePredicate,
    InClassWithPredicate,
    NameEndsWithPredicate,
    NameMatchesPredicate,
    OrPredicate,
    Predicate,
)


def evaluate_predicate(node: Any, predicate: Predicate) -> bool:
    """
    Evaluate a predicate against a node.

    Args:
        node: AST node exposing zero or more capability Protocols
        predicate: Predicate to evaluate

    Returns:
        True if the node satisfies the predicate
    """
    match predicate:
        case HasDecoratorPredicate(has_decorator=args):
            return _has_decorator(node, args)
        case HasJSDocPredicate(has_js_doc=args):
            return _has_js_doc_tag(node, args.tag)
        case ExtendsClassPredicate(extends_class=args):
            return _extends_class(node, args.name)
        case ImplementsInterfacePredicate(implements_interface=args):
            return _implements_interface(node, args.name)
        case NameEndsWithPredicate(name_ends_with=args):
            name = _get_name(node)
            return name is not None and name.endswith(args.suffix)
        case NameMatchesPredicate(name_matches=args):
            name = _get_name(node)
            return name is not None and re.search(args.pattern, name) is not None
        case InClassWithPredicate(in_class_with=inner):
            return _in_class_with(node, inner)
        case AndPredicate(and_=operands):
            return all(evaluate_predicate(node, p) for p in operands)
        case OrPredicate(or_=operands):
            return any(evaluate_predicate(node, p) for p in operands)
        case never:
            assert_never(never)


def _get_name(node: Any) -> str | None:
    if not isinstance(node, Nameable):
        return None
    return node.get_name()


def _has_decorator(node: Any, args: HasDecoratorArgs) -> bool:
    if not isinstance(node, Decoratable):
        return False

    names = set(args.names)
    for decorator in node.get_decorators():
        name = decorator.get_name()
        if name not in names:
            continue
        if args.from_ is None or _imported_from(node, name) == args.from_:
            return True
    return False


def _imported_from(node: Any, identifier: str) -> str | None:
    """Module specifier of the named import that binds ``identifier``."""
    if not isinstance(node, SourceLocated):
        return None
    for declaration in node.get_source_file().get_import_declarations():
        if identifier in declaration.named_imports:
            return declaration.module_specifier
    return None


def _has_js_doc_tag(node: Any, tag: str) -> bool:
    if not isinstance(node, DocBearing):
        return False
    return any(tag in doc.tag_names for doc in node.get_js_docs())


def _extends_class(node: Any, name: str) -> bool:
    if not isinstance(node, ClassShaped):
        return False
    extends = node.get_extends()
    return extends is not None and extends.text == name


def _implements_interface(node: Any, name: str) -> bool:
    if not isinstance(node, ClassShaped):
        return False
    return any(entry.text == name for entry in node.get_implements())


def _in_class_with(node: Any, inner: Predicate) -> bool:
    if not isinstance(node, ClassMember):
        return False
    parent = node.get_parent_class()
    if parent is None or not isinstance(parent, ClassShaped):
        return False
    return evaluate_predicate(parent, inner)


__all__ = ["evaluate_predicate"]
