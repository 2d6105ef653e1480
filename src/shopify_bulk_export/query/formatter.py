"""
Inline runtime variables into a bulk query.

Bulk operations accept a single query string with no variables, so any
``$name`` reference supplied through ``variables`` is replaced by a string
literal and every variable definition is dropped from the operation.

Known limitation: a variable that is referenced in the body but missing from
``variables`` keeps its ``$name`` reference while its definition is still
removed. The printed query is then invalid and the platform rejects it with a
user error at submission time.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from graphql import DocumentNode, parse, print_ast
from graphql.language import REMOVE, StringValueNode, Visitor, visit

from shopify_bulk_export.utils.logging import BaseLogger, SilentLogger

QueryInput = Union[str, DocumentNode]


class _InlineVariables(Visitor):
    """Replaces known variable references and strips variable definitions."""

    def __init__(self, variables: Mapping[str, Any]):
        super().__init__()
        self.variables = variables

    def enter_variable_definition(self, node, *_args):
        return REMOVE

    def enter_variable(self, node, key, *_args):
        # Only references in value position are substituted
        if key != "value":
            return None
        name = node.name.value
        if name not in self.variables:
            return None
        return StringValueNode(value=str(self.variables[name]))


def to_document(query: QueryInput) -> DocumentNode:
    """Parse a query string, or pass an already parsed document through."""
    if isinstance(query, DocumentNode):
        return query
    return parse(query)


def query_text(query: QueryInput) -> str:
    """Source text of a query, as supplied or printed from its document."""
    if isinstance(query, str):
        return query
    return print_ast(query)


def replace_query_variables(
    query: QueryInput,
    variables: Optional[Dict[str, Any]] = None,
    logger: Optional[BaseLogger] = None,
) -> str:
    """
    Return the final query text with ``variables`` inlined.

    The input document is never modified; ``visit`` builds an edited copy.
    """
    log = logger or SilentLogger()
    ast = to_document(query)

    if variables is None:
        formatted = print_ast(ast)
        log.debug("No variables to replace, using query as given: %s", formatted)
        return formatted

    log.debug("Replacing variables in query: %s", variables)
    edited = visit(ast, _InlineVariables(variables))
    formatted = print_ast(edited)
    log.debug("Replaced variables in query: %s", formatted)
    return formatted
