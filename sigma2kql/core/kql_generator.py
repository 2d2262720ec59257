"""
KQL Expression Generator Module

Renders clause trees as Kibana Query Language (KQL) filter text.
- Field clauses become field:value, with * added for prefix/suffix/substring matches
- Multiple values become (field:a or field:b), or `and` for the `all` modifier
- AND/OR nodes are parenthesized, NOT nodes render as not (...)
"""

import re

from .clauses import And, ClauseNode, FieldClause, Not, Or, PREFIX, SUBSTRING, SUFFIX

# Characters that force a value into a quoted string.
SPECIAL_CHARACTERS = re.compile(r'[\s\\"():<>{}*]')

# Bare values that KQL would read as operators.
KQL_KEYWORDS = ('and', 'or', 'not')

# Quoted strings are kept intact, any other whitespace run becomes one space.
WHITESPACE_OUTSIDE_QUOTES = re.compile(r'"(?:\\.|[^"\\])*"|\s+')

MATCH_NOTHING = '(not *:*)'
MATCH_EVERYTHING = '*:*'


class KQLExpressionGenerator:
    """
    Generates KQL expressions from compiled clause trees.
    """

    def __init__(self):
        self.wildcard_templates = {
            PREFIX: '{}*',
            SUFFIX: '*{}',
            SUBSTRING: '*{}*',
        }

    def generate(self, node: ClauseNode) -> str:
        """
        Render a clause tree and normalize its whitespace.
        """
        return self._collapse_whitespace(self._render(node))

    def _render(self, node: ClauseNode) -> str:
        if isinstance(node, FieldClause):
            return self._generate_field_expression(node)
        if isinstance(node, Not):
            return f"not ({self._render(node.child)})"
        if isinstance(node, And):
            return self._join(node.children, 'and', MATCH_EVERYTHING)
        if isinstance(node, Or):
            return self._join(node.children, 'or', MATCH_NOTHING)
        raise TypeError(f"Unknown clause node: {node!r}")

    def _join(self, children, connective: str, empty: str) -> str:
        if not children:
            return empty
        if len(children) == 1:
            return self._render(children[0])
        return '(' + f' {connective} '.join(self._render(child) for child in children) + ')'

    def _generate_field_expression(self, clause: FieldClause) -> str:
        """
        Example: FieldClause('process.executable', 'suffix', ('a.exe', 'b.exe'))
        → (process.executable:"*a.exe" or process.executable:"*b.exe")
        """
        expressions = [self._create_field_comparison(clause, value) for value in clause.values]
        if len(expressions) == 1:
            return expressions[0]
        return '(' + f' {clause.combinator} '.join(expressions) + ')'

    def _create_field_comparison(self, clause: FieldClause, value: str) -> str:
        template = self.wildcard_templates.get(clause.operator)
        if template:
            return f'{clause.field}:{self._quote(template.format(value))}'
        if value == '' or value.lower() in KQL_KEYWORDS or SPECIAL_CHARACTERS.search(value):
            return f'{clause.field}:{self._quote(value)}'
        return f'{clause.field}:{value}'

    @staticmethod
    def _quote(value: str) -> str:
        escaped_value = value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped_value}"'

    @staticmethod
    def _collapse_whitespace(text: str) -> str:
        def replace(match):
            token = match.group(0)
            return token if token.startswith('"') else ' '

        return WHITESPACE_OUTSIDE_QUOTES.sub(replace, text).strip()


def render_query(node: ClauseNode) -> str:
    return KQLExpressionGenerator().generate(node)
