"""
SQL Column Analyzer
Predicts the result-set column names of a SELECT statement from its text alone,
without a schema or a database connection.
"""
import re
import sys
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from sqlparse import tokens as T
from sqlparse.lexer import tokenize


# ============================================================================
# Constants
# ============================================================================

KEYWORD_SELECT = 'SELECT'
KEYWORD_FROM = 'FROM'

# Fallback names
SUBQUERY_RESULT = 'subquery_result'
CALCULATED_FIELD = 'calculated_field'

# Error messages
MSG_INVALID_QUERY = 'Query must be a non-empty string'
MSG_UNSUPPORTED_STATEMENT = 'Only SELECT queries are supported'

# Naming rule tags
RULE_SUBQUERY = 'subquery'
RULE_EXPLICIT_ALIAS = 'explicit_alias'
RULE_IMPLICIT_ALIAS = 'implicit_alias'
RULE_FUNCTION = 'function'
RULE_QUALIFIED_COLUMN = 'qualified_column'
RULE_CALCULATED = 'calculated'
RULE_BARE_COLUMN = 'bare_column'

# A trailing word from this set is never an implicit alias
RESERVED_KEYWORDS = frozenset({
    'FROM', 'WHERE', 'GROUP', 'HAVING', 'ORDER', 'LIMIT',
    'OFFSET', 'UNION', 'INTERSECT', 'EXCEPT', 'JOIN', 'INNER',
    'LEFT', 'RIGHT', 'FULL', 'OUTER', 'ON', 'USING',
})

QUOTE_CHARS = ('"', "'")
ESCAPE_CHAR = '\\'
ARITHMETIC_OPERATORS = '+-*/'

_IDENTIFIER = r'[A-Za-z_][A-Za-z0-9_]*'
_QUOTED_IDENTIFIER = r'"[^"]+"|`[^`]+`'

# Compiled regex patterns
_RE_WHITESPACE = re.compile(r'\s+')
_RE_TRAILING_TERMINATOR = re.compile(r'(?:\s*;)+\s*$')
_RE_SELECT_KEYWORD = re.compile(rf'{KEYWORD_SELECT}\b', re.IGNORECASE)
_RE_SET_QUANTIFIER = re.compile(r'^(?:DISTINCT|ALL)\s+', re.IGNORECASE)
_RE_IDENTIFIER = re.compile(rf'^{_IDENTIFIER}$')
_RE_SUBQUERY_ALIAS = re.compile(rf'^(?:AS\s+)?({_IDENTIFIER}|{_QUOTED_IDENTIFIER})$', re.IGNORECASE)
_RE_EXPLICIT_ALIAS = re.compile(rf'^(.+?)\s+AS\s+({_IDENTIFIER}|{_QUOTED_IDENTIFIER})$', re.IGNORECASE)
_RE_FUNCTION_CALL = re.compile(rf'^({_IDENTIFIER})\s*\(')

_FROM_BOUNDARY = f' {KEYWORD_FROM} '


# ============================================================================
# Errors
# ============================================================================

class QueryAnalysisError(ValueError):
    """Base class for queries the analyzer refuses to handle."""


class InvalidQueryError(QueryAnalysisError):
    """The query is not a string, or holds no text."""


class UnsupportedStatementError(QueryAnalysisError):
    """The query is not a SELECT statement."""


# ============================================================================
# Debug Logging Utility
# ============================================================================

class DebugLogger:
    """Centralized debug logging utility."""

    _enabled = False  # Flipped on by the debug_logging setting

    @classmethod
    def log(cls, message: str, *args):
        """Log a debug message."""
        if cls._enabled:
            formatted = message.format(*args) if args else message
            print(f"DEBUG: {formatted}", file=sys.stderr)

    @classmethod
    def disable(cls):
        """Disable debug logging."""
        cls._enabled = False

    @classmethod
    def enable(cls):
        """Enable debug logging."""
        cls._enabled = True


# ============================================================================
# Normalization
# ============================================================================

def normalize_query(query: str) -> str:
    """Collapse every whitespace run (tabs and newlines included) to one space and trim."""
    return _RE_WHITESPACE.sub(' ', query).strip()


def strip_comments(query: str) -> str:
    """
    Remove ``--`` and ``/* */`` comments, leaving string literals intact.

    Only the lexer runs, so query size and nesting depth are unbounded.
    ``# `` is an operator in some dialects and is kept.
    """
    parts = []
    for ttype, value in tokenize(query):
        if ttype not in T.Comment:
            parts.append(value)
        elif value.startswith('#'):
            parts.append('#' + strip_comments(value[1:]))
        else:
            parts.append(' ')
    return ''.join(parts)


def is_select_query(query: str) -> bool:
    return _RE_SELECT_KEYWORD.match(query) is not None


# ============================================================================
# Top-level scanning
# ============================================================================

def scan_top_level(text: str, is_boundary: Callable[[str, int], bool], start: int = 0) -> Iterator[int]:
    """
    Yield every position from ``start`` on where ``is_boundary(text, pos)``
    holds outside all parentheses and quoted literals.

    Single and double quotes open a literal that only the same quote
    character closes. A quote preceded by a backslash does not toggle.
    """
    depth = 0
    quote_char = None

    for i in range(start, len(text)):
        char = text[i]
        prev_char = text[i - 1] if i > 0 else ''

        if char in QUOTE_CHARS and prev_char != ESCAPE_CHAR:
            if quote_char is None:
                quote_char = char
            elif char == quote_char:
                quote_char = None

        if quote_char is not None:
            continue

        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1

        if depth == 0 and is_boundary(text, i):
            yield i


def _is_from_keyword(text: str, pos: int) -> bool:
    return text[pos:pos + len(_FROM_BOUNDARY)].upper() == _FROM_BOUNDARY


def _is_comma(text: str, pos: int) -> bool:
    return text[pos] == ','


def extract_select_clause(query: str) -> str:
    """
    Return the text between the leading SELECT and the first top-level FROM.

    ``query`` must be normalized and start with SELECT. Without a top-level
    FROM the clause runs to the end of the query.
    """
    start = len(KEYWORD_SELECT)
    end = next(scan_top_level(query, _is_from_keyword, start), len(query))
    return query[start:end].strip()


def split_select_columns(select_clause: str) -> List[str]:
    """Split a SELECT clause on top-level commas, trimming every part."""
    parts = []
    part_start = 0

    for comma in scan_top_level(select_clause, _is_comma):
        parts.append(select_clause[part_start:comma].strip())
        part_start = comma + 1

    last_part = select_clause[part_start:].strip()
    if last_part:
        parts.append(last_part)

    return parts


# ============================================================================
# Column naming rules
# ============================================================================

def _unquote(alias: str) -> str:
    if alias[0] in '"`':
        return alias[1:-1]
    return alias


def _subquery_name(expression: str, tokens: List[str]) -> Optional[str]:
    if not expression.startswith('('):
        return None
    close_paren = expression.rfind(')')
    if close_paren == -1:
        return SUBQUERY_RESULT
    after_paren = expression[close_paren + 1:].strip()
    match = _RE_SUBQUERY_ALIAS.match(after_paren)
    if not match:
        return SUBQUERY_RESULT
    alias = match.group(1)
    if alias.upper() == 'AS' or alias.upper() in RESERVED_KEYWORDS:
        return SUBQUERY_RESULT
    return _unquote(alias)


def _explicit_alias(expression: str, tokens: List[str]) -> Optional[str]:
    match = _RE_EXPLICIT_ALIAS.match(expression)
    return _unquote(match.group(2)) if match else None


def _implicit_alias(expression: str, tokens: List[str]) -> Optional[str]:
    if len(tokens) < 2:
        return None
    alias = tokens[-1]
    if alias.upper() in RESERVED_KEYWORDS or not _RE_IDENTIFIER.match(alias):
        return None
    # "price * quantity": quantity is an operand
    if tokens[-2][-1] in ARITHMETIC_OPERATORS:
        return None
    return alias


def _function_name(expression: str, tokens: List[str]) -> Optional[str]:
    match = _RE_FUNCTION_CALL.match(expression)
    return match.group(1).lower() if match else None


def _qualified_column(expression: str, tokens: List[str]) -> Optional[str]:
    if '.' not in tokens[0]:
        return None
    return tokens[0].rsplit('.', 1)[-1]


def _calculated_field(expression: str, tokens: List[str]) -> Optional[str]:
    if any(char in ARITHMETIC_OPERATORS for char in expression):
        return CALCULATED_FIELD
    return None


def _bare_column(expression: str, tokens: List[str]) -> Optional[str]:
    return tokens[0]


# Tried in order, first answer wins. The last rule always answers.
NAMING_RULES: Tuple[Tuple[str, Callable[[str, List[str]], Optional[str]]], ...] = (
    (RULE_SUBQUERY, _subquery_name),
    (RULE_EXPLICIT_ALIAS, _explicit_alias),
    (RULE_IMPLICIT_ALIAS, _implicit_alias),
    (RULE_FUNCTION, _function_name),
    (RULE_QUALIFIED_COLUMN, _qualified_column),
    (RULE_CALCULATED, _calculated_field),
    (RULE_BARE_COLUMN, _bare_column),
)


def name_column(expression: str) -> Tuple[str, str]:
    """
    Name a single SELECT-list expression.

    Returns:
        Tuple of (column name, tag of the rule that produced it)
    """
    expression = expression.strip()
    tokens = expression.split()
    if not tokens:
        raise ValueError("Column expression must not be empty")

    for rule, apply_rule in NAMING_RULES:
        name = apply_rule(expression, tokens)
        if name is not None:
            break

    DebugLogger.log("Rule '{}' named expression '{}' as '{}'", rule, expression, name)
    return name, rule


# ============================================================================
# SQL Query Analyzer
# ============================================================================

class SQLQueryAnalyzer:
    """Analyzes SELECT queries and returns the column names of their result set"""

    def __init__(self, strip_comments: bool = True):
        self.strip_comments = strip_comments

    def analyze_query(self, query: str) -> List[str]:
        """
        Predict the ordered column names a SELECT query would return

        Raises:
            InvalidQueryError: query is not a string or has no text
            UnsupportedStatementError: query is not a SELECT statement
        """
        return [column['name'] for column in self.describe_query(query)]

    def describe_query(self, query: str) -> List[Dict[str, str]]:
        """
        Analyze a query and explain each predicted column

        Returns:
            List of dictionaries with expression, name and rule, in SELECT-list order
        """
        clean_query = self.clean_query(query)

        select_clause = extract_select_clause(clean_query)
        select_clause = _RE_SET_QUANTIFIER.sub('', select_clause, count=1)
        DebugLogger.log("SELECT clause: {}", select_clause)

        expressions = [part for part in split_select_columns(select_clause) if part]
        DebugLogger.log("Found {} column expressions", len(expressions))

        columns = []
        for expression in expressions:
            name, rule = name_column(expression)
            columns.append({
                'expression': expression,
                'name': name,
                'rule': rule,
            })

        return columns

    def clean_query(self, query: str) -> str:
        """Validate a raw query and normalize it to a single line"""
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError(MSG_INVALID_QUERY)

        if self.strip_comments:
            query = strip_comments(query)

        clean_query = _RE_TRAILING_TERMINATOR.sub('', normalize_query(query))
        DebugLogger.log("Normalized query: {}", clean_query)

        if not clean_query:
            raise InvalidQueryError(MSG_INVALID_QUERY)
        if not is_select_query(clean_query):
            raise UnsupportedStatementError(MSG_UNSUPPORTED_STATEMENT)

        return clean_query


def analyze_query(query: str) -> List[str]:
    """Predict the column names of ``query`` with a default analyzer."""
    return SQLQueryAnalyzer().analyze_query(query)
