"""Translate field-comparison filter expressions into Qdrant filters.

Expressions use the document's logical field names::

    relativePath == "src/app.py" and startLine >= 10
    fileExtension in [".py", ".pyi"] or not (metadata.language == "go")
    content like "%async def%"

The translator tokenizes and parses the expression, then emits structured
``qdrant_client.models`` conditions. Literal values only ever land in typed
model fields; nothing is spliced into query text.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, NoReturn

from qdrant_client import models

from ..domain.exceptions import InvalidFilterError

logger = logging.getLogger(__name__)

# Logical name -> payload key
FIELD_MAP: dict[str, str] = {
    "id": "id",
    "content": "content",
    "relativePath": "relative_path",
    "startLine": "start_line",
    "endLine": "end_line",
    "fileExtension": "file_extension",
}
FIELD_MAP.update({v: v for v in list(FIELD_MAP.values())})

METADATA_PREFIX = "metadata."

_TOKEN_RE = re.compile(
    r"""
    (?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
    | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    | (?P<op>==|!=|<=|>=|&&|\|\||[=<>!(),\[\]])
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z0-9_]+)*)
    """,
    re.VERBOSE,
)
_WHITESPACE_RE = re.compile(r"\s+")
_KEYWORDS = {"and", "or", "not", "in", "like", "true", "false"}
_RANGE_OPS = {"<": "lt", "<=": "lte", ">": "gt", ">=": "gte"}


def storage_field(name: str) -> str:
    """Map a logical field name to its payload key.

    Raises:
        InvalidFilterError: If the field is not allowed.
    """
    if name in FIELD_MAP:
        return FIELD_MAP[name]
    if name.startswith(METADATA_PREFIX) and len(name) > len(METADATA_PREFIX):
        return name
    raise InvalidFilterError(f"Field '{name}' is not allowed in filters", context={"field": name})


@dataclass
class _Token:
    kind: str
    value: Any
    position: int


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(expression):
        ws = _WHITESPACE_RE.match(expression, pos)
        if ws:
            pos = ws.end()
            continue
        match = _TOKEN_RE.match(expression, pos)
        if not match:
            raise InvalidFilterError(
                f"Unexpected character {expression[pos]!r} at position {pos}",
                context={"expression": expression, "position": pos},
            )
        kind = match.lastgroup
        text = match.group(kind)
        if kind == "number":
            value: Any = float(text) if any(c in text for c in ".eE") else int(text)
        elif kind == "string":
            value = re.sub(r"\\(.)", r"\1", text[1:-1])
        elif kind == "ident" and text.lower() in _KEYWORDS:
            kind, value = "keyword", text.lower()
        else:
            value = text
        tokens.append(_Token(kind, value, pos))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser emitting Qdrant conditions."""

    def __init__(self, expression: str, tokens: list[_Token]) -> None:
        self.expression = expression
        self.tokens = tokens
        self.index = 0

    def parse(self) -> models.Filter:
        condition = self._or()
        trailing = self._peek()
        if trailing is not None:
            self._fail(f"Unexpected token {trailing.value!r}", trailing)
        if isinstance(condition, models.Filter):
            return condition
        return models.Filter(must=[condition])

    # Grammar

    def _or(self) -> Any:
        parts = [self._and()]
        while self._accept("keyword", "or") or self._accept("op", "||"):
            parts.append(self._and())
        return parts[0] if len(parts) == 1 else models.Filter(should=parts)

    def _and(self) -> Any:
        parts = [self._unary()]
        while self._accept("keyword", "and") or self._accept("op", "&&"):
            parts.append(self._unary())
        return parts[0] if len(parts) == 1 else models.Filter(must=parts)

    def _unary(self) -> Any:
        if self._accept("keyword", "not") or self._accept("op", "!"):
            return models.Filter(must_not=[self._unary()])
        if self._accept("op", "("):
            inner = self._or()
            self._expect("op", ")")
            return inner
        return self._comparison()

    def _comparison(self) -> Any:
        token = self._next()
        if token is None or token.kind != "ident":
            self._fail("Expected a field name", token)
        key = storage_field(token.value)

        if self._accept("keyword", "like"):
            pattern = self._literal()
            if not isinstance(pattern, str):
                self._fail("'like' requires a string pattern", token)
            text = pattern.replace("%", "")
            if not text:
                self._fail("'like' pattern must contain text besides wildcards", token)
            return models.FieldCondition(key=key, match=models.MatchText(text=text))

        negated_in = False
        if self._accept("keyword", "not"):
            negated_in = True
            self._expect("keyword", "in")
            return self._membership(key, negated_in)
        if self._accept("keyword", "in"):
            return self._membership(key, negated_in)

        op = self._next()
        if op is None or op.kind != "op" or op.value not in ("==", "=", "!=", *_RANGE_OPS):
            self._fail("Expected a comparison operator", op)
        value = self._literal()

        if op.value in _RANGE_OPS:
            if not _is_number(value):
                self._fail(f"Operator {op.value} requires a numeric literal", op)
            return models.FieldCondition(key=key, range=models.Range(**{_RANGE_OPS[op.value]: value}))

        condition = _equals(key, value)
        if op.value == "!=":
            return models.Filter(must_not=[condition])
        return condition

    def _membership(self, key: str, negated: bool) -> models.FieldCondition:
        self._expect("op", "[")
        values = [self._literal()]
        while self._accept("op", ","):
            values.append(self._literal())
        self._expect("op", "]")

        if all(isinstance(v, str) for v in values):
            pass
        elif all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            pass
        else:
            self._fail("'in' lists must hold only strings or only integers")

        if negated:
            return models.FieldCondition(key=key, match=models.MatchExcept(**{"except": values}))
        return models.FieldCondition(key=key, match=models.MatchAny(any=values))

    def _literal(self) -> Any:
        token = self._next()
        if token is None:
            self._fail("Expected a literal")
        if token.kind in ("number", "string"):
            return token.value
        if token.kind == "keyword" and token.value in ("true", "false"):
            return token.value == "true"
        self._fail(f"Expected a literal, got {token.value!r}", token)

    # Token helpers

    def _peek(self) -> _Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _next(self) -> _Token | None:
        token = self._peek()
        if token is not None:
            self.index += 1
        return token

    def _accept(self, kind: str, value: str) -> bool:
        token = self._peek()
        if token is not None and token.kind == kind and token.value == value:
            self.index += 1
            return True
        return False

    def _expect(self, kind: str, value: str) -> None:
        if not self._accept(kind, value):
            self._fail(f"Expected {value!r}", self._peek())

    def _fail(self, message: str, token: _Token | None = None) -> NoReturn:
        position = token.position if token is not None else len(self.expression)
        raise InvalidFilterError(
            f"{message} at position {position}",
            context={"expression": self.expression, "position": position},
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _equals(key: str, value: Any) -> models.FieldCondition:
    if isinstance(value, float):
        # MatchValue only takes str/int/bool
        return models.FieldCondition(key=key, range=models.Range(gte=value, lte=value))
    return models.FieldCondition(key=key, match=models.MatchValue(value=value))


class FilterTranslator:
    """Converts filter expressions into Qdrant ``Filter`` objects."""

    def translate(self, expression: str | None) -> models.Filter | None:
        """Translate an expression into a backend predicate.

        Statement separators (``;``) are stripped before parsing.

        Args:
            expression: Filter expression using logical field names.

        Returns:
            A Qdrant Filter, or None for an empty expression, which the
            backend treats as match-all.

        Raises:
            InvalidFilterError: On syntax errors or disallowed fields.
        """
        if expression is None:
            return None
        cleaned = expression.replace(";", "")
        if not cleaned.strip():
            return None

        tokens = _tokenize(cleaned)
        translated = _Parser(cleaned, tokens).parse()
        logger.debug("Translated filter %r", cleaned)
        return translated
