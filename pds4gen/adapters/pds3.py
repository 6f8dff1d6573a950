"""
PDS3 label adapter — parse ODL label statements into field mappings.

A PDS3 label is a sequence of ``KEYWORD = value`` statements, grouped
by ``OBJECT``/``GROUP`` blocks and terminated by ``END``. The mapping
produced for templates:

    - keywords keep their case; pointers (``^IMAGE``) and namespaced
      keywords (``MER:FILTER_NAME``) are kept verbatim
    - each OBJECT/GROUP becomes a nested dict under its name; a block
      name used more than once becomes a list of dicts in label order
    - scalar values are ``LabelValue`` strings as written, with any
      ``<UNIT>`` attached as ``.unit``
    - sequences ``( … )`` and sets ``{ … }`` become lists

Anything after the ``END`` statement (an attached binary payload) is
never tokenized.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

from pds4gen.adapters.base import LabelSource, LabelValue
from pds4gen.core.errors import LabelError

logger = logging.getLogger(__name__)

# ── Tokenizer ───────────────────────────────────────────────────

_TOKEN_RE = re.compile(
    r"""
      (?P<comment>/\*.*?\*/)
    | (?P<string>"[^"]*")
    | (?P<symbol>'[^'\n]*')
    | (?P<unit><[^<>\n]*>)
    | (?P<punct>[=(){},])
    | (?P<word>[^\s=(){},"'<>]+)
    | (?P<space>\s+)
    """,
    re.VERBOSE | re.DOTALL,
)

_BLOCK_START = {"OBJECT": "END_OBJECT", "GROUP": "END_GROUP"}
_BLOCK_END = {"END_OBJECT": "OBJECT", "END_GROUP": "GROUP"}


class Token(NamedTuple):
    kind: str
    text: str
    line: int


def tokenize(text: str) -> Iterator[Token]:
    """Yield ODL tokens lazily, skipping whitespace and comments."""
    pos = 0
    line = 1
    end = len(text)
    while pos < end:
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise LabelError(f"line {line}: unexpected character {text[pos]!r}")
        kind = m.lastgroup or ""
        chunk = m.group()
        if kind not in ("space", "comment"):
            yield Token(kind, chunk, line)
        line += chunk.count("\n")
        pos = m.end()

    # Unterminated quotes never match their group and fall through to
    # the "unexpected character" branch above.


# ── Parser ──────────────────────────────────────────────────────


@dataclass
class _Block:
    kind: str                  # OBJECT / GROUP / (root)
    name: str
    line: int
    fields: dict[str, Any] = field(default_factory=dict)
    block_keys: set[str] = field(default_factory=set)


class ODLParser:
    """Recursive-descent parser over the token stream of one label."""

    def __init__(self, text: str, source: str = "<label>"):
        self._tokens = tokenize(text)
        self._source = source
        self._peeked: Token | None = None
        self._last_line = 1

    # ── token helpers ──

    def _peek(self) -> Token | None:
        if self._peeked is None:
            try:
                self._peeked = next(self._tokens)
            except LabelError as e:
                raise LabelError(f"{self._source}: {e}") from e
            except StopIteration:
                return None
        return self._peeked

    def _next(self) -> Token | None:
        tok = self._peek()
        self._peeked = None
        if tok is not None:
            self._last_line = tok.line
        return tok

    def _error(self, message: str, line: int | None = None) -> LabelError:
        return LabelError(f"{self._source}: line {line or self._last_line}: {message}")

    def _expect_punct(self, text: str) -> Token:
        tok = self._next()
        if tok is None or tok.kind != "punct" or tok.text != text:
            found = "end of file" if tok is None else repr(tok.text)
            raise self._error(f"expected {text!r}, found {found}", tok.line if tok else None)
        return tok

    # ── statements ──

    def parse(self) -> dict[str, Any]:
        root = _Block(kind="", name="", line=1)
        stack = [root]

        while True:
            tok = self._next()
            if tok is None or (tok.kind == "word" and tok.text.upper() == "END"):
                break
            if tok.kind != "word":
                raise self._error(f"expected a keyword, found {tok.text!r}", tok.line)

            keyword = tok.text
            upper = keyword.upper()

            if upper in _BLOCK_END:
                self._close_block(stack, upper, tok.line)
                continue

            self._expect_punct("=")

            if upper in _BLOCK_START:
                name_tok = self._next()
                if name_tok is None or name_tok.kind not in ("word", "symbol", "string"):
                    raise self._error(f"{upper} needs a name", tok.line)
                stack.append(_Block(kind=upper, name=_unquote(name_tok.text), line=tok.line))
                continue

            value = self._value()
            current = stack[-1]
            if keyword in current.fields:
                logger.warning(
                    "%s: line %d: duplicate keyword %s, keeping the last value",
                    self._source, tok.line, keyword,
                )
            current.fields[keyword] = value
            current.block_keys.discard(keyword)

        if len(stack) > 1:
            open_block = stack[-1]
            raise self._error(
                f"{open_block.kind} = {open_block.name} is never closed",
                open_block.line,
            )
        return root.fields

    def _close_block(self, stack: list[_Block], end_keyword: str, line: int) -> None:
        if len(stack) == 1:
            raise self._error(f"{end_keyword} without a matching {_BLOCK_END[end_keyword]}", line)

        block = stack.pop()
        if block.kind != _BLOCK_END[end_keyword]:
            raise self._error(f"{end_keyword} closes {block.kind} = {block.name}", line)

        nxt = self._peek()
        if nxt is not None and nxt.kind == "punct" and nxt.text == "=":
            self._next()
            name_tok = self._next()
            if name_tok is None:
                raise self._error(f"{end_keyword} needs a name after '='", line)
            name = _unquote(name_tok.text)
            if name != block.name:
                raise self._error(f"{end_keyword} = {name} closes {block.kind} = {block.name}", line)

        parent = stack[-1]
        existing = parent.fields.get(block.name)
        if block.name in parent.block_keys:
            if isinstance(existing, list):
                existing.append(block.fields)
            else:
                parent.fields[block.name] = [existing, block.fields]
        else:
            if block.name in parent.fields:
                logger.warning(
                    "%s: line %d: %s %s replaces keyword of the same name",
                    self._source, block.line, block.kind, block.name,
                )
            parent.fields[block.name] = block.fields
            parent.block_keys.add(block.name)

    # ── values ──

    def _value(self) -> Any:
        tok = self._next()
        if tok is None:
            raise self._error("expected a value, found end of file")

        if tok.kind == "punct" and tok.text == "(":
            items = self._items(")")
            return self._with_unit(items)
        if tok.kind == "punct" and tok.text == "{":
            return self._items("}")
        if tok.kind == "string":
            return self._with_unit(LabelValue(_clean_string(tok.text)))
        if tok.kind in ("symbol", "word"):
            return self._with_unit(LabelValue(_unquote(tok.text)))

        raise self._error(f"expected a value, found {tok.text!r}", tok.line)

    def _items(self, closer: str) -> list[Any]:
        items: list[Any] = []
        while True:
            nxt = self._peek()
            if nxt is None:
                raise self._error(f"unterminated list, expected {closer!r}")
            if nxt.kind == "punct" and nxt.text == closer:
                self._next()
                return items
            items.append(self._value())
            nxt = self._peek()
            if nxt is not None and nxt.kind == "punct" and nxt.text == ",":
                self._next()

    def _with_unit(self, value: Any) -> Any:
        nxt = self._peek()
        if nxt is None or nxt.kind != "unit":
            return value
        self._next()
        unit = nxt.text[1:-1].strip()
        return _apply_unit(value, unit)


def _apply_unit(value: Any, unit: str) -> Any:
    if isinstance(value, list):
        return [_apply_unit(v, unit) for v in value]
    if isinstance(value, LabelValue) and value.unit is None:
        return LabelValue(str(value), unit)
    return value


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


def _clean_string(text: str) -> str:
    inner = text[1:-1]
    if "\n" in inner:
        return " ".join(inner.split())
    return inner


# ── Label source ────────────────────────────────────────────────


class PDS3Label(LabelSource):
    """A PDS3 label file exposed as a field-mapping context."""

    format_name = "PDS3"

    def _build_mappings(self) -> dict[str, Any]:
        text = read_label_text(self.path)
        return ODLParser(text, source=str(self.path)).parse()


def read_label_text(path: Path) -> str:
    """Read a label as text, stopping at its ``END`` line.

    Anything after ``END`` is an attached data payload and is left
    undecoded. The label part is decoded as UTF-8, falling back to latin-1.
    """
    lines: list[bytes] = []
    try:
        with path.open("rb") as fh:
            for line in fh:
                lines.append(line)
                if line.strip() == b"END":
                    break
    except OSError as e:
        raise LabelError(f"Cannot read label {path}: {e}") from e

    raw = b"".join(lines)

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Label %s is not valid UTF-8, decoding as latin-1", path)
        return raw.decode("latin-1")
