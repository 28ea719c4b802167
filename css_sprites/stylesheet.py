"""Editable stylesheet model built on the cssutils tokenizer.

Only the tokenizer is used: it accepts any input short of an unterminated
string, so selectors and values the cssutils object model would reject
(``:is()``, ``rgb(0 0 0 / 50%)``, custom properties) still parse. Rule
structure is read from the token stream and every piece of text is sliced
out of the source unchanged.

Declarations are copied into an arena owned by :class:`Stylesheet` and
addressed through :class:`DeclarationHandle`. Top-level style rules with a
plain ``name: value`` body are editable; comments, at-rules and any rule
whose body cannot be split into declarations (nesting, hacks like
``*zoom``) are kept as opaque text blocks.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from cssutils.tokenize2 import Tokenizer

from .errors import StylesheetParseError

IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)
TRIVIA = ("S", "COMMENT")


class _Token(NamedTuple):
    kind: str
    value: str
    start: int
    end: int
    line: int
    col: int

    def is_char(self, ch: str) -> bool:
        return self.kind == "CHAR" and self.value == ch


def _tokenize(text: str) -> List[_Token]:
    # token values may have escapes resolved, so offsets come from line/col
    line_starts = [0] + [m.end() for m in re.finditer("\n", text)]
    raw = []
    for kind, value, line, col in Tokenizer().tokenize(text):
        if kind == "INVALID":
            raise StylesheetParseError(f"unterminated string at line {line}, column {col}")
        raw.append((kind, value, line_starts[line - 1] + col - 1, line, col))

    tokens = []
    for i, (kind, value, start, line, col) in enumerate(raw):
        end = raw[i + 1][2] if i + 1 < len(raw) else len(text)
        tokens.append(_Token(kind, value, start, end, line, col))
    return tokens


def _block_end(tokens: List[_Token], open_index: int) -> int:
    """Index of the ``}`` matching the ``{`` at *open_index*."""
    depth = 0
    for i in range(open_index, len(tokens)):
        if tokens[i].is_char("{"):
            depth += 1
        elif tokens[i].is_char("}"):
            depth -= 1
            if depth == 0:
                return i
    tok = tokens[open_index]
    raise StylesheetParseError(f"unclosed block opened at line {tok.line}, column {tok.col}")


def _at_rule_end(tokens: List[_Token], start: int) -> int:
    """Index of the last token of the at-rule whose keyword is at *start*."""
    for i in range(start + 1, len(tokens)):
        tok = tokens[i]
        if tok.is_char(";"):
            return i
        if tok.is_char("{"):
            return _block_end(tokens, i)
        if tok.is_char("}"):
            raise StylesheetParseError(f"unexpected '}}' at line {tok.line}, column {tok.col}")
    return len(tokens) - 1


def _rule_open(tokens: List[_Token], start: int) -> int:
    for i in range(start, len(tokens)):
        tok = tokens[i]
        if tok.is_char("{"):
            return i
        if tok.is_char("}"):
            raise StylesheetParseError(f"unexpected '}}' at line {tok.line}, column {tok.col}")
    tok = tokens[start]
    raise StylesheetParseError(f"selector at line {tok.line}, column {tok.col} has no block")


def _split_declarations(body: List[_Token]) -> Optional[List[List[_Token]]]:
    """Split a rule body on top-level ``;``; ``None`` when it nests blocks."""
    pieces, current, depth = [], [], 0
    for tok in body:
        if tok.is_char("{") or tok.is_char("}"):
            return None
        if tok.kind == "FUNCTION" or tok.is_char("(") or tok.is_char("["):
            depth += 1
        elif tok.is_char(")") or tok.is_char("]"):
            depth = max(depth - 1, 0)
        elif depth == 0 and tok.is_char(";"):
            pieces.append(current)
            current = []
            continue
        current.append(tok)
    pieces.append(current)
    return [p for p in pieces if any(t.kind not in TRIVIA for t in p)]


def _declaration(text: str, piece: List[_Token]) -> Optional["Declaration"]:
    colon = next((i for i, tok in enumerate(piece) if tok.is_char(":")), None)
    if colon is None:
        return None
    names = [tok for tok in piece[:colon] if tok.kind not in TRIVIA]
    if len(names) != 1 or names[0].kind != "IDENT":
        return None

    value = text[piece[colon].end:piece[-1].end].strip()
    important = IMPORTANT_RE.search(value)
    if important:
        value = value[:important.start()]
    if not value:
        return None
    name = text[names[0].start:names[0].end]
    return Declaration(name, value, important is not None)


@dataclass
class Declaration:
    property: str
    value: str
    important: bool = False

    def css_text(self) -> str:
        text = f"{self.property}: {self.value}"
        if self.important:
            text += " !important"
        return text


class DeclarationHandle(NamedTuple):
    rule_index: int
    node_id: int


@dataclass
class StyleRule:
    selector: str
    declarations: List[int] = field(default_factory=list)


@dataclass
class RawBlock:
    text: str


Block = Union[StyleRule, RawBlock]


class Stylesheet:
    def __init__(self):
        self._nodes: List[Declaration] = []
        self.blocks: List[Block] = []

    @classmethod
    def parse(cls, text: str) -> "Stylesheet":
        """Parse *text*.

        Raises :class:`StylesheetParseError` only when the text has no
        block structure to follow: an unterminated string, an unmatched
        brace, or a selector with no block.
        """
        tokens = _tokenize(text)
        sheet = cls()
        i = 0
        while i < len(tokens):
            tok = tokens[i]
            if tok.kind == "S":
                i += 1
                continue
            if tok.is_char("}"):
                raise StylesheetParseError(f"unexpected '}}' at line {tok.line}, column {tok.col}")

            if tok.kind in ("COMMENT", "CDO", "CDC") or tok.is_char(";"):
                end = i
            elif tok.value.startswith("@"):
                end = _at_rule_end(tokens, i)
            else:
                open_index = _rule_open(tokens, i)
                end = _block_end(tokens, open_index)
                rule = sheet._style_rule_from(text, tokens, i, open_index, end)
                if rule is not None:
                    sheet.blocks.append(rule)
                    i = end + 1
                    continue

            sheet.blocks.append(RawBlock(text[tok.start:tokens[end].end].rstrip()))
            i = end + 1
        return sheet

    def _style_rule_from(self, text, tokens, start, open_index, close_index):
        # any body we cannot split into plain declarations is kept as raw text
        if any(tok.is_char(";") for tok in tokens[start:open_index]):
            return None
        pieces = _split_declarations(tokens[open_index + 1:close_index])
        if pieces is None:
            return None
        decls = [_declaration(text, piece) for piece in pieces]
        if None in decls:
            return None

        rule = StyleRule(text[tokens[start].start:tokens[open_index].start].strip())
        rule.declarations = [self._add(decl) for decl in decls]
        return rule

    def _add(self, decl: Declaration) -> int:
        self._nodes.append(decl)
        return len(self._nodes) - 1

    # ----------------------------------------------------------------- #
    # Lookup
    # ----------------------------------------------------------------- #
    def style_rules(self) -> Iterator[Tuple[int, StyleRule]]:
        for index, block in enumerate(self.blocks):
            if isinstance(block, StyleRule):
                yield index, block

    def declarations(self, rule_index: int) -> List[Tuple[DeclarationHandle, Declaration]]:
        rule = self._style_rule(rule_index)
        return [(DeclarationHandle(rule_index, node_id), self._nodes[node_id])
                for node_id in rule.declarations]

    def declaration(self, handle: DeclarationHandle) -> Declaration:
        return self._nodes[handle.node_id]

    def rule(self, handle: DeclarationHandle) -> StyleRule:
        return self._style_rule(handle.rule_index)

    def _style_rule(self, rule_index: int) -> StyleRule:
        block = self.blocks[rule_index]
        if not isinstance(block, StyleRule):
            raise IndexError(f"block {rule_index} is not a style rule")
        return block

    # ----------------------------------------------------------------- #
    # Mutation
    # ----------------------------------------------------------------- #
    def remove_properties(self, rule_index: int, names: Iterable[str]) -> int:
        """Drop every declaration of *names* from one rule; returns the count."""
        names = {n.lower() for n in names}
        rule = self._style_rule(rule_index)
        kept = [i for i in rule.declarations if self._nodes[i].property.lower() not in names]
        removed = len(rule.declarations) - len(kept)
        rule.declarations = kept
        return removed

    def insert_after(self, handle: DeclarationHandle,
                     declarations: Iterable[Declaration]) -> List[DeclarationHandle]:
        rule = self.rule(handle)
        pos = rule.declarations.index(handle.node_id) + 1
        handles = []
        for decl in declarations:
            node_id = self._add(decl)
            rule.declarations.insert(pos, node_id)
            handles.append(DeclarationHandle(handle.rule_index, node_id))
            pos += 1
        return handles

    # ----------------------------------------------------------------- #
    # Output
    # ----------------------------------------------------------------- #
    def rule_text(self, rule_index: int) -> str:
        block = self.blocks[rule_index]
        if isinstance(block, RawBlock):
            return block.text
        lines = [f"{block.selector} {{"]
        lines.extend(f"  {self._nodes[i].css_text()};" for i in block.declarations)
        lines.append("}")
        return "\n".join(lines)

    def serialize(self) -> str:
        if not self.blocks:
            return ""
        return "\n".join(self.rule_text(i) for i in range(len(self.blocks))) + "\n"
