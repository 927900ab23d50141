"""Parser for serialized generic type signatures.

Turns signatures such as ``Pair<List<Set<Int>>, Float?>`` (or the Python
spelling ``dict[str, list[int]]``) into TypeDescriptor trees, and renders
trees back to text.
"""

from dataclasses import dataclass

from .types import TypeDescriptor

OPEN_BRACKETS = {"<": ">", "[": "]"}
CLOSE_BRACKETS = {">": "<", "]": "["}
DELIMITER = ","
NULLABLE = "?"

_SPECIAL = frozenset(OPEN_BRACKETS) | frozenset(CLOSE_BRACKETS) | {DELIMITER}


class ParseError(RuntimeError):
    """Raised when a type signature is malformed."""

    def __init__(self, message: str, signature: str, position: int) -> None:
        super().__init__(f"{message} at position {position} in {signature!r}")
        self.signature = signature
        self.position = position


@dataclass
class _Open:
    bracket: str
    position: int


@dataclass
class _Value:
    descriptor: TypeDescriptor
    position: int
    closed: bool = False  # argument list already attached


_Token = _Open | _Value


def _take_raw(signature: str, start: int) -> str:
    end = start
    while end < len(signature) and signature[end] not in _SPECIAL:
        end += 1
    return signature[start:end]


def _raw_value(signature: str, raw: str, position: int) -> _Value:
    name = raw.strip()
    nullable = False
    # A trailing '?' marks nullability; a lone or leading '?' is kept verbatim.
    if len(name) > 1 and name.endswith(NULLABLE):
        name = name[:-1].rstrip()
        nullable = True
    if not name:
        raise ParseError("Empty type name", signature, position)
    return _Value(TypeDescriptor(name, nullable), position)


def _reduce(stack: list[_Token], signature: str, bracket: str, position: int) -> None:
    children: list[TypeDescriptor] = []
    while stack and isinstance(stack[-1], _Value):
        children.append(stack.pop().descriptor)

    if not stack:
        raise ParseError(f"Unmatched '{bracket}'", signature, position)
    opener = stack.pop()
    assert isinstance(opener, _Open)
    if OPEN_BRACKETS[opener.bracket] != bracket:
        raise ParseError(
            f"'{bracket}' does not close '{opener.bracket}' opened at {opener.position}",
            signature,
            position,
        )
    if not children:
        raise ParseError("Empty type argument list", signature, opener.position)

    if not stack or not isinstance(stack[-1], _Value):
        raise ParseError("Type arguments without a type name", signature, opener.position)
    owner = stack.pop()
    if owner.closed:
        raise ParseError("Type already has type arguments", signature, opener.position)

    children.reverse()
    stack.append(_Value(owner.descriptor.with_arguments(children), owner.position, closed=True))


def parse(signature: str) -> TypeDescriptor:
    """Parse a type signature into a TypeDescriptor.

    Raises:
        ParseError: On empty input, unbalanced or mismatched brackets,
            empty argument slots, and names that are not separated by a
            delimiter.
    """
    stack: list[_Token] = []
    # True right after a complete name or argument list, until the next delimiter.
    pending_value = False
    # Position of a delimiter still waiting for the type that follows it.
    open_delimiter: int | None = None
    i = 0

    while i < len(signature):
        char = signature[i]

        if char in OPEN_BRACKETS:
            if not pending_value:
                raise ParseError(f"'{char}' without a type name", signature, i)
            stack.append(_Open(char, i))
            pending_value = False
            i += 1
        elif char in CLOSE_BRACKETS:
            if open_delimiter is not None:
                raise ParseError(f"Missing type after ',' before '{char}'", signature, i)
            _reduce(stack, signature, char, i)
            pending_value = True
            i += 1
        elif char == DELIMITER:
            if not pending_value:
                raise ParseError("Missing type before ','", signature, i)
            pending_value = False
            open_delimiter = i
            i += 1
        else:
            raw = _take_raw(signature, i)
            text = raw.strip()
            if text == NULLABLE and pending_value and isinstance(stack[-1], _Value):
                top = stack.pop()
                stack.append(_Value(top.descriptor.as_nullable(), top.position, top.closed))
            elif text:
                if pending_value:
                    raise ParseError("Missing ',' between type names", signature, i)
                stack.append(_raw_value(signature, raw, i))
                pending_value = True
                open_delimiter = None
            i += len(raw)

    if open_delimiter is not None:
        raise ParseError("Missing type after ','", signature, open_delimiter)

    if not stack:
        raise ParseError("Empty type signature", signature, 0)

    for token in stack:
        if isinstance(token, _Open):
            raise ParseError(f"Unmatched '{token.bracket}'", signature, token.position)

    if len(stack) != 1:
        raise ParseError("Expected a single type", signature, stack[1].position)

    return stack[0].descriptor


def render(descriptor: TypeDescriptor, brackets: str = "<>") -> str:
    """Render a TypeDescriptor back to signature text.

    parse(render(t)) == t for every tree parse() can produce.
    """
    open_bracket, close_bracket = brackets
    text = descriptor.qualified_name
    if descriptor.type_arguments:
        arguments = ", ".join(render(a, brackets) for a in descriptor.type_arguments)
        text = f"{text}{open_bracket}{arguments}{close_bracket}"
    if descriptor.nullable:
        text += NULLABLE
    return text
