import re

# Line terminators, with CRLF counted once
_LINE_BREAK = re.compile(r"\r\n|[\n\r\u2028\u2029]")

class ParseError(ValueError):
    """
    Base class for every fault caused by the JSON5 input.
    """
    position: int | None

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position
    #end
#end

class StructuralError(ParseError):
    """
    Malformed JSON5 text, reported by the reader before any decoding starts.
    """
    reason: str
    line: int
    column: int

    def __init__(self, reason: str, position: int, line: int, column: int) -> None:
        super().__init__(f"{reason} at line {line}, column {column}", position)
        self.reason = reason
        self.line = line
        self.column = column
    #end

    @classmethod
    def at(cls, reason: str, source: str, position: int) -> "StructuralError":
        """
        Builds an error for an offset into the source, counting lines and columns from 1.
        """
        breaks: list[re.Match[str]] = list(_LINE_BREAK.finditer(source, 0, position))
        line: int = len(breaks) + 1
        line_start: int = breaks[-1].end() if breaks else 0
        return cls(reason, position, line, position - line_start + 1)
    #end
#end

class NestingTooDeep(StructuralError):
    pass
#end

class DecodeError(ParseError):
    """
    Well-formed text whose value cannot be converted (bad code point, out of range literal, ...).
    """
    pass
#end

class InvalidType(DecodeError):
    pass
#end

class UnsupportedShape(DecodeError):
    pass
#end

class NodeConsumedError(RuntimeError):
    """
    A deserializer's node was requested after it had already been taken.
    """
    pass
#end
