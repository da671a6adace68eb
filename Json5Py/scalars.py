import math

from .errors import DecodeError
from .reader import ParseNode, Rule

class Json5BooleanParser:
    @staticmethod
    def parse(text: str) -> bool:
        match text:
            case "true":
                return True
            case "false":
                return False
            case _:
                # The reader only produces the two literals above
                raise ValueError(f"Not a boolean literal: {text!r}")
        #end
    #end
#end

class Json5StringDecoder:
    _CHAR_ESCAPES = {
        "b": "\b",
        "f": "\f",
        "n": "\n",
        "r": "\r",
        "t": "\t",
        "v": "\v",
    }

    @staticmethod
    def decode(node: ParseNode) -> str:
        """
        Concatenates the components of a string node, resolving escape sequences.

        A high surrogate escape directly followed by a low surrogate escape is joined into one character.
        Any other surrogate code point raises DecodeError.
        """
        out: list[str] = []
        components: list[ParseNode] = node.children
        i: int = 0
        while i < len(components):
            component: ParseNode = components[i]
            match component.rule:
                case Rule.CHAR_LITERAL:
                    out.append(component.text)
                case Rule.CHAR_ESCAPE_SEQUENCE:
                    out.append(Json5StringDecoder._CHAR_ESCAPES.get(component.text, component.text))
                case Rule.NUL_ESCAPE_SEQUENCE:
                    out.append("\0")
                case Rule.HEX_ESCAPE_SEQUENCE | Rule.UNICODE_ESCAPE_SEQUENCE:
                    code_point: int = int(component.text, 16)
                    # Surrogate pair
                    if 0xD800 <= code_point <= 0xDBFF and i + 1 < len(components):
                        low: ParseNode = components[i + 1]
                        if low.rule == Rule.UNICODE_ESCAPE_SEQUENCE and 0xDC00 <= int(low.text, 16) <= 0xDFFF:
                            code_point = 0x10000 + ((code_point - 0xD800) << 10) + (int(low.text, 16) - 0xDC00)
                            i += 1
                        #end
                    #end
                    out.append(Json5StringDecoder._to_char(code_point, component.position))
                case _:
                    raise ValueError(f"Unexpected string component {component.rule.name}")
            #end
            i += 1
        #end
        return "".join(out)
    #end

    @staticmethod
    def _to_char(code_point: int, position: int) -> str:
        if 0xD800 <= code_point <= 0xDFFF or code_point > 0x10FFFF:
            raise DecodeError(f"Invalid code point U+{code_point:04X} in escape sequence", position)
        #end
        return chr(code_point)
    #end
#end

class Json5NumberParser:
    @staticmethod
    def parse(text: str, hex_bits: int | None = 32, position: int | None = None) -> float:
        """
        Converts a JSON5 numeral to a float.

        Infinity and NaN are matched first; the sign of NaN is discarded.
        Hexadecimal literals are read as unsigned integers of at most hex_bits bits, then widened.
        """
        match text:
            case "Infinity" | "+Infinity":
                return math.inf
            case "-Infinity":
                return -math.inf
            case "NaN" | "-NaN" | "+NaN":
                return math.nan
        #end

        negative: bool = text.startswith("-")
        unsigned: str = text[1:] if text[:1] in ("+", "-") else text
        if Json5NumberParser._is_hex_literal(unsigned):
            value: float = Json5NumberParser._parse_hex(unsigned[2:], hex_bits, position)
            return -value if negative else value
        #end

        try:
            return float(text)
        except ValueError:
            raise DecodeError(f"Invalid number literal {text!r}", position) from None
        #end
    #end

    @staticmethod
    def _parse_hex(digits: str, hex_bits: int | None, position: int | None) -> float:
        try:
            value: int = int(digits, 16)
        except ValueError:
            raise DecodeError(f"Invalid hex digits {digits!r}", position) from None
        #end
        if hex_bits is not None and value >> hex_bits:
            raise DecodeError(f"Hex literal 0x{digits} does not fit in {hex_bits} bits", position)
        #end
        try:
            return float(value)
        except OverflowError:
            raise DecodeError(f"Hex literal 0x{digits} is too large for a float", position) from None
        #end
    #end

    @staticmethod
    def _is_hex_literal(text: str) -> bool:
        return len(text) > 2 and text[:2] in ("0x", "0X")
    #end
#end
