import logging
import unicodedata
from enum import Enum

from .errors import NestingTooDeep, StructuralError

logger = logging.getLogger(__name__)

class Rule(Enum):
    NULL = 0
    BOOLEAN = 1
    STRING = 2
    NUMBER = 3
    ARRAY = 4
    OBJECT = 5
    PAIR = 6
    CHAR_LITERAL = 7
    CHAR_ESCAPE_SEQUENCE = 8
    NUL_ESCAPE_SEQUENCE = 9
    HEX_ESCAPE_SEQUENCE = 10
    UNICODE_ESCAPE_SEQUENCE = 11
#end

class ParseNode:
    # The grammar rule that produced the node.
    rule: Rule
    # The literal text for scalars, the escaped character or hex digits for escapes, empty for containers.
    text: str
    # Sub-components in source order.
    children: list["ParseNode"]
    # The offset of the node in the source.
    position: int

    def __init__(self, rule: Rule, text: str = "", children: list["ParseNode"] | None = None, position: int = 0) -> None:
        self.rule = rule
        self.text = text
        self.children = children if children is not None else []
        self.position = position
    #end

    def __repr__(self) -> str:
        if self.children:
            return f"ParseNode({self.rule.name}, {self.children!r})"
        #end
        return f"ParseNode({self.rule.name}, {self.text!r})"
    #end
#end

class Json5ReaderOptions:
    # The maximum number of nested arrays and objects.
    max_depth: int
    # The widest hexadecimal number literal in bits, or None for no limit.
    hex_bits: int | None
    # Whether objects decode through the map path. When False every object raises UnsupportedShape.
    decode_objects: bool

    def __init__(self, max_depth: int = 128, hex_bits: int | None = 32, decode_objects: bool = True) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        #end
        if hex_bits is not None and hex_bits < 1:
            raise ValueError("hex_bits must be at least 1 or None")
        #end
        self.max_depth = max_depth
        self.hex_bits = hex_bits
        self.decode_objects = decode_objects
    #end
#end

class Json5Reader:
    # The string to read characters from.
    string: str
    # The index in the string.
    index: int
    # The options to use when reading JSON5.
    options: Json5ReaderOptions
    # The number of arrays and objects currently open.
    depth: int

    # Characters that end a line comment or continue a string onto the next line.
    _NEWLINE_CHARS = set(['\n', '\r', '\u2028', '\u2029'])
    # Characters that are considered whitespace, in addition to Unicode category Zs.
    _WHITESPACE_CHARS = set([
        '\u0009', '\u000A', '\u000B', '\u000C', '\u000D', '\u0020', '\u00A0', '\u2028', '\u2029', '\uFEFF',
    ])
    _HEX_DIGITS = set("0123456789abcdefABCDEF")
    _DECIMAL_DIGITS = set("0123456789")
    _NUMBER_START_CHARS = set("+-.0123456789")
    _ID_START_CATEGORIES = set(["Lu", "Ll", "Lt", "Lm", "Lo", "Nl"])
    _ID_PART_CATEGORIES = _ID_START_CATEGORIES | set(["Mn", "Mc", "Nd", "Pc"])

    def __init__(self, string: str, options: Json5ReaderOptions = Json5ReaderOptions()) -> None:
        """
        Constructs a reader that reads JSON5 from a string.
        """
        self.string = string
        self.index = 0
        self.options = options
        self.depth = 0
    #end

    @staticmethod
    def read_root_from_string(string: str, options: Json5ReaderOptions = Json5ReaderOptions()) -> ParseNode:
        """
        Reads the single root value of a string into a parse tree.
        """
        return Json5Reader(string, options).read_root()
    #end

    def read_root(self) -> ParseNode:
        """
        Reads exactly one value surrounded by optional comments and whitespace.
        """
        self._read_comments_and_whitespace()
        node: ParseNode = self._read_value()
        self._read_comments_and_whitespace()
        if self._peek() is not None:
            raise self._err("Expected end of input")
        #end
        return node
    #end

    def _read_value(self) -> ParseNode:
        start: int = self.index
        next: str | None = self._peek()
        if next is None:
            raise self._err("Expected value, got end of input")
        #end

        # Object
        if next == '{':
            return self._read_object()
        #end
        # Array
        if next == '[':
            return self._read_array()
        #end
        # String
        if next in "\"'":
            return self._read_string()
        #end
        # Number
        if next in self._NUMBER_START_CHARS or self.string.startswith(("Infinity", "NaN"), self.index):
            return self._read_number()
        #end
        # Keywords
        if self._read_keyword("null"):
            return ParseNode(Rule.NULL, "null", position=start)
        #end
        for keyword in ("true", "false"):
            if self._read_keyword(keyword):
                return ParseNode(Rule.BOOLEAN, keyword, position=start)
            #end
        #end
        raise self._err(f"Unexpected character {next!r}")
    #end

    def _read_object(self) -> ParseNode:
        start: int = self.index
        self._enter(start)
        self._read()

        pairs: list[ParseNode] = []
        self._read_comments_and_whitespace()
        while not self._read_one('}'):
            key: ParseNode = self._read_property_name()
            self._read_comments_and_whitespace()
            if not self._read_one(':'):
                raise self._err("Expected ':' after property name")
            #end
            self._read_comments_and_whitespace()
            value: ParseNode = self._read_value()
            pairs.append(ParseNode(Rule.PAIR, children=[key, value], position=key.position))

            self._read_comments_and_whitespace()
            if self._read_one(','):
                self._read_comments_and_whitespace()
                continue
            #end
            if self._read_one('}'):
                break
            #end
            raise self._err("Expected ',' or '}' after property value")
        #end

        self.depth -= 1
        return ParseNode(Rule.OBJECT, children=pairs, position=start)
    #end

    def _read_array(self) -> ParseNode:
        start: int = self.index
        self._enter(start)
        self._read()

        items: list[ParseNode] = []
        self._read_comments_and_whitespace()
        while not self._read_one(']'):
            items.append(self._read_value())

            self._read_comments_and_whitespace()
            if self._read_one(','):
                self._read_comments_and_whitespace()
                continue
            #end
            if self._read_one(']'):
                break
            #end
            raise self._err("Expected ',' or ']' after array item")
        #end

        self.depth -= 1
        return ParseNode(Rule.ARRAY, children=items, position=start)
    #end

    def _read_property_name(self) -> ParseNode:
        next: str | None = self._peek()
        if next is not None and next in "\"'":
            return self._read_string()
        #end
        if next == '\\' or self._is_identifier_start(next):
            return self._read_identifier()
        #end
        raise self._err("Expected property name")
    #end

    def _read_identifier(self) -> ParseNode:
        start: int = self.index
        components: list[ParseNode] = []
        while True:
            first: bool = self.index == start
            next: str | None = self._peek()
            # Escaped identifier character
            if next == '\\':
                escape_start: int = self.index
                self._read()
                if self._peek() != 'u':
                    raise self._err("Expected unicode escape in property name", escape_start)
                #end
                escapes: list[ParseNode] = [self._read_hex_sequence(escape_start, 4, Rule.UNICODE_ESCAPE_SEQUENCE)]
                code_point: int = int(escapes[0].text, 16)
                # Surrogate pair
                if 0xD800 <= code_point <= 0xDBFF and self.string.startswith("\\u", self.index):
                    low_start: int = self.index
                    self._read()
                    escapes.append(self._read_hex_sequence(low_start, 4, Rule.UNICODE_ESCAPE_SEQUENCE))
                    low: int = int(escapes[1].text, 16)
                    if 0xDC00 <= low <= 0xDFFF:
                        code_point = 0x10000 + ((code_point - 0xD800) << 10) + (low - 0xDC00)
                    #end
                #end
                # Lone surrogates fall in category Cs and are rejected here
                char: str = chr(code_point)
                if not (self._is_identifier_start(char) if first else self._is_identifier_part(char)):
                    raise self._err("Invalid escaped character in property name", escape_start)
                #end
                components.extend(escapes)
            # Identifier characters
            elif self._is_identifier_start(next) if first else self._is_identifier_part(next):
                literal_start: int = self.index
                self._read()
                while self._is_identifier_part(self._peek()):
                    self._read()
                #end
                components.append(ParseNode(Rule.CHAR_LITERAL, self.string[literal_start:self.index], position=literal_start))
            else:
                break
            #end
        #end
        return ParseNode(Rule.STRING, self.string[start:self.index], components, start)
    #end

    def _read_string(self) -> ParseNode:
        start: int = self.index
        quote: str = self._read()

        components: list[ParseNode] = []
        while True:
            next: str | None = self._peek()
            if next is None:
                raise self._err("Unterminated string", start)
            #end
            # End of string
            if next == quote:
                self._read()
                return ParseNode(Rule.STRING, self.string[start:self.index], components, start)
            #end
            # Escape sequence
            if next == '\\':
                escape: ParseNode | None = self._read_escape_sequence()
                if escape is not None:
                    components.append(escape)
                #end
                continue
            #end
            if next in "\n\r":
                raise self._err("Unescaped line terminator in string")
            #end
            components.append(self._read_char_literal(quote))
        #end
    #end

    def _read_char_literal(self, quote: str) -> ParseNode:
        start: int = self.index
        while True:
            next: str | None = self._peek()
            if next is None or next == quote or next == '\\' or next in "\n\r":
                break
            #end
            self._read()
        #end
        return ParseNode(Rule.CHAR_LITERAL, self.string[start:self.index], position=start)
    #end

    def _read_escape_sequence(self) -> ParseNode | None:
        start: int = self.index
        self._read()

        next: str | None = self._peek()
        if next is None:
            raise self._err("Unterminated string escape", start)
        #end
        # Line continuation
        if next in self._NEWLINE_CHARS:
            self._read()
            if next == '\r':
                self._read_one('\n')
            #end
            return None
        #end
        # Null character
        if next == '0' and self._peek(1) not in self._DECIMAL_DIGITS:
            self._read()
            return ParseNode(Rule.NUL_ESCAPE_SEQUENCE, next, position=start)
        #end
        if next in self._DECIMAL_DIGITS:
            raise self._err(f"Invalid escape sequence \\{next}", start)
        #end
        # Hex/unicode sequence
        if next == 'x':
            return self._read_hex_sequence(start, 2, Rule.HEX_ESCAPE_SEQUENCE)
        #end
        if next == 'u':
            return self._read_hex_sequence(start, 4, Rule.UNICODE_ESCAPE_SEQUENCE)
        #end
        # Single character
        self._read()
        return ParseNode(Rule.CHAR_ESCAPE_SEQUENCE, next, position=start)
    #end

    def _read_hex_sequence(self, start: int, length: int, rule: Rule) -> ParseNode:
        # Skip 'x' or 'u'
        self._read()
        digits: str = self.string[self.index:self.index + length]
        if len(digits) < length or any(digit not in self._HEX_DIGITS for digit in digits):
            raise self._err(f"Expected {length} hex digits in escape sequence", start)
        #end
        self.index += length
        return ParseNode(rule, digits, position=start)
    #end

    def _read_number(self) -> ParseNode:
        start: int = self.index

        # Sign
        self._read_any('+', '-')

        # Named literals
        if self._read_keyword("Infinity") or self._read_keyword("NaN"):
            return ParseNode(Rule.NUMBER, self.string[start:self.index], position=start)
        #end

        # Hexadecimal
        if self._peek() == '0' and self._peek(1) in ('x', 'X'):
            self.index += 2
            if self._read_digits(self._HEX_DIGITS) == 0:
                raise self._err("Expected hex digits in number", start)
            #end
        # Decimal
        else:
            integer_start: int = self.index
            integer_digits: int = self._read_digits(self._DECIMAL_DIGITS)
            if integer_digits > 1 and self.string[integer_start] == '0':
                raise self._err("Leading zeros are not allowed in numbers", start)
            #end
            fraction_digits: int = 0
            if self._read_one('.'):
                fraction_digits = self._read_digits(self._DECIMAL_DIGITS)
            #end
            if integer_digits == 0 and fraction_digits == 0:
                raise self._err("Expected digits in number", start)
            #end
            if self._read_any('e', 'E') is not None:
                self._read_any('+', '-')
                if self._read_digits(self._DECIMAL_DIGITS) == 0:
                    raise self._err("Expected digits in number exponent", start)
                #end
            #end
        #end

        if self._is_identifier_part(self._peek()):
            raise self._err("Unexpected character after number")
        #end
        return ParseNode(Rule.NUMBER, self.string[start:self.index], position=start)
    #end

    def _read_digits(self, digits: set[str]) -> int:
        start: int = self.index
        while self._peek() in digits:
            self._read()
        #end
        return self.index - start
    #end

    def _read_keyword(self, keyword: str) -> bool:
        if not self.string.startswith(keyword, self.index):
            return False
        #end
        # Keywords cannot run into an identifier (nullable, Infinityx)
        if self._is_identifier_part(self._peek(len(keyword))):
            return False
        #end
        self.index += len(keyword)
        return True
    #end

    def _read_comments_and_whitespace(self) -> None:
        while True:
            next: str | None = self._peek()
            if next is None:
                return
            #end
            # Whitespace
            if self._is_whitespace(next):
                self._read()
                continue
            #end
            # Line comment
            if next == '/' and self._peek(1) == '/':
                self.index += 2
                while self._peek() is not None and self._peek() not in self._NEWLINE_CHARS:
                    self._read()
                #end
                continue
            #end
            # Block comment
            if next == '/' and self._peek(1) == '*':
                end: int = self.string.find("*/", self.index + 2)
                if end == -1:
                    raise self._err("Unterminated block comment")
                #end
                self.index = end + 2
                continue
            #end
            return
        #end
    #end

    def _enter(self, position: int) -> None:
        if self.depth >= self.options.max_depth:
            error: NestingTooDeep = NestingTooDeep.at(f"Exceeded maximum nesting depth of {self.options.max_depth}", self.string, position)
            logger.debug("Rejected JSON5 input: %s", error)
            raise error
        #end
        self.depth += 1
    #end

    def _err(self, reason: str, position: int | None = None) -> StructuralError:
        error: StructuralError = StructuralError.at(reason, self.string, self.index if position is None else position)
        logger.debug("Rejected JSON5 input: %s", error)
        return error
    #end

    def _is_whitespace(self, char: str) -> bool:
        return char in self._WHITESPACE_CHARS or unicodedata.category(char) == "Zs"
    #end

    def _is_identifier_start(self, char: str | None) -> bool:
        if char is None:
            return False
        #end
        return char in "$_" or unicodedata.category(char) in self._ID_START_CATEGORIES
    #end

    def _is_identifier_part(self, char: str | None) -> bool:
        if char is None:
            return False
        #end
        return char in "$_\u200C\u200D" or unicodedata.category(char) in self._ID_PART_CATEGORIES
    #end

    def _peek(self, offset: int = 0) -> str | None:
        if self.index + offset >= len(self.string):
            return None
        #end
        return self.string[self.index + offset]
    #end

    def _read(self) -> str | None:
        if self.index >= len(self.string):
            return None
        #end
        next: str = self.string[self.index]
        self.index += 1
        return next
    #end

    def _read_one(self, option: str) -> bool:
        if self._peek() == option:
            self._read()
            return True
        #end
        return False
    #end

    def _read_any(self, *options: str) -> str | None:
        # Peek char
        next: str | None = self._peek()
        if next is None:
            return None
        #end
        # Match option
        if not (next in options):
            return None
        #end
        # Option matched
        self._read()
        return next
    #end
#end
