from typing import Generic, Iterator, Protocol, TypeVar

from .errors import DecodeError, InvalidType, NestingTooDeep, NodeConsumedError, UnsupportedShape
from .reader import Json5Reader, Json5ReaderOptions, ParseNode, Rule
from .scalars import Json5BooleanParser, Json5NumberParser, Json5StringDecoder

T = TypeVar("T")

class Some(Generic[T]):
    """
    A value returned by an accessor, so an element decoded to None is not mistaken for exhaustion.
    """
    value: T

    def __init__(self, value: T) -> None:
        self.value = value
    #end

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Some) and self.value == other.value
    #end

    def __repr__(self) -> str:
        return f"Some({self.value!r})"
    #end
#end

class Json5Seed(Protocol):
    def deserialize(self, deserializer: "Json5Deserializer") -> object: ...
#end

class Json5Visitor:
    """
    Builds a value from whichever kind of node the deserializer holds.

    Exactly one visit method is called per dispatch. The defaults reject their kind,
    so a subclass only overrides the kinds its target can be built from.
    Every visitor is also a seed: it can decode one array element or object value.
    """
    # What the visitor accepts, for error messages.
    expecting: str = "a JSON5 value"

    def deserialize(self, deserializer: "Json5Deserializer") -> object:
        return deserializer.deserialize_any(self)
    #end

    def visit_unit(self) -> object:
        raise self._invalid("null")
    #end

    def visit_bool(self, value: bool) -> object:
        raise self._invalid(f"boolean `{'true' if value else 'false'}`")
    #end

    def visit_string(self, value: str) -> object:
        raise self._invalid(f"string {value!r}")
    #end

    def visit_float(self, value: float) -> object:
        raise self._invalid(f"floating point `{value!r}`")
    #end

    def visit_seq(self, seq: "Json5SeqAccess") -> object:
        raise self._invalid("sequence")
    #end

    def visit_map(self, map: "Json5MapAccess") -> object:
        raise UnsupportedShape(f"Objects cannot be decoded as {self.expecting}")
    #end

    def _invalid(self, unexpected: str) -> InvalidType:
        return InvalidType(f"invalid type: {unexpected}, expected {self.expecting}")
    #end
#end

class Json5Deserializer:
    # The options to use when decoding.
    options: Json5ReaderOptions
    # The number of arrays and objects enclosing the held node.
    depth: int
    # The text the node was read from, for error positions.
    source: str

    def __init__(self, node: ParseNode, options: Json5ReaderOptions = Json5ReaderOptions(), depth: int = 0, source: str = "") -> None:
        """
        Constructs a deserializer that owns a single node.
        """
        self._node: ParseNode | None = node
        self.options = options
        self.depth = depth
        self.source = source
    #end

    @staticmethod
    def from_str(string: str, options: Json5ReaderOptions = Json5ReaderOptions()) -> "Json5Deserializer":
        """
        Reads a string and constructs a deserializer over its root value.
        """
        return Json5Deserializer(Json5Reader.read_root_from_string(string, options), options, source=string)
    #end

    def deserialize_any(self, visitor: Json5Visitor) -> object:
        """
        Consumes the held node and passes its decoded value to the matching visit method.

        The kind of the node decides which method is called, never the type the caller asked for.
        """
        node: ParseNode = self._take_node()
        try:
            match node.rule:
                case Rule.NULL:
                    return visitor.visit_unit()
                case Rule.BOOLEAN:
                    return visitor.visit_bool(Json5BooleanParser.parse(node.text))
                case Rule.STRING:
                    return visitor.visit_string(Json5StringDecoder.decode(node))
                case Rule.NUMBER:
                    return visitor.visit_float(Json5NumberParser.parse(node.text, self.options.hex_bits, node.position))
                case Rule.ARRAY:
                    self._check_depth(node)
                    return visitor.visit_seq(Json5SeqAccess(node.children, self.options, self.depth + 1, self.source))
                case Rule.OBJECT:
                    if not self.options.decode_objects:
                        raise UnsupportedShape("Object decoding is disabled", node.position)
                    #end
                    self._check_depth(node)
                    return visitor.visit_map(Json5MapAccess(node.children, self.options, self.depth + 1, self.source))
                case _:
                    raise DecodeError(f"Cannot decode a {node.rule.name} node as a value", node.position)
            #end
        except DecodeError as error:
            if error.position is None:
                error.position = node.position
            #end
            raise
        #end
    #end

    # Typed requests decode the same way
    deserialize_bool = deserialize_any
    deserialize_int = deserialize_any
    deserialize_float = deserialize_any
    deserialize_str = deserialize_any
    deserialize_unit = deserialize_any
    deserialize_option = deserialize_any
    deserialize_seq = deserialize_any
    deserialize_tuple = deserialize_any
    deserialize_map = deserialize_any
    deserialize_struct = deserialize_any
    deserialize_ignored_any = deserialize_any

    def _take_node(self) -> ParseNode:
        node: ParseNode | None = self._node
        if node is None:
            raise NodeConsumedError("The deserializer's node was already consumed")
        #end
        self._node = None
        return node
    #end

    def _check_depth(self, node: ParseNode) -> None:
        if self.depth >= self.options.max_depth:
            raise NestingTooDeep.at(f"Exceeded maximum nesting depth of {self.options.max_depth}", self.source, node.position)
        #end
    #end
#end

class Json5SeqAccess:
    """
    Decodes the items of an array one at a time, in source order.
    """
    options: Json5ReaderOptions
    depth: int
    source: str

    def __init__(self, items: list[ParseNode], options: Json5ReaderOptions, depth: int, source: str = "") -> None:
        self._items: Iterator[ParseNode] = iter(items)
        self._remaining: int = len(items)
        self.options = options
        self.depth = depth
        self.source = source
    #end

    def next_element_seed(self, seed: Json5Seed) -> Some | None:
        """
        Decodes the next item through the seed, or returns None once every item has been read.
        """
        item: ParseNode | None = next(self._items, None)
        if item is None:
            return None
        #end
        self._remaining -= 1
        return Some(seed.deserialize(Json5Deserializer(item, self.options, self.depth, self.source)))
    #end

    def iter_elements(self, seed: Json5Seed) -> Iterator[object]:
        while (element := self.next_element_seed(seed)) is not None:
            yield element.value
        #end
    #end

    def size_hint(self) -> int:
        return self._remaining
    #end
#end

class Json5MapAccess:
    """
    Decodes the properties of an object one at a time, in source order.
    """
    options: Json5ReaderOptions
    depth: int
    source: str

    def __init__(self, pairs: list[ParseNode], options: Json5ReaderOptions, depth: int, source: str = "") -> None:
        self._pairs: Iterator[ParseNode] = iter(pairs)
        self._remaining: int = len(pairs)
        self._value: ParseNode | None = None
        self.options = options
        self.depth = depth
        self.source = source
    #end

    def next_key_seed(self, seed: Json5Seed) -> Some | None:
        if self._value is not None:
            raise NodeConsumedError("next_key_seed called before the pending value was read")
        #end
        pair: ParseNode | None = next(self._pairs, None)
        if pair is None:
            return None
        #end
        self._remaining -= 1
        key, self._value = pair.children
        return Some(seed.deserialize(Json5Deserializer(key, self.options, self.depth, self.source)))
    #end

    def next_value_seed(self, seed: Json5Seed) -> object:
        value: ParseNode | None = self._value
        if value is None:
            raise NodeConsumedError("next_value_seed called without a pending key")
        #end
        self._value = None
        return seed.deserialize(Json5Deserializer(value, self.options, self.depth, self.source))
    #end

    def next_entry_seed(self, key_seed: Json5Seed, value_seed: Json5Seed) -> Some | None:
        key: Some | None = self.next_key_seed(key_seed)
        if key is None:
            return None
        #end
        return Some((key.value, self.next_value_seed(value_seed)))
    #end

    def iter_entries(self, key_seed: Json5Seed, value_seed: Json5Seed) -> Iterator[tuple[object, object]]:
        while (entry := self.next_entry_seed(key_seed, value_seed)) is not None:
            yield entry.value
        #end
    #end

    def size_hint(self) -> int:
        return self._remaining
    #end
#end
