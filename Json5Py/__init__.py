from .api import from_str, load, loads
from .de import Json5Deserializer, Json5MapAccess, Json5Seed, Json5SeqAccess, Json5Visitor, Some
from .errors import DecodeError, InvalidType, NestingTooDeep, NodeConsumedError, ParseError, StructuralError, UnsupportedShape
from .reader import Json5Reader, Json5ReaderOptions, ParseNode, Rule
from .scalars import Json5BooleanParser, Json5NumberParser, Json5StringDecoder
from .shapes import (
    BoolVisitor, DataclassVisitor, DictVisitor, FloatVisitor, IntVisitor, OptionalVisitor, SequenceVisitor,
    StringVisitor, TupleVisitor, UnitVisitor, ValueVisitor, shape_of,
)
