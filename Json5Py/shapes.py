import dataclasses
import types
import typing
from typing import Any, Callable

from .de import Json5Deserializer, Json5MapAccess, Json5Seed, Json5SeqAccess, Json5Visitor
from .errors import DecodeError

class ValueVisitor(Json5Visitor):
    """
    Accepts every kind: null, booleans, strings, floats, lists and dicts.
    """
    expecting = "any JSON5 value"

    def visit_unit(self) -> None:
        return None
    #end

    def visit_bool(self, value: bool) -> bool:
        return value
    #end

    def visit_string(self, value: str) -> str:
        return value
    #end

    def visit_float(self, value: float) -> float:
        return value
    #end

    def visit_seq(self, seq: Json5SeqAccess) -> list[object]:
        return list(seq.iter_elements(self))
    #end

    def visit_map(self, map: Json5MapAccess) -> dict[str, object]:
        return dict(map.iter_entries(_KEY, self))
    #end
#end

class UnitVisitor(Json5Visitor):
    expecting = "null"

    def deserialize(self, deserializer: Json5Deserializer) -> None:
        return deserializer.deserialize_unit(self)
    #end

    def visit_unit(self) -> None:
        return None
    #end
#end

class BoolVisitor(Json5Visitor):
    expecting = "a boolean"

    def deserialize(self, deserializer: Json5Deserializer) -> bool:
        return deserializer.deserialize_bool(self)
    #end

    def visit_bool(self, value: bool) -> bool:
        return value
    #end
#end

class StringVisitor(Json5Visitor):
    expecting = "a string"

    def deserialize(self, deserializer: Json5Deserializer) -> str:
        return deserializer.deserialize_str(self)
    #end

    def visit_string(self, value: str) -> str:
        return value
    #end
#end

class FloatVisitor(Json5Visitor):
    expecting = "a float"

    def deserialize(self, deserializer: Json5Deserializer) -> float:
        return deserializer.deserialize_float(self)
    #end

    def visit_float(self, value: float) -> float:
        return value
    #end
#end

class IntVisitor(Json5Visitor):
    expecting = "an integer"

    def deserialize(self, deserializer: Json5Deserializer) -> int:
        return deserializer.deserialize_int(self)
    #end

    def visit_float(self, value: float) -> int:
        # Numbers always decode as floats; only whole, finite ones are integers
        if not value.is_integer():
            raise self._invalid(f"floating point `{value!r}`")
        #end
        return int(value)
    #end
#end

class SequenceVisitor(Json5Visitor):
    """
    Decodes every item of an array through one element shape.
    """
    element: Json5Seed
    factory: Callable[[typing.Iterable[object]], object]

    def __init__(self, element: Json5Seed, factory: Callable[[typing.Iterable[object]], object] = list) -> None:
        self.element = element
        self.factory = factory
        self.expecting = "a sequence"
    #end

    def deserialize(self, deserializer: Json5Deserializer) -> object:
        return deserializer.deserialize_seq(self)
    #end

    def visit_seq(self, seq: Json5SeqAccess) -> object:
        return self.factory(seq.iter_elements(self.element))
    #end
#end

class TupleVisitor(Json5Visitor):
    """
    Decodes an array of fixed length, each item through its own shape.
    """
    elements: list[Json5Seed]

    def __init__(self, elements: list[Json5Seed]) -> None:
        self.elements = elements
        self.expecting = f"a tuple of size {len(elements)}"
    #end

    def deserialize(self, deserializer: Json5Deserializer) -> tuple[object, ...]:
        return deserializer.deserialize_tuple(self)
    #end

    def visit_seq(self, seq: Json5SeqAccess) -> tuple[object, ...]:
        values: list[object] = []
        for seed in self.elements:
            element = seq.next_element_seed(seed)
            if element is None:
                raise DecodeError(f"invalid length {len(values)}, expected {self.expecting}")
            #end
            values.append(element.value)
        #end
        if seq.size_hint():
            raise DecodeError(f"invalid length {len(values) + seq.size_hint()}, expected {self.expecting}")
        #end
        return tuple(values)
    #end
#end

class DictVisitor(Json5Visitor):
    value: Json5Seed

    def __init__(self, value: Json5Seed) -> None:
        self.value = value
        self.expecting = "a map"
    #end

    def deserialize(self, deserializer: Json5Deserializer) -> dict[str, object]:
        return deserializer.deserialize_map(self)
    #end

    def visit_map(self, map: Json5MapAccess) -> dict[str, object]:
        return dict(map.iter_entries(_KEY, self.value))
    #end
#end

class OptionalVisitor(Json5Visitor):
    """
    Decodes null as None and hands every other kind to the wrapped visitor.
    """
    inner: Json5Visitor

    def __init__(self, inner: Json5Visitor) -> None:
        self.inner = inner
        self.expecting = f"{inner.expecting} or null"
    #end

    def deserialize(self, deserializer: Json5Deserializer) -> object:
        return deserializer.deserialize_option(self)
    #end

    def visit_unit(self) -> None:
        return None
    #end

    def visit_bool(self, value: bool) -> object:
        return self.inner.visit_bool(value)
    #end

    def visit_string(self, value: str) -> object:
        return self.inner.visit_string(value)
    #end

    def visit_float(self, value: float) -> object:
        return self.inner.visit_float(value)
    #end

    def visit_seq(self, seq: Json5SeqAccess) -> object:
        return self.inner.visit_seq(seq)
    #end

    def visit_map(self, map: Json5MapAccess) -> object:
        return self.inner.visit_map(map)
    #end
#end

class DataclassVisitor(Json5Visitor):
    """
    Decodes an object into a dataclass, one property per field.

    Unknown properties and missing fields without defaults raise DecodeError.
    """
    cls: type

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self.expecting = f"struct {cls.__name__}"
        self._fields: dict[str, dataclasses.Field] = {field.name: field for field in dataclasses.fields(cls) if field.init}
        # Resolved on first use so a dataclass can refer to itself
        self._shapes: dict[str, Json5Seed] | None = None
    #end

    def deserialize(self, deserializer: Json5Deserializer) -> object:
        return deserializer.deserialize_struct(self)
    #end

    def visit_map(self, map: Json5MapAccess) -> object:
        shapes: dict[str, Json5Seed] = self._field_shapes()
        values: dict[str, object] = {}
        while (key := map.next_key_seed(_KEY)) is not None:
            shape: Json5Seed | None = shapes.get(key.value)
            if shape is None:
                raise DecodeError(f"unknown field {key.value!r}, expected one of {', '.join(repr(name) for name in shapes)}")
            #end
            values[key.value] = map.next_value_seed(shape)
        #end
        for name, field in self._fields.items():
            if name not in values and field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
                raise DecodeError(f"missing field {name!r} in {self.expecting}")
            #end
        #end
        return self.cls(**values)
    #end

    def _field_shapes(self) -> dict[str, Json5Seed]:
        if self._shapes is None:
            hints: dict[str, Any] = typing.get_type_hints(self.cls)
            self._shapes = {name: shape_of(hints[name]) for name in self._fields}
        #end
        return self._shapes
    #end
#end

_KEY: StringVisitor = StringVisitor()

def shape_of(target: object) -> Json5Seed:
    """
    Returns the seed that decodes JSON5 into the given type annotation.

    Supports object and Any, None, bool, str, float, int, list, tuple, dict with str keys,
    optional types, dataclasses, Json5Visitor subclasses and instances, and any object
    with a deserialize(deserializer) method.
    """
    # Visitors and custom seeds
    if isinstance(target, Json5Visitor):
        return target
    #end
    if isinstance(target, type) and issubclass(target, Json5Visitor):
        return target()
    #end

    # Scalars
    if target is object or target is Any:
        return ValueVisitor()
    #end
    if target is None or target is type(None):
        return UnitVisitor()
    #end
    if target is bool:
        return BoolVisitor()
    #end
    if target is str:
        return StringVisitor()
    #end
    if target is float:
        return FloatVisitor()
    #end
    if target is int:
        return IntVisitor()
    #end

    origin: object = typing.get_origin(target)
    args: tuple[Any, ...] = typing.get_args(target)

    # Sequences
    if target is list or origin is list:
        return SequenceVisitor(shape_of(args[0]) if args else ValueVisitor())
    #end
    if target is tuple or origin is tuple:
        if not args:
            return SequenceVisitor(ValueVisitor(), tuple)
        #end
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceVisitor(shape_of(args[0]), tuple)
        #end
        return TupleVisitor([shape_of(arg) for arg in args])
    #end

    # Maps
    if target is dict or origin is dict:
        if args and args[0] is not str:
            raise TypeError(f"JSON5 object keys are strings, cannot decode into {target!r}")
        #end
        return DictVisitor(shape_of(args[1]) if args else ValueVisitor())
    #end

    # Optional
    if origin is typing.Union or origin is types.UnionType:
        members: list[Any] = [arg for arg in args if arg is not type(None)]
        if len(members) != 1 or len(members) == len(args):
            raise TypeError(f"Only optional unions (T | None) are supported, got {target!r}")
        #end
        inner: Json5Seed = shape_of(members[0])
        if not isinstance(inner, Json5Visitor):
            raise TypeError(f"Cannot make {members[0]!r} optional")
        #end
        return OptionalVisitor(inner)
    #end

    # Structs
    if isinstance(target, type) and dataclasses.is_dataclass(target):
        return DataclassVisitor(target)
    #end
    if callable(getattr(target, "deserialize", None)):
        return typing.cast(Json5Seed, target)
    #end

    raise TypeError(f"Cannot decode JSON5 into {target!r}")
#end
