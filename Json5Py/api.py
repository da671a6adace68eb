import logging
from typing import IO

from .de import Json5Deserializer, Json5Seed
from .errors import NestingTooDeep
from .reader import Json5ReaderOptions
from .shapes import shape_of

logger = logging.getLogger(__name__)

def from_str(string: str, shape: object = object, options: Json5ReaderOptions | None = None) -> object:
    """
    Decodes JSON5 text into the given shape (a type annotation, visitor or seed).

    Raises StructuralError for malformed text and DecodeError for values the shape cannot hold.
    """
    if options is None:
        options = Json5ReaderOptions()
    #end
    seed: Json5Seed = shape_of(shape)
    logger.debug("Decoding %d characters of JSON5 as %s", len(string), getattr(seed, "expecting", seed))
    try:
        return seed.deserialize(Json5Deserializer.from_str(string, options))
    except RecursionError:
        # max_depth was set above what the interpreter stack allows
        raise NestingTooDeep.at("Exceeded the interpreter recursion limit", string, 0) from None
    #end
#end

def loads(string: str, options: Json5ReaderOptions | None = None) -> object:
    """
    Decodes JSON5 text into plain Python values: None, bool, str, float, list and dict.
    """
    return from_str(string, object, options)
#end

def load(fp: IO[str], shape: object = object, options: Json5ReaderOptions | None = None) -> object:
    """
    Reads a text file object to the end and decodes it.
    """
    return from_str(fp.read(), shape, options)
#end
