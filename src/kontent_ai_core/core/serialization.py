"""
JSON conventions used by the invoker.

Writing: pydantic models are dumped by alias (camelCase for ApiModel),
None values are omitted.
Reading: case-insensitive property matching (see ApiModel), "//" and
"/* */" comments and trailing commas are tolerated.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Union, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError

from .exceptions import DeserializationError, excerpt

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _empty_value(target: Any) -> Any:
    origin = get_origin(target) or target
    if origin in (list, tuple, set, frozenset):
        return origin()
    if origin in (dict, Dict):
        return {}
    return None


def _strip_comments(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == "/" and i + 1 < n and text[i + 1] == "/":
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif ch == "/" and i + 1 < n and text[i + 1] == "*":
            end = text.find("*/", i + 2)
            if end == -1:
                # unterminated comment, leave it for the parser to reject
                out.append(text[i:])
                break
            out.append(" ")
            i = end + 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "]}":
                i += 1
                continue

        out.append(ch)
        i += 1

    return "".join(out)


@dataclass(frozen=True)
class JsonConvention:
    """
    JSON (de)serialization settings.

    Args:
        exclude_none: Omit None values when writing
        by_alias: Write pydantic fields under their alias (camelCase for ApiModel)
        allow_comments: Accept // and /* */ comments when reading
        allow_trailing_commas: Accept trailing commas when reading

    Example:
        >>> convention = JsonConvention()
        >>> convention.dumps(Item(name="a", value=None))
        b'{"name":"a"}'
        >>> convention.loads(b'{"Name": "a",}', Item)
        Item(name='a', value=None)
    """
    exclude_none: bool = True
    by_alias: bool = True
    allow_comments: bool = True
    allow_trailing_commas: bool = True

    def dumps(self, value: Any) -> bytes:
        if isinstance(value, BaseModel):
            return value.model_dump_json(
                by_alias=self.by_alias, exclude_none=self.exclude_none
            ).encode("utf-8")
        return _adapter(type(value)).dump_json(
            value, by_alias=self.by_alias, exclude_none=self.exclude_none
        )

    def relax(self, text: str) -> str:
        """Strip the JSON extensions this convention accepts."""
        if self.allow_comments and "/" in text:
            text = _strip_comments(text)
        if self.allow_trailing_commas and "," in text:
            text = _strip_trailing_commas(text)
        return text

    def loads(self, data: Union[bytes, str], target: Any = Any) -> Any:
        """
        Deserialize into target.

        An empty body yields None (or an empty list/dict for container targets).

        Raises:
            DeserializationError: body not UTF-8, malformed JSON or schema mismatch
        """
        if isinstance(data, bytes):
            try:
                text = data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise DeserializationError(target, repr(data[:500]), e) from e
        else:
            text = data
        if not text.strip():
            return _empty_value(target)

        try:
            return _adapter(target).validate_json(self.relax(text))
        except ValidationError as e:
            raise DeserializationError(target, excerpt(text), e) from e
