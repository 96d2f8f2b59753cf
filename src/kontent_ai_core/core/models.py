"""Base model for API payloads."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Payload model with the API's JSON conventions.

    - fields are written as camelCase
    - input keys match regardless of case ("Name", "name", "NAME")
    - unknown keys are ignored

    Example:
        >>> class ContentItem(ApiModel):
        ...     codename: str
        ...     last_modified: Optional[str] = None
        >>> ContentItem.model_validate({"Codename": "about_us", "LastModified": None})
        ContentItem(codename='about_us', last_modified=None)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitive(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        lookup: Dict[str, str] = {}
        for name, info in cls.model_fields.items():
            alias = info.alias or name
            lookup[name.lower()] = alias
            lookup[alias.lower()] = alias

        known = set(lookup.values())
        result = {}
        for key, value in data.items():
            if isinstance(key, str) and key not in known:
                key = lookup.get(key.lower(), key)
            result.setdefault(key, value)
        return result
