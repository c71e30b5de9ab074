"""Reading the fields of ``package.json`` the packaging config relies on."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from loguru import logger

# "Name <email> (url)", with both trailing parts optional.
_PERSON_PATTERN = re.compile(r"^\s*(?P<name>[^<(]*?)\s*(?:<(?P<email>[^>]*)>)?\s*(?:\((?P<url>[^)]*)\))?\s*$")


@dataclass(frozen=True, slots=True)
class Person:
    name: str
    email: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def parse(cls, value: Union[str, Mapping[str, Any]]) -> "Person":
        """Build a person from either npm author notation."""

        if isinstance(value, Mapping):
            name = value.get("name")
            if not isinstance(name, str):
                raise ValueError("Person object is missing a 'name' string")
            return cls(name=name, email=value.get("email"), url=value.get("url"))
        match = _PERSON_PATTERN.match(value)
        if match is None or not match.group("name"):
            raise ValueError(f"Unable to parse person string: {value!r}")
        return cls(name=match.group("name"), email=match.group("email"), url=match.group("url"))


@dataclass(frozen=True, slots=True)
class PackageMetadata:
    name: str
    author: Optional[Person] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PackageMetadata":
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("package.json must define a non-empty 'name'")
        author = data.get("author")
        return cls(name=name, author=Person.parse(author) if author is not None else None)

    @classmethod
    def load(cls, project_path: Path) -> "PackageMetadata":
        path = Path(project_path) / "package.json"
        logger.debug("Reading package metadata from {}", path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not contain a JSON object")
        return cls.from_mapping(data)


__all__ = ["PackageMetadata", "Person"]
