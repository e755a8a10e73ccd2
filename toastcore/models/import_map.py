from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator


class ImportMap(BaseModel):
    """Browser import map: module specifier -> resolved module path.

    ``imports`` is read-only and always iterates in lexicographic key order,
    whatever order the source document used, so serialized output is
    reproducible.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    imports: Mapping[str, str]

    @field_validator("imports")
    @classmethod
    def _sort_by_specifier(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(sorted(value.items())))

    @field_serializer("imports")
    def _dump_imports(self, value: Mapping[str, str]) -> Dict[str, str]:
        return dict(value)

    def resolve(self, specifier: str) -> Optional[str]:
        return self.imports.get(specifier)

    def to_json(self) -> str:
        return self.model_dump_json()
