"""How a page component or wrapper is supplied.

A module spec is one of three variants, discriminated by ``mode``:

``NoModule``  (wire tag ``"no-module"``)
    No component is present.  Callers show this as a null component.

``File``  (wire tag ``"filepath"``)
    The component lives in a file; ``path`` is kept exactly as given.

``Source``  (wire tag ``"source"``)
    The component is inline source text in ``code``.

Both the canonical variant names and the wire tags are accepted when
parsing, and the payload may be keyed either ``value`` or by the variant's
own field name, so older payload shapes keep loading.
"""

import json
from typing import Any, ClassVar, Dict, Tuple, Type, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from toastcore.services.errors import ParseError


class NoModule(BaseModel):
    model_config = ConfigDict(frozen=True)

    MODE: ClassVar[str] = "no-module"

    def to_payload(self) -> Dict[str, Any]:
        return {"mode": self.MODE}

    def sort_key(self) -> Tuple[int, str]:
        return (0, "")


class File(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    MODE: ClassVar[str] = "filepath"

    path: str = Field(validation_alias=AliasChoices("value", "path"))

    def to_payload(self) -> Dict[str, Any]:
        return {"mode": self.MODE, "value": self.path}

    def sort_key(self) -> Tuple[int, str]:
        return (1, self.path)


class Source(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    MODE: ClassVar[str] = "source"

    code: str = Field(validation_alias=AliasChoices("value", "code"))

    def to_payload(self) -> Dict[str, Any]:
        return {"mode": self.MODE, "value": self.code}

    def sort_key(self) -> Tuple[int, str]:
        return (2, self.code)


ModuleSpec = Union[NoModule, File, Source]

# Every accepted ``mode`` tag, canonical and legacy, mapped to its variant.
_MODES: Dict[str, Type[BaseModel]] = {
    "NoModule": NoModule,
    "no-module": NoModule,
    "File": File,
    "filepath": File,
    "Source": Source,
    "source": Source,
}


def parse_module_spec(payload: Any) -> ModuleSpec:
    """Turn a ``{"mode": ..., "value": ...}`` payload into a module spec.

    *payload* may be JSON text, a decoded mapping, or an existing variant
    instance (returned unchanged).

    Raises:
        ParseError: on malformed JSON, a non-object payload, an unknown
            ``mode`` tag, or a missing/mistyped ``value``.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid module spec: malformed JSON ({exc})") from exc
    return validate_module_spec(payload)


def validate_module_spec(payload: Any) -> ModuleSpec:
    """Like :func:`parse_module_spec`, but only for already-decoded values.

    Used for module specs nested inside a page payload, where a string is a
    type mismatch rather than JSON to decode.
    """
    if isinstance(payload, (NoModule, File, Source)):
        return payload

    if not isinstance(payload, dict):
        raise ParseError(
            f"Invalid module spec: expected an object, got {type(payload).__name__}"
        )

    if "mode" not in payload:
        raise ParseError("Invalid module spec: mode: Field required (got nothing)", field="mode")

    mode = payload["mode"]
    variant = _MODES.get(mode) if isinstance(mode, str) else None
    if variant is None:
        expected = ", ".join(repr(tag) for tag in _MODES)
        raise ParseError(
            f"Invalid module spec: mode: unknown tag {mode!r}, expected one of {expected}",
            field="mode",
        )

    try:
        return variant.model_validate(payload)
    except ValidationError as exc:
        raise ParseError.from_validation_error(exc, document=f"{variant.__name__} module spec") from exc
