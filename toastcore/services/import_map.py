"""Import-map parsing and relative-path rewriting.

Values in an import map that start with ``./`` are relative to the
``web_modules`` directory.  They are rewritten to absolute paths under the
``/web_modules/`` mount point so the browser can resolve them from any page.
Every other value (bare specifiers, absolute paths, URLs, ``../`` paths) is
passed through untouched.
"""

import logging
from typing import Union

from pydantic import ValidationError

from toastcore.models.import_map import ImportMap
from toastcore.services.errors import ParseError

logger = logging.getLogger(__name__)

WEB_MODULES_PREFIX = "/web_modules/"
RELATIVE_PREFIX = "./"


def rewrite_import_path(value: str) -> str:
    """Point a ``./``-relative import-map value at the web_modules mount.

    No path normalization is done beyond removing the leading ``./``
    (repeated, as in ``././x``).
    """
    if not value.startswith(RELATIVE_PREFIX):
        return value

    rest = value
    while rest.startswith(RELATIVE_PREFIX):
        rest = rest[len(RELATIVE_PREFIX):]
    return WEB_MODULES_PREFIX + rest


def parse_import_map(text: Union[str, bytes]) -> ImportMap:
    """Parse an import-map JSON document and rewrite its relative values.

    Args:
        text: JSON of the shape ``{"imports": {"<specifier>": "<path>"}}``.

    Returns:
        An :class:`ImportMap` whose keys iterate in sorted order.

    Raises:
        ParseError: if *text* is not valid JSON or does not have that shape.
    """
    try:
        raw = ImportMap.model_validate_json(text)
    except ValidationError as exc:
        raise ParseError.from_validation_error(exc, document="import map") from exc

    imports = {}
    for specifier, path in raw.imports.items():
        resolved = rewrite_import_path(path)
        if resolved != path:
            logger.debug("Rewrote import %s: %s -> %s", specifier, path, resolved)
        imports[specifier] = resolved

    logger.info("Parsed import map", extra={"imports": len(imports)})
    return ImportMap(imports=imports)
