"""Page payload parsing: raw JSON -> validated, normalized SetDataForSlug."""

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from toastcore.models.page import SetDataForSlug
from toastcore.services.errors import ParseError

logger = logging.getLogger(__name__)


def parse_set_data_for_slug(payload: Any) -> SetDataForSlug:
    """Validate a page payload without normalizing it.

    *payload* may be JSON text (``str``/``bytes``), a decoded mapping, or a
    :class:`SetDataForSlug` (returned unchanged).  Validation is strict:
    ``"true"`` is not a boolean and a number is not a slug.

    Raises:
        ParseError: on malformed JSON, missing ``slug``, wrong field types,
            or an invalid ``component``/``wrapper`` module spec.
    """
    if isinstance(payload, SetDataForSlug):
        return payload

    try:
        if isinstance(payload, (str, bytes)):
            return SetDataForSlug.model_validate_json(payload)
        if isinstance(payload, Mapping):
            return SetDataForSlug.model_validate(dict(payload))
    except ValidationError as exc:
        raise ParseError.from_validation_error(exc, document="page payload") from exc

    raise ParseError(f"Invalid page payload: expected an object, got {type(payload).__name__}")


def load_page(payload: Any) -> SetDataForSlug:
    """Parse *payload* and normalize the resulting record."""
    page = parse_set_data_for_slug(payload)
    slug, had_data = page.slug, page.data is not None
    page.normalize()
    if page.slug != slug:
        logger.debug("Normalized slug %r -> %r", slug, page.slug)
    if had_data and page.data is None:
        logger.debug("Dropped empty data object for %s", page.slug)
    return page
