from pathlib import PurePosixPath
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict

from toastcore.models.module_spec import ModuleSpec, NoModule, validate_module_spec

INDEX_SEGMENT = "index"

ModuleSpecField = Annotated[ModuleSpec, BeforeValidator(validate_module_spec)]


class SetDataForSlug(BaseModel):
    """Description of one page emitted by the build stream.

    Built from an external payload, normalized once with :meth:`normalize`,
    and treated as read-only afterwards.
    """

    model_config = ConfigDict(strict=True)

    prerender: bool = True
    slug: str  # "/some/url" or "some/url" before normalization
    component: Optional[ModuleSpecField] = None
    data: Optional[Any] = None
    wrapper: Optional[ModuleSpecField] = None

    def normalize(self) -> "SetDataForSlug":
        """Canonicalize in place and return ``self``.  Idempotent."""
        # all slugs are absolute
        if not self.slug.startswith("/"):
            self.slug = "/" + self.slug

        # an empty object must not create a data file or clobber existing data
        if isinstance(self.data, dict) and not self.data:
            self.data = None

        return self

    def slug_as_relative_filepath(self) -> PurePosixPath:
        """Relative output path for this page, e.g. ``/a/b/`` -> ``a/b/index``."""
        slug = self.slug if self.slug.startswith("/") else "/" + self.slug
        if slug.endswith("/"):
            return PurePosixPath(slug.lstrip("/") + INDEX_SEGMENT)
        return PurePosixPath(slug.lstrip("/"))

    def to_payload(self) -> Dict[str, Any]:
        """Wire form of the record; a ``NoModule`` spec is written as null."""
        payload: Dict[str, Any] = {"prerender": self.prerender, "slug": self.slug}
        if self.component is not None:
            payload["component"] = _module_payload(self.component)
        if self.data is not None:
            payload["data"] = self.data
        if self.wrapper is not None:
            payload["wrapper"] = _module_payload(self.wrapper)
        return payload


def _module_payload(spec: ModuleSpec) -> Optional[Dict[str, Any]]:
    if isinstance(spec, NoModule):
        return None
    return spec.to_payload()
