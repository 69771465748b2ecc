"""Envelope codec.

A `Scheme` knows which wire types the webhook accepts and turns raw request
bytes into typed models (and back). It is built once by `build_scheme` when
the application is created and is read-only afterwards, so a single instance
is shared by every request thread.
"""

import json
import logging
import types
from typing import Any

import pydantic

from exc import DecodeError, EncodeError
from models import (
    ApiVersion,
    AdmissionReview,
    BaseModel,
    GroupVersionKind,
    Memcached,
)

LOG = logging.getLogger(__name__)

ADMISSION_REVIEW_KIND = "AdmissionReview"
MEMCACHED_GVK = GroupVersionKind(
    group="cache.example.com", version="v1alpha1", kind="Memcached"
)


class Scheme:
    def __init__(self, types_by_gvk: dict[GroupVersionKind, type[BaseModel]]):
        self._types = types.MappingProxyType(dict(types_by_gvk))

    def recognizes(self, gvk: GroupVersionKind) -> bool:
        return gvk in self._types

    def kind_for(self, model: type[BaseModel]) -> GroupVersionKind | None:
        """Return the first registered GVK for a model type, if any."""
        for gvk, registered in self._types.items():
            if registered is model:
                return gvk
        return None

    def decode(
        self, data: bytes, into: type[BaseModel] | None = None
    ) -> tuple[BaseModel, GroupVersionKind]:
        """Decode `data` into a registered type.

        Without `into`, the payload's own apiVersion/kind selects the type
        and unregistered kinds are rejected. With `into`, the payload is
        decoded into that type; if `into` is registered, a payload that
        names a different kind is rejected.

        Returns the decoded object and the group/version/kind found on the
        wire. Any failure is raised as DecodeError.
        """
        doc = self._load(data)
        wire_gvk = self._wire_gvk(doc)

        if into is None:
            if wire_gvk is None:
                raise DecodeError(
                    f"Object 'Kind' is missing in '{self._preview(data)}'"
                )
            if not self.recognizes(wire_gvk):
                raise DecodeError(
                    f'no kind "{wire_gvk.kind}" is registered for version '
                    f'"{wire_gvk.api_version}"'
                )
            model = self._types[wire_gvk]
        else:
            model = into
            expected = self.kind_for(into)
            if expected is not None:
                if wire_gvk is None:
                    wire_gvk = expected
                elif wire_gvk != expected:
                    raise DecodeError(f"expected {expected} but got {wire_gvk}")

        try:
            obj = model.model_validate(doc)
        except pydantic.ValidationError as err:
            raise DecodeError(str(err)) from err

        return obj, wire_gvk

    def encode(self, obj: BaseModel) -> bytes:
        try:
            return obj.model_dump_json(exclude_none=True).encode()
        except (ValueError, TypeError) as err:
            raise EncodeError(f"failed to encode {type(obj).__name__}: {err}") from err

    def _load(self, data: bytes) -> dict[str, Any]:
        if not data:
            raise DecodeError("empty payload")
        try:
            doc = json.loads(data)
        except (UnicodeDecodeError, ValueError, RecursionError) as err:
            raise DecodeError(f"invalid JSON: {err}") from err
        if not isinstance(doc, dict):
            raise DecodeError(
                f"expected a JSON object but got {type(doc).__name__}"
            )
        return doc

    @staticmethod
    def _wire_gvk(doc: dict[str, Any]) -> GroupVersionKind | None:
        api_version = doc.get("apiVersion")
        kind = doc.get("kind")
        if not (isinstance(api_version, str) and api_version):
            return None
        if not (isinstance(kind, str) and kind):
            return None
        return GroupVersionKind.from_api_version(api_version, kind)

    @staticmethod
    def _preview(data: bytes, limit: int = 80) -> str:
        text = data.decode(errors="replace")
        if len(text) > limit:
            text = text[:limit] + "..."
        return text


def build_scheme() -> Scheme:
    """Build the scheme with every type the webhook serves."""
    registered: dict[GroupVersionKind, type[BaseModel]] = {
        GroupVersionKind.from_api_version(version, ADMISSION_REVIEW_KIND): AdmissionReview
        for version in ApiVersion
    }
    registered[MEMCACHED_GVK] = Memcached

    LOG.debug("registered kinds: %s", ", ".join(str(gvk) for gvk in registered))
    return Scheme(registered)
