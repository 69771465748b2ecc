"""Admission decisions for Memcached resources.

Every decision function takes the decoded review and the scheme and returns
a fresh AdmissionResponse. They never set the response UID; the dispatch
layer copies it from the request.
"""

import logging
import types
from typing import Callable

from codec import Scheme
from exc import DecodeError
from models import (
    AdmissionResponse,
    AdmissionReview,
    GroupVersionResource,
    Memcached,
    Status,
)

LOG = logging.getLogger(__name__)

MEMCACHED_RESOURCE = GroupVersionResource(
    group="cache.example.com", version="v1alpha1", resource="memcacheds"
)

AdmitFunc = Callable[[AdmissionReview, Scheme], AdmissionResponse]


def deny(message: str) -> AdmissionResponse:
    return AdmissionResponse(allowed=False, status=Status(message=message))


def allow(message: str) -> AdmissionResponse:
    return AdmissionResponse(allowed=True, status=Status(message=message))


def mutate(review: AdmissionReview, scheme: Scheme) -> AdmissionResponse:
    LOG.info("mutating memcacheds")

    if review.request.resource != MEMCACHED_RESOURCE:
        # Requests for any resource other than memcacheds are denied.
        LOG.error("expect resource to be %s", MEMCACHED_RESOURCE)
        return deny(f"expect resource to be {MEMCACHED_RESOURCE}")

    try:
        memcached, _ = scheme.decode(review.request.raw_object, into=Memcached)
    except DecodeError as err:
        LOG.error("failed to decode memcached: %s", err)
        return deny(str(err))

    LOG.info("memcached %s: size=%d", memcached.metadata.name, memcached.spec.size)

    if memcached.spec.size <= 0:
        return deny("size needs to be > 0")

    return allow("Testing mutation hook")


def validate(review: AdmissionReview, scheme: Scheme) -> AdmissionResponse:
    # Placeholder for attribute based policy checks.
    LOG.info("validating memcacheds")
    return allow("Testing validating hook")


# Endpoint name -> decision function. Each entry is served at /<name>.
ADMIT_FUNCTIONS: types.MappingProxyType = types.MappingProxyType(
    {
        "mutate": mutate,
        "validate": validate,
    }
)
