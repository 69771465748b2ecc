import json

import pytest

from codec import MEMCACHED_GVK, Scheme, build_scheme
from conftest import make_review
from exc import DecodeError
from models import AdmissionReview, GroupVersionKind, Memcached


def encoded(doc):
    return json.dumps(doc).encode()


def test_scheme_copies_registrations():
    registered = {MEMCACHED_GVK: Memcached}
    scheme = Scheme(registered)
    registered.clear()

    assert scheme.recognizes(MEMCACHED_GVK)


def test_build_scheme_registers_review_versions(scheme):
    for version in ("v1", "v1beta1"):
        gvk = GroupVersionKind(
            group="admission.k8s.io", version=version, kind="AdmissionReview"
        )
        assert scheme.recognizes(gvk)
    assert scheme.recognizes(MEMCACHED_GVK)
    assert scheme.kind_for(Memcached) == MEMCACHED_GVK


def test_decode_review(scheme):
    review, gvk = scheme.decode(encoded(make_review(spec={"size": 2})))

    assert isinstance(review, AdmissionReview)
    assert review.request.uid == "1234"
    assert gvk == GroupVersionKind(
        group="admission.k8s.io", version="v1", kind="AdmissionReview"
    )


def test_decode_reports_wire_version(scheme):
    _, gvk = scheme.decode(
        encoded(make_review(api_version="admission.k8s.io/v1beta1"))
    )
    assert gvk.api_version == "admission.k8s.io/v1beta1"


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"{",
        b"\xff\xfe",
        b"[]",
        b'"AdmissionReview"',
        b"{}",
        b'{"apiVersion": "v1", "kind": "Pod"}',
        b'{"apiVersion": "admission.k8s.io/v1", "kind": "AdmissionReview"}',
        b"[" * 200000,
    ],
)
def test_decode_errors(scheme, data):
    with pytest.raises(DecodeError):
        scheme.decode(data)


def test_decode_into_unregistered_type():
    """Decoding into a type the scheme doesn't know only checks the shape."""
    scheme = Scheme({})
    memcached, gvk = scheme.decode(
        b'{"apiVersion": "anything/v1", "kind": "Whatever", "spec": {"size": 4}}',
        into=Memcached,
    )

    assert memcached.spec.size == 4
    assert gvk.kind == "Whatever"


def test_decode_into_defaults_kind(scheme):
    memcached, gvk = scheme.decode(b'{"spec": {"size": 1}}', into=Memcached)

    assert memcached.spec.size == 1
    assert gvk == MEMCACHED_GVK


def test_decode_into_rejects_other_kind(scheme):
    with pytest.raises(DecodeError, match="expected"):
        scheme.decode(
            b'{"apiVersion": "apps/v1", "kind": "Deployment"}', into=Memcached
        )


def test_decode_into_ignores_unknown_fields(scheme):
    memcached, _ = scheme.decode(
        b'{"spec": {"size": 1, "image": "memcached:1.6"}, "extra": true}',
        into=Memcached,
    )
    assert memcached.spec.size == 1


def test_encode_preserves_correlation(scheme):
    original = make_review(spec={"size": 2}, uid="round-trip")
    review, gvk = scheme.decode(encoded(original))

    again, again_gvk = scheme.decode(scheme.encode(review))

    assert again.request.uid == "round-trip"
    assert again_gvk == gvk
    assert again.request.resource == review.request.resource


def test_encode_omits_unset_fields():
    scheme = build_scheme()
    review, _ = scheme.decode(encoded(make_review()))

    doc = json.loads(scheme.encode(review))
    assert "response" not in doc
    assert "oldObject" not in doc["request"]
