import pytest

import webhook
from codec import build_scheme


def make_review(
    spec=None,
    uid="1234",
    api_version="admission.k8s.io/v1",
    resource=None,
    obj=None,
):
    if resource is None:
        resource = {
            "group": "cache.example.com",
            "version": "v1alpha1",
            "resource": "memcacheds",
        }
    if obj is None:
        obj = {
            "apiVersion": "cache.example.com/v1alpha1",
            "kind": "Memcached",
            "metadata": {"name": "memcached-sample", "namespace": "default"},
            "spec": {} if spec is None else spec,
        }

    return {
        "apiVersion": api_version,
        "kind": "AdmissionReview",
        "request": {
            "uid": uid,
            "kind": {
                "group": "cache.example.com",
                "version": "v1alpha1",
                "kind": "Memcached",
            },
            "resource": resource,
            "operation": "CREATE",
            "namespace": "default",
            "name": "memcached-sample",
            "object": obj,
        },
    }


@pytest.fixture()
def scheme():
    return build_scheme()


@pytest.fixture()
def app(scheme):
    app = webhook.create_app(SCHEME=scheme, TESTING=True)
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()
