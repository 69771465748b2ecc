import logging

from flask import Flask, request, current_app

from codec import build_scheme
from decisions import ADMIT_FUNCTIONS
from exc import (
    DecodeError,
    EncodeError,
    TransportError,
    UnexpectedObject,
    UnsupportedMediaType,
)
from models import AdmissionReview

LOG = logging.getLogger(__name__)


class DEFAULTS:
    # When false, requests with the wrong content type or object type are
    # dropped with an empty body instead of an explicit error status.
    EXPLICIT_REJECTS = False
    ADMIT_FUNCTIONS = ADMIT_FUNCTIONS
    SCHEME = None


def admission_view(name, admit):
    """Build the view that serves one admission phase.

    The view owns all protocol bookkeeping: it checks the content type,
    decodes the review, calls `admit`, and stamps the request UID and
    group/version/kind onto the response before encoding it.
    """

    def _view():
        body = request.get_data()

        if request.mimetype != "application/json":
            LOG.error("contentType=%s, expect application/json", request.content_type)
            raise UnsupportedMediaType(
                f"contentType={request.content_type}, expect application/json"
            )

        LOG.info("handling request: %s", body.decode(errors="replace"))
        scheme = current_app.scheme
        obj, gvk = scheme.decode(body)

        if not isinstance(obj, AdmissionReview) or obj.request is None:
            LOG.error("Expected AdmissionReview request but got: %s", type(obj).__name__)
            raise UnexpectedObject(
                f"Expected AdmissionReview request but got: {type(obj).__name__}"
            )

        response = admit(obj, scheme)
        response.uid = obj.request.uid
        review = AdmissionReview(apiVersion=gvk.api_version, response=response)

        LOG.info("sending response: %s", review)
        return scheme.encode(review), 200, {"content-type": "application/json"}

    _view.__name__ = f"serve_{name}"
    return _view


def handle_decodeerror(err):
    msg = f"Request could not be decoded: {err}"
    LOG.error(msg)
    return msg, 400, {"content-type": "text/plain"}


def handle_encodeerror(err):
    LOG.error("failed to encode response: %s", err)
    return str(err), 500, {"content-type": "text/plain"}


def handle_transporterror(err):
    if current_app.config["EXPLICIT_REJECTS"]:
        return str(err), err.status, {"content-type": "text/plain"}
    return ""


def health():
    return "OK", 200, {"content-type": "text/plain"}


def create_app(**config) -> Flask:
    """Create the webhook application.

    Configuration is read from DEFAULTS, then from WEBHOOK_* environment
    variables, then from keyword arguments.
    """

    app = Flask(__name__)
    app.config.from_object(DEFAULTS)
    app.config.from_prefixed_env("WEBHOOK")
    if config:
        app.config.update(config)

    app.scheme = app.config["SCHEME"] or build_scheme()

    app.errorhandler(DecodeError)(handle_decodeerror)
    app.errorhandler(EncodeError)(handle_encodeerror)
    app.errorhandler(TransportError)(handle_transporterror)
    app.add_url_rule("/healthz", view_func=health)

    for name, admit in app.config["ADMIT_FUNCTIONS"].items():
        app.add_url_rule(
            f"/{name}",
            endpoint=name,
            view_func=admission_view(name, admit),
            methods=["POST"],
        )

    return app
