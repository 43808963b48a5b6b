"""One-time system bootstrap endpoints."""

from __future__ import annotations

from flask import Blueprint

from fits.api.deps import json_response, load_body, services, timing
from fits.schemas import BootstrapResultSchema, BootstrapSchema, BootstrapStatusSchema
from fits.services.bootstrap import BootstrapIn

bp = Blueprint("bootstrap", __name__)

bootstrap_schema = BootstrapSchema()
result_schema = BootstrapResultSchema()
status_schema = BootstrapStatusSchema()


@bp.post("/init")
@timing
def init():
    """Create the administrator. Succeeds once per deployment."""

    data = load_body(bootstrap_schema)
    out = services().bootstrap.init(
        BootstrapIn(username=data["username"], password=data["password"], email=data.get("email"))
    )
    return json_response({"data": result_schema.dump(out)}, status=201)


@bp.get("/status")
@timing
def status():
    initialized = services().bootstrap.is_initialized()
    return json_response({"data": status_schema.dump({"initialized": initialized})})
