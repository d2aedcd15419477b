#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""General utilities for helping to serve netbootlite requests."""
import logging
import typing as t

import orjson
from flask import make_response
from flask.wrappers import Request, Response
from flask_restx.reqparse import RequestParser

from netbootlite.errors import ConfigurationInconsistency, NotArmed
from netbootlite.machine import Payload
from netbootlite.serve.context import ServeContext

arm_parser: RequestParser = RequestParser()
arm_parser.add_argument(
    "machine", type=str, required=True, location="values", help="Machine id"
)
arm_parser.add_argument(
    "payload", type=str, required=True, location="values", help="Payload name"
)

release_parser: RequestParser = RequestParser()
release_parser.add_argument(
    "machine", type=str, required=True, location="values", help="Machine id"
)

mac_parser: RequestParser = RequestParser()
mac_parser.add_argument(
    "mac", type=str, required=True, location="args", help="Mac address"
)


def repr_request(req: Request) -> str:
    """
    Get string representation of the given request.

    Can be used for logging a request in case an error occurs.

    Parameters
    ----------
    req: Request
        Flask request instance to log information about

    Returns
    -------
    str
    """

    return f"{req.method} {req.full_path} from {req.remote_addr}"


def make_json_response(data: t.Any, status: int = 200) -> Response:
    """Create a response with the given data serialized by orjson."""

    resp = make_response(orjson.dumps(data), status)
    resp.headers["Content-Type"] = "application/json"
    return resp


def make_message_response(status_name: str, message: str, status: int):
    """Create a json response carrying a status name and message."""

    return make_json_response(
        {"status": status_name, "message": message}, status
    )


def resolve_payload(
    context: ServeContext,
    mac: str,
    request: Request,
    logger: logging.Logger,
) -> t.Tuple[t.Optional[Payload], t.Optional[Response]]:
    """
    Resolve the payload armed for the given mac.

    Returns
    -------
    tuple
        First item is the armed payload, if it could be resolved, else
        None. Second item is a response to send back to the client if
        the payload could not be resolved.
    """

    try:
        return context.coordinator.resolve_boot(mac), None
    except NotArmed as err:
        return None, make_message_response("not_armed", str(err), 404)
    except ConfigurationInconsistency as err:
        return None, make_message_response(
            "configuration_inconsistency", str(err), 500
        )
    except ValueError as err:
        logger.warning(
            "Unable to parse mac from request %s: %s",
            repr_request(request),
            err,
        )
        return None, make_message_response("invalid_mac", str(err), 400)
