#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
iPXE API endpoint.

Renders an iPXE script booting the payload armed for the requesting
machine. Point the loader at it with something like
``chain http://<server>/ipxe/boot.ipxe?mac=${net0/mac}``.

The script is rendered from `data/ipxe/boot.ipxe.j2` in the
configuration directory if present, otherwise from
`DEFAULT_BOOT_TEMPLATE`. Templates get the `payload` and normalized
`mac` as variables.
"""
from flask import make_response, request
from flask_restx import Namespace, Resource
from werkzeug.exceptions import BadRequest

from netbootlite.fsdata import DataJinjaTemplate, render_template_source
from netbootlite.logging import get as get_logger
from netbootlite.machine import normalize_mac
from netbootlite.serve.context import get_context
from netbootlite.serve.util import (
    mac_parser,
    make_message_response,
    repr_request,
    resolve_payload,
)
from netbootlite.vars import IPXE_BOOT, IPXE_DIR

ns: Namespace = Namespace(
    "ipxe", description="Get iPXE scripts booting armed payloads"
)
_logger = get_logger("ipxe")

DEFAULT_BOOT_TEMPLATE = """#!ipxe
{% if payload.message %}echo {{ payload.message }}
{% endif %}kernel {{ payload.kernel }}{% if payload.cmdline %} {{ payload.cmdline }}{% endif %}
{% for initrd in payload.initrds %}initrd {{ initrd }}
{% endfor %}boot
"""


@ns.route(f"/{IPXE_BOOT.removesuffix('.j2')}", endpoint="ipxeboot")
class IPXEBoot(Resource):
    """Resource representing the iPXE boot script of a machine."""

    @staticmethod
    @ns.doc(parser=mac_parser)
    def get():
        """Render and serve the iPXE boot script for the given mac."""

        try:
            args = mac_parser.parse_args(req=request)
        except BadRequest as err:
            _logger.warning(
                "Boot script requested without a mac: %s",
                repr_request(request),
            )
            return make_message_response("invalid_mac", str(err), 400)

        context = get_context()
        payload, error_resp = resolve_payload(
            context, args["mac"], request, _logger
        )
        if error_resp is not None:
            return error_resp

        template_vars = {"payload": payload, "mac": normalize_mac(args["mac"])}
        template_path = context.data_dir / IPXE_DIR / IPXE_BOOT
        try:
            if template_path.exists():
                rendered = DataJinjaTemplate(template_path).render(
                    **template_vars
                )
            else:
                rendered = render_template_source(
                    DEFAULT_BOOT_TEMPLATE, **template_vars
                ).encode("utf-8")
        except ValueError as err:
            _logger.error(
                "Unable to render boot script %s for %s: %s",
                template_path,
                payload.name,
                err,
            )
            return make_message_response("template_error", str(err), 500)

        resp = make_response(rendered, 200)
        resp.headers["Content-Type"] = "text/plain"
        return resp
