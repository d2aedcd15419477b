#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Hold various netbootlite variables.

Be sure to sync with version in pyproject.toml
"""
VERSION: str = "0.1.0"

# --- CLI ---
LOGFILE_NAME = "netbootlite.log"

# --- Config ---
# This are relative to the configuration directory
MACHINES_DIR = "machines"  # directory containing Machine definitions
PAYLOADS_DIR = "payloads"  # directory containing Payload definitions
DATA_DIR = "data"  # directory containing files served to clients
EXEC_DIR = "exec"  # directory containing executables or their configs

# --- iPXE ---
IPXE_DIR = "ipxe"  # relative to DATA_DIR
# script chained by the loader, rendered with the claimed payload
IPXE_BOOT = "boot.ipxe.j2"

# --- Actions ---
IPMITOOL_EXEC = "ipmitool"

# --- GUNICORN ---
GUNICORN_REQUIRED_CONFIG = "gunicorn_conf_required.py"
GUNICORN_DEFAULT_CONFIG = "gunicorn_conf_default.py"
GUNICORN_CONFIG = "gunicorn_conf.py"
