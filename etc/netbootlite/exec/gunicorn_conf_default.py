#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# pylint: disable=all
"""
Default gunicorn settings for netbootlite, layered after the required ones.

Copy this to gunicorn_conf.py in the same directory to change it. Every
gunicorn configuration file can read the running ServeContext from its
'ctx' global, e.g. to size threads after the number of machines:

```python
threads = max(8, len(ctx.registry.machines))
```

Setting workers has no effect, netbootlite always runs one worker.
"""
# Netboot loaders and BMCs sit on the provisioning network, listen on all
# interfaces
bind = "0.0.0.0:8080"
# Arming requests are answered once every pre-boot action finished
timeout = 300
