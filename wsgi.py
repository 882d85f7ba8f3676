#!/usr/bin/env python3
"""
WSGI entry point for deployment
"""

import os

from hand_replayer.api import create_app

# Configuration is read once, here
app = create_app(os.environ.get("HAND_REPLAYER_CONFIG"))

# Export the application for WSGI servers
application = app
