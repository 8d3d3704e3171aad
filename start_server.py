#!/usr/bin/env python3
"""Start the optimizer API with uvicorn, honouring the PORT environment variable."""

import logging
import os
import subprocess
import sys

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("start_server")

port = os.environ.get("PORT", "8000")

try:
    port_int = int(port)
except ValueError:
    logger.warning(f"Invalid PORT value '{port}', using default 8000")
    port_int = 8000

src_path = os.path.abspath("src")
if not os.path.isdir(src_path):
    logger.warning(f"src directory not found at {src_path}")
    src_path = os.getcwd()

pythonpath = os.environ.get("PYTHONPATH", "")
os.environ["PYTHONPATH"] = f"{src_path}{os.pathsep}{pythonpath}" if pythonpath else src_path

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "route_optimizer.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--proxy-headers",
    "--forwarded-allow-ips", "*",
]

logger.info(f"Starting server on port {port_int} (PYTHONPATH={os.environ['PYTHONPATH']})")

try:
    result = subprocess.call(cmd)
    if result != 0:
        logger.error(f"Uvicorn exited with code {result}")
    sys.exit(result)
except KeyboardInterrupt:
    logger.info("Server interrupted by user")
    sys.exit(0)
except OSError as e:
    logger.exception(f"Failed to start uvicorn: {e}")
    sys.exit(1)
