"""CCS Router

Resolves named AI providers, checks their health and forwards
Anthropic-format requests to them.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("ccs-router")
except PackageNotFoundError:
    # Fallback for source checkouts
    __version__ = "0.1.0"
__author__ = "CCS Router"
