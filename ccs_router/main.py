import sys

import uvicorn
from fastapi import FastAPI

from ccs_router import __version__
from ccs_router.api.routes import router as api_router
from ccs_router.core.config import config
from ccs_router.core.logging import configure_root_logging, mask_secret

app = FastAPI(title="CCS Router", version=__version__)

app.include_router(api_router)


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"CCS Router v{__version__}")
        print("")
        print("Usage: python -m ccs_router.main")
        print("       or: ccs-router")
        print("")
        print("Optional environment variables:")
        print("  HOST - API host (default: 127.0.0.1)")
        print("  PORT - API port (default: 3000)")
        print("  LOG_LEVEL - Logging level (default: INFO)")
        print("  CCS_HOME - CCS home directory (default: ~/.ccs)")
        print("  CCS_CONFIG_PATH - Routing document (default: $CCS_HOME/config.yaml)")
        print("  CCS_CLIPROXY_PORT - CLIProxy port (default: 8317)")
        print("  CCS_HEALTH_CACHE_TTL - Health cache TTL in seconds (default: 30)")
        print("  CCS_HEALTH_CHECK_TIMEOUT - Health check timeout in seconds (default: 5)")
        sys.exit(0)

    log_level = configure_root_logging(config.log_level)

    # Configuration summary
    print(f"🚀 CCS Router v{__version__}")
    print(f"   Routing config : {config.config_path}")
    print(f"   CLIProxy       : {config.cliproxy_base_url}")
    print(f"   Health TTL     : {config.health_cache_ttl:.0f}s")
    print(f"   Server         : {config.host}:{config.port}")
    print("")

    for descriptor in config.context.resolver.get_all_providers():
        print(
            f"   {descriptor.name:<12} {descriptor.kind.value:<20} {descriptor.base_url}"
            f"  token={mask_secret(descriptor.auth_token)}"
        )
    print("")

    uvicorn.run(
        "ccs_router.main:app",
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=log_level == "DEBUG",
        reload=False,
    )


if __name__ == "__main__":
    main()
