"""Package entry point for ``python -m asl_player``.

WHY: Users run the player as ``python -m asl_player "Good morning"`` for
the CLI, or ``python -m asl_player --serve`` for the HTTP API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().

RULES:
- ``--serve`` launches the HTTP API (host/port from config)
- Without ``--serve``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from asl_player.server.app import run_api
        run_api()
    else:
        from asl_player.cli import main
        main()
