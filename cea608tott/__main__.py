"""Package entry point for ``python -m cea608tott``.

WHY: Users run the converter as ``python -m cea608tott captions.scc``
for a one-shot conversion, or ``python -m cea608tott --serve`` to start
the HTTP API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
uvicorn server. Otherwise, delegates to the CLI's main() function.

RULES:
- ``--serve`` starts the HTTP API
- Without ``--serve``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from cea608tott.server.app import run_api
        run_api()
    else:
        from cea608tott.cli import main
        main()
