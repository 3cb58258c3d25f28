#!/usr/bin/env python3
"""Standalone todo widget server — serve the todo widget to MCP clients.

    cd samples/todo
    poetry run python app.py

Requires the prebuilt widget bundles (run "cd web && pnpm run build" first)
or WIDGET_ASSETS_DIR pointing at them. Starts on http://localhost:8000.

Environment variables:
    PORT               — Server port (default: 8000)
    BASE_URL           — Public base URL (default: http://localhost:<PORT>)
    WIDGET_ASSETS_DIR  — Prebuilt widget bundles (default: ./web/dist)
"""
from llming_widgets.standalone import main

if __name__ == "__main__":
    main()
