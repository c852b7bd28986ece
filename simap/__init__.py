"""
Social Identity Map Package

Directory Structure:
├── domain/            # Session entities, errors, events, path strategies
│   ├── entities.py    # Session, Entity, Connection, PlacedTopic
│   ├── strategies.py  # Connection path rendering per type
│   └── migrations.py  # Load-time schema upgrades
├── application/       # Diagram editing and the survey flow
│   ├── diagram_state.py     # Single source of truth for a session
│   ├── layout_service.py    # Initial ring placement, summary fit
│   ├── drag_controller.py   # Pointer-stream handling
│   ├── connection_editor.py # Draw / classify / remove connections
│   └── wizard.py            # Step state machine
├── services/sync/     # Client persistence: local cache, remote, debounce
├── routers/           # FastAPI route handlers
├── schemas/           # Pydantic models for API responses
├── storage/           # Session document stores
│   ├── filesystem.py  # Local filesystem storage
│   └── s3.py          # S3 storage
├── client.py          # Respondent-side assembly
└── config.py          # Application configuration

The server only stores opaque session documents; all diagram rules live in
the respondent-side code, which persists through ``services.sync``.
"""
