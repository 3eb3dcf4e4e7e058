"""authlog/ -- Audit sink for authentication events.

Subscribes to the auth event bus and, per event:
  - normalizes it into an AuditRecord (router.py),
  - appends one row to authentication_logs when AUTHLOG_ENABLED (writer.py),
  - mirrors it as a WARNING on the AUTHLOG_CHANNEL logger when
    AUTHLOG_ENABLE_CHANNEL (mirror.py).

Entry point: authlog.listener.install(dispatcher).

Layer rule: authlog/ may import from auth/ and core/. Nothing in auth/ or
core/ imports from authlog/.
"""
