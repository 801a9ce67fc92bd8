# Middleware package init
"""
Careers Site Backend: Middleware Package
==========================================

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [Upload limit] → Route Handler
    Response ← [Request ID] ← [Logging] ← [Upload limit] ← Route Handler

    - Request ID runs first so the access log line carries the ID
    - Request ID adds X-Request-ID to every response, the 500 fallback included
    - Upload limit turns away oversized bodies before the form is parsed
"""
