# Routes package init
"""
Careers Site Backend: Routes Package
======================================

Route Inventory:
    - site.py:          GET  /                    (landing page)
    - applications.py:  POST /enviar-candidatura  (job-application form)
    - health.py:        GET  /health              (liveness probe)

Routes stay thin: they read the request, call a service and shape the response.
"""
