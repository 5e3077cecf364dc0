# Routes package init
"""
Armory API — API Routes Package
=================================

Route Inventory:
    - resources.py: /api/<resource> CRUD routes, one router per registered resource
    - health.py:    GET /health (service health check)

Routes are thin: parse the request, make one gateway call, pick the status
code. Storage access lives in armory.services.gateway.
"""
