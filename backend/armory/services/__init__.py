# Services package init
"""
Armory API — Services Layer
=============================

What:  Storage access sitting between routes (HTTP) and the database.

Service Inventory:
    - ResourceGateway: CRUD operations for one resource's table
"""
