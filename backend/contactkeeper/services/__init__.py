# Services package init
"""
ContactKeeper Backend — Services Layer
========================================

What:  Business logic between routes (HTTP) and database (persistence).

Service Inventory:
    - ContactService: Owner-scoped list/create/update/delete of contacts
    - UserService: Registration, login and current-user lookup
"""
