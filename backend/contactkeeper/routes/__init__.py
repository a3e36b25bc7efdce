# Routes package init
"""
ContactKeeper Backend — API Routes Package
============================================

Route Inventory:
    - contacts.py: GET    /api/contacts        (list caller's contacts)
                   POST   /api/contacts        (create contact)
                   PUT    /api/contacts/{id}   (partial update, owner only)
                   DELETE /api/contacts/{id}   (delete, owner only)
    - users.py:    POST   /api/users           (register, returns token)
    - auth.py:     GET    /api/auth            (current user)
                   POST   /api/auth            (login, returns token)
    - health.py:   GET    /                    (welcome message)
                   GET    /health              (service health check)

Routes are thin: they extract input, call a service, and return its result.
Business rules live in contactkeeper.services.
"""
