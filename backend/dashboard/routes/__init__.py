# Routes package init
"""
Teacher Dashboard Backend — API Routes Package
===============================================

Route Inventory:
    - auth.py:       POST   /auth/login
    - students.py:   GET    /students
                     POST   /students
                     PUT    /students/{id}
                     DELETE /students/{id}
    - analytics.py:  GET    /analytics
    - health.py:     GET    /health

Routes stay thin: parse the request, check roles, call a service, wrap the
result in the response envelope.
"""
