# Routes package init
"""
Daily Diet Backend — API Routes Package
=========================================

Route Inventory:
    - meals.py:   POST   /api/meals            (record a meal)
                  GET    /api/meals            (list my meals)
                  GET    /api/meals/summary    (counts + best on-diet streak)
                  GET    /api/meals/{id}       (one meal)
                  PUT    /api/meals/{id}       (partial update; PATCH too)
                  DELETE /api/meals/{id}       (remove a meal)
    - health.py:  GET    /health               (service health check)

Routes stay THIN: resolve the caller, validate input, call a service, pick
the status code. Ownership rules live in MealStore, streak math in summary.py.
"""
