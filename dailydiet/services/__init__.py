# Services package init
"""
Daily Diet Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - validation: pure payload validation (Valid / Invalid) and the
      partial-update merge rule
    - MealStore: owner-scoped create / get / list / update / delete
    - summarize + SummaryService: diet statistics and best on-diet streak

Services never see a Request; they take an AsyncSession and an owner id,
which keeps them testable without HTTP.
"""
