"""
Services layer - business logic lives here, never in routes.

- report_store: the report collection and its persistence
- category_policy: severity, deadline and presentation per category
- visibility: role-scoped read-only views
- profile_cache / account_service: local profiles, sign-in and registration
- reporting_service: the citizen "report a problem" action
- blob_store: persistence backends (memory, file, Firestore)

DESIGN PRINCIPLE:
- State is owned by one writer; views are recomputed, never cached
- No automated escalation to authorities
"""
