"""This package contains the ResumeForge web service.

The service debits a per-user credit ledger, calls an external generation
model to tailor a resume section to a job description, and credits the
ledger from payment provider webhooks.

Notes:
    1. app.core holds settings, token handling and the exception taxonomy.
    2. app.ledger holds the only code allowed to mutate credit balances.
    3. app.llm wraps the external generation endpoint.
    4. app.services holds the generation coordinator, checkout and webhook reconciliation.
    5. app.api exposes the HTTP routes.

"""
