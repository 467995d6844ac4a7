"""Authentication and authorization.

Three principal kinds share one signing secret but never one token:
1. Admin users (admin / editor / operator / user roles) → back-office
2. Agents → agent portal, `agent_token` cookie fallback
3. Operators → operator portal, `operator_token` cookie fallback

Every token carries a `kind` claim, so an agent token presented to the
operator portal is rejected before any database lookup.
"""
