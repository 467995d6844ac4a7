"""bizdir: local business directory backend.

Public shop listings, an admin back-office, and the agent/operator
portals used by field staff to register shops and track commissions.
"""

__version__ = "0.1.0"
