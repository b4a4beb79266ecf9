"""Account services: identity reconciliation and the auth collaborator."""
