"""PublicDashboard Admin Console — Reflex state, layout and pages."""
