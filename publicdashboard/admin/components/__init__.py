"""PublicDashboard Admin Console — Shared components."""
