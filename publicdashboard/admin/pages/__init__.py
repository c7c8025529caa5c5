"""PublicDashboard Admin Console — Pages."""
