"""PublicDashboard Database — SQLAlchemy base, models and session management."""
