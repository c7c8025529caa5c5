"""
PublicDashboard Models — SQLAlchemy model for dashboard records.

Table:
    publicdashboard_dashboard — ordered dashboard entries, each referencing
                                a registered dashboard component type.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, String

from publicdashboard.db.base import AuditMixin, Base


class PublicDashboard(Base, AuditMixin):
    __tablename__ = "publicdashboard_dashboard"

    id = Column("id_dashboard", Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, default="")
    component_type_id = Column("id_dashboard_component", String(100), nullable=False)
    # Not unique: a position swap passes through two separate row updates
    position = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_pd_position", "position"),
    )

    def __repr__(self) -> str:
        return (
            f"<PublicDashboard(id={self.id}, component='{self.component_type_id}', "
            f"position={self.position})>"
        )
