from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Bookings(Base):
    __tablename__ = 'bookings'

    date = Column(Text, nullable=False, index=True)  # YYYY-MM-DD, shop-local
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text, nullable=False)  # HH:MM
    duration_minutes = Column(Integer, nullable=False)
    services = Column(Text, nullable=False, server_default=text("'[]'"))  # JSON list of service ids
    vehicle = Column(Text, nullable=False, server_default=text("'motorcycle'"))
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    notes = Column(Text)

    cells = relationship('BookingCells', back_populates='booking', cascade='all, delete-orphan')


class BookingCells(Base):
    """One row per slot-grid cell held by an occupying booking."""

    __tablename__ = 'booking_cells'
    __table_args__ = (
        UniqueConstraint('date', 'cell'),
    )

    booking_id = Column(ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)
    cell = Column(Text, nullable=False)  # HH:MM of the cell start
    id = Column(Integer, primary_key=True)

    booking = relationship('Bookings', back_populates='cells')
