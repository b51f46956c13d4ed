from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

BOOKING_STATUSES = ("confirmed", "cancelled")


class Tenants(Base):
    __tablename__ = 'tenants'

    slug = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    timezone = Column(Text, nullable=False, server_default=text("'UTC'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    email = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    event_types = relationship('EventTypes', back_populates='tenant')
    availability = relationship('Availability', back_populates='tenant')
    bookings = relationship('Bookings', back_populates='tenant')
    google_token = relationship('GoogleTokens', back_populates='tenant', uselist=False)
    calendar_settings = relationship('CalendarSettings', back_populates='tenant', uselist=False)


class EventTypes(Base):
    __tablename__ = 'event_types'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug'),
        CheckConstraint('duration_min >= 5'),
        CheckConstraint('buffer_min >= 0'),
    )

    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    slug = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    duration_min = Column(Integer, nullable=False)
    buffer_min = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    color_hex = Column(Text, server_default=text("'#4f46e5'"))

    tenant = relationship('Tenants', back_populates='event_types')
    bookings = relationship('Bookings', back_populates='event_type')


class Availability(Base):
    __tablename__ = 'availability'
    __table_args__ = (
        CheckConstraint('weekday BETWEEN 0 AND 6'),
        CheckConstraint('start_min BETWEEN 0 AND 1440'),
        CheckConstraint('end_min BETWEEN 0 AND 1440'),
        Index('ix_availability_tenant_weekday', 'tenant_id', 'weekday'),
    )

    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    weekday = Column(Integer, nullable=False)  # 0 = Sunday .. 6 = Saturday
    start_min = Column(Integer, nullable=False)
    end_min = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)

    tenant = relationship('Tenants', back_populates='availability')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_tenant_window', 'tenant_id', 'starts_at', 'blocked_until'),
        # Backstop for the locked re-check; MySQL has no partial indexes
        Index(
            'uq_bookings_tenant_start_confirmed',
            'tenant_id',
            'starts_at',
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ).ddl_if(dialect=('sqlite', 'postgresql')),
    )

    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    event_type_id = Column(ForeignKey('event_types.id'), nullable=False)
    guest_name = Column(Text, nullable=False)
    guest_email = Column(Text, nullable=False)
    # Naive UTC
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    blocked_until = Column(DateTime, nullable=False)  # ends_at + buffer_minutes
    duration_minutes = Column(Integer, nullable=False)
    buffer_minutes = Column(Integer, nullable=False, server_default=text('0'))
    status = Column(Enum(*BOOKING_STATUSES, name='booking_status'), nullable=False, server_default=text("'confirmed'"))
    id = Column(Integer, primary_key=True)
    google_event_id = Column(Text)
    google_calendar_id = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    tenant = relationship('Tenants', back_populates='bookings')
    event_type = relationship('EventTypes', back_populates='bookings')


class GoogleTokens(Base):
    __tablename__ = 'google_tokens'

    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), primary_key=True)
    access_token = Column(Text)
    refresh_token = Column(Text)
    expiry = Column(DateTime)
    scope = Column(Text)

    tenant = relationship('Tenants', back_populates='google_token')


class CalendarSettings(Base):
    __tablename__ = 'calendar_settings'

    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), primary_key=True)
    provider = Column(Text, nullable=False, server_default=text("'google'"))
    calendar_id = Column(Text, nullable=False, server_default=text("'primary'"))
    sync_enabled = Column(Integer, nullable=False, server_default=text('1'))

    tenant = relationship('Tenants', back_populates='calendar_settings')
