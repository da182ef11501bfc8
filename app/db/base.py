# Import every model so Base.metadata knows all tables before create_all
from app.db.session import Base
from app.models.user import User
from app.models.room import Room
from app.models.table import Table
from app.models.garden import Garden
from app.models.menu_item import MenuCategory, MenuItem
from app.models.booking import (
    Booking, RoomBookingDetails, TableBookingDetails, GardenBookingDetails, BookingStatusHistory,
)
from app.models.order import Order, OrderItem, OrderStatusHistory
from app.models.payment import Payment, PaymentStatusHistory
