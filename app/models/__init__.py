from app.models.user import User, UserRole
from app.models.room import Room, RoomType
from app.models.table import Table, TableLocation
from app.models.garden import Garden
from app.models.menu_item import MenuItem, MenuCategory, MealType
from app.models.booking import (
    Booking, BookingType, BookingStatus, BookingPaymentStatus, PaymentMethod,
    RoomBookingDetails, TableBookingDetails, GardenBookingDetails, BookingStatusHistory,
)
from app.models.order import (
    Order, OrderType, OrderStatus, OrderPaymentStatus, OrderItem, OrderStatusHistory,
)
from app.models.payment import Payment, PaymentType, PaymentStatus, PaymentStatusHistory
