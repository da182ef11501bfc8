from app.schemas.common import PaginatedResponse, ErrorResponse, MessageResponse
from app.schemas.user import (
    User, UserCreate, StaffCreate, UserUpdate, PasswordUpdate, UserSummary, Token, TokenPayload,
)
from app.schemas.catalog import (
    Room, RoomCreate, RoomUpdate,
    Table, TableCreate, TableUpdate,
    Garden, GardenCreate, GardenUpdate,
    MenuItem, MenuItemCreate, MenuItemUpdate,
)
from app.schemas.pricing import (
    PricingBreakdown, PricingQuoteRequest, RoomQuote, TableQuote, GardenQuote, OrderQuote,
)
from app.schemas.booking import (
    Booking, AdminBooking, RoomBookingCreate, TableBookingCreate, GardenBookingCreate,
    BookingUpdate, BookingStatusUpdate, CancelRequest, ReviewCreate, StatusHistoryEntry,
)
from app.schemas.order import Order, AdminOrder, OrderCreate, OrderItemCreate, OrderStatusUpdate, OrderTrack
from app.schemas.payment import Payment, PaymentCreate, RefundRequest, PaymentSummary
