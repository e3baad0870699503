from app.models.seller import Seller, SellerSupportTicket
from app.models.verification import Verification, VerificationHistory
from app.models.admin import Admin, AdminActivity
from app.models.otp import OtpChallenge
from app.models.product import Product

__all__ = [
    "Seller",
    "SellerSupportTicket",
    "Verification",
    "VerificationHistory",
    "Admin",
    "AdminActivity",
    "OtpChallenge",
    "Product",
]
