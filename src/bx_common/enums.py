"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ListingStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    LIVE = "LIVE"
    SOLD = "SOLD"
    REJECTED = "REJECTED"
    REMOVED = "REMOVED"


class MineralCategory(str, Enum):
    GOLD = "GOLD"
    DIAMOND = "DIAMOND"
    EMERALD = "EMERALD"
    RUBY = "RUBY"
    SAPPHIRE = "SAPPHIRE"
    COPPER = "COPPER"
    LITHIUM = "LITHIUM"
    COBALT = "COBALT"
    COLTAN = "COLTAN"
    URANIUM = "URANIUM"
    IRON_ORE = "IRON_ORE"
    BAUXITE = "BAUXITE"
    OTHER_GEMSTONE = "OTHER_GEMSTONE"
    OTHER_MINERAL = "OTHER_MINERAL"


class UnitOfMeasure(str, Enum):
    GRAMS = "GRAMS"
    KILOGRAMS = "KILOGRAMS"
    TONNES = "TONNES"
    CARATS = "CARATS"
    PIECES = "PIECES"


class EscrowStatus(str, Enum):
    FUNDS_HELD = "FUNDS_HELD"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    DISPUTED = "DISPUTED"
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"


class ActorRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class LedgerEntryType(str, Enum):
    # Buyer payment captured upstream, now held by the platform
    ESCROW_HOLD = "ESCROW_HOLD"
    # Seller payout after buyer confirmation / dispute resolution
    ESCROW_RELEASE = "ESCROW_RELEASE"
    # Platform cut booked on release
    COMMISSION_REVENUE = "COMMISSION_REVENUE"
    # Full amount back to buyer
    ESCROW_REFUND = "ESCROW_REFUND"


class NotificationEvent(str, Enum):
    PURCHASE_CREATED = "PURCHASE_CREATED"
    ORDER_SHIPPED = "ORDER_SHIPPED"
    ORDER_DELIVERED = "ORDER_DELIVERED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    DISPUTE_OPENED = "DISPUTE_OPENED"
    ORDER_REFUNDED = "ORDER_REFUNDED"
