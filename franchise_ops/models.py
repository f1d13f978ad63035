# franchise_ops/models.py
from datetime import date

from sqlalchemy import Column, Integer, String, Float, Numeric, Date, ForeignKey, Enum, Index
from sqlalchemy.orm import declarative_base, relationship
import enum

Base = declarative_base()

class StockStatus(enum.Enum):
    """Stock health label of an inventory record.

    Values:
        LOW ('Low'): On hand at or below the reorder level
        DECENT ('Decent'): Above the reorder level, up to twice the reorder level
        HIGH ('High'): More than twice the reorder level
    """
    LOW = 'Low'
    DECENT = 'Decent'
    HIGH = 'High'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'StockStatus':
        """Create a StockStatus from its label.

        Raises:
            ValueError if the label is not valid
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid stock status: {value}. Valid values are: Low, Decent, High")

class FranchiseOwner(Base):
    __tablename__ = 'franchise_owners'

    owner_id = Column(String(20), primary_key=True)
    fname = Column(String(50), nullable=False)
    lname = Column(String(50), nullable=False)

    franchises = relationship("Franchise", back_populates="owner")

class Franchise(Base):
    __tablename__ = 'franchise'

    franchise_id = Column(String(20), primary_key=True)
    owner_id = Column(String(20), ForeignKey('franchise_owners.owner_id'))
    city = Column(String(50))
    seating_capacity = Column(Integer)
    franchise_since = Column(Date)

    owner = relationship("FranchiseOwner", back_populates="franchises")
    agreements = relationship("FranchiseAgreement", back_populates="franchise")
    orders = relationship("CustomerOrder", back_populates="franchise")
    employees = relationship("Employee", back_populates="franchise")

class FranchiseAgreement(Base):
    __tablename__ = 'franchise_agreement'

    id = Column(Integer, primary_key=True)
    franchise_id = Column(String(20), ForeignKey('franchise.franchise_id'), nullable=False)
    term_start_date = Column(Date, nullable=False)
    term_end_date = Column(Date, nullable=False)

    franchise = relationship("Franchise", back_populates="agreements")

class Coupon(Base):
    __tablename__ = 'coupons'

    coupon_code = Column(String(20), primary_key=True)
    min_purchase_amt = Column(Numeric(10, 2), nullable=False, default=0)
    coup_expiry = Column(Date, nullable=False)
    coup_discount_amt = Column(Numeric(10, 2), nullable=False)

class CustomerOrder(Base):
    __tablename__ = 'customer_orders'

    order_id = Column(Integer, primary_key=True)
    franchise_id = Column(String(20), ForeignKey('franchise.franchise_id'), nullable=False)
    order_date = Column(Date, default=date.today)

    subtotal = Column(Numeric(10, 2), nullable=False)
    coupon_code = Column(String(20), ForeignKey('coupons.coupon_code'))
    # Derived by the pricing rule on every write
    total_amount = Column(Numeric(10, 2))

    franchise = relationship("Franchise", back_populates="orders")
    coupon = relationship("Coupon")
    lines = relationship("OrderLine", back_populates="order")

    __table_args__ = (
        Index('idx_customer_orders_franchise', 'franchise_id'),
        Index('idx_customer_orders_date', 'order_date'),
    )

class MenuItem(Base):
    __tablename__ = 'menu_items'

    m_item_id = Column(String(20), primary_key=True)
    m_item_name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2))

class OrderLine(Base):
    __tablename__ = 'lists'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('customer_orders.order_id'), nullable=False)
    m_item_id = Column(String(20), ForeignKey('menu_items.m_item_id'), nullable=False)

    order = relationship("CustomerOrder", back_populates="lines")
    menu_item = relationship("MenuItem")

class CustomerFeedback(Base):
    __tablename__ = 'customer_feedbacks'

    feedback_id = Column(String(20), primary_key=True)
    rating = Column(Integer, nullable=False)
    comments = Column(String(255))

class FeedbackInfo(Base):
    __tablename__ = 'feedback_info'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('customer_orders.order_id'), nullable=False)
    feedback_id = Column(String(20), ForeignKey('customer_feedbacks.feedback_id'), nullable=False)

class RawMaterial(Base):
    __tablename__ = 'raw_materials'

    material_id = Column(String(20), primary_key=True)
    name = Column(String(100))
    # Units available; only the shipment guard refuses to take it below zero
    quantity = Column(Integer, nullable=False, default=0)

class ShipmentDetail(Base):
    __tablename__ = 'shipment_details'

    tracking_id = Column(String(20), primary_key=True)
    material_id = Column(String(20), ForeignKey('raw_materials.material_id'), nullable=False)
    ship_date = Column(Date, default=date.today)
    # Informational; the stock reservation is a fixed number of units
    quantity = Column(Integer)

    material = relationship("RawMaterial")

class DeliveryDetail(Base):
    __tablename__ = 'delivery_details'

    id = Column(Integer, primary_key=True)
    tracking_id = Column(String(20), ForeignKey('shipment_details.tracking_id'), nullable=False)
    franchise_id = Column(String(20), ForeignKey('franchise.franchise_id'), nullable=False)
    delivery_date = Column(Date, nullable=False)

class PurchaseOrder(Base):
    __tablename__ = 'purchase_order'

    po_no = Column(String(20), primary_key=True)
    po_date = Column(Date, nullable=False)
    purchase_qty = Column(Integer, nullable=False)
    material_id = Column(String(20), ForeignKey('raw_materials.material_id'), nullable=False)

    material = relationship("RawMaterial")

class InventoryDetail(Base):
    __tablename__ = 'inventory_details'

    inv_id = Column(String(20), primary_key=True)
    inv_name = Column(String(100))
    inv_qoh = Column(Integer, nullable=False)
    inv_reorder_level = Column(Integer, nullable=False)
    # Derived by the stock-status classifier on every write
    inv_stock_status = Column(
        Enum(StockStatus, name='stock_status', native_enum=False,
             values_callable=lambda statuses: [s.value for s in statuses])
    )

class FranchiseInventory(Base):
    __tablename__ = 'franchise_inventory'

    id = Column(Integer, primary_key=True)
    franchise_id = Column(String(20), ForeignKey('franchise.franchise_id'), nullable=False)
    inv_id = Column(String(20), ForeignKey('inventory_details.inv_id'), nullable=False)

class Employee(Base):
    __tablename__ = 'employees'

    employee_id = Column(String(20), primary_key=True)
    franchise_id = Column(String(20), ForeignKey('franchise.franchise_id'), nullable=False)
    fname = Column(String(50))
    lname = Column(String(50))

    franchise = relationship("Franchise", back_populates="employees")

class ShiftDetail(Base):
    __tablename__ = 'eshifts_details'

    id = Column(Integer, primary_key=True)
    employee_id = Column(String(20), ForeignKey('employees.employee_id'), nullable=False)
    shift_date = Column(Date)
    shift_duration = Column(Float)  # Hours

class SalaryDetail(Base):
    __tablename__ = 'salary_details'

    id = Column(Integer, primary_key=True)
    employee_id = Column(String(20), ForeignKey('employees.employee_id'), nullable=False)
    franchise_id = Column(String(20), ForeignKey('franchise.franchise_id'), nullable=False)
    base_salary = Column(Numeric(10, 2), nullable=False)
    bonus = Column(Numeric(10, 2))
