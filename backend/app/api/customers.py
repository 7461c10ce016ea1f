"""
Customer API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.db.database import get_db
from app.models import Customer
from app.schemas.customer import CustomerCreate, CustomerResponse
from app.schemas.order import OrderResponse
from app.services.order_service import list_customer_orders

router = APIRouter()


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db)
):
    """Create a new customer."""
    # Check if customer with same email exists
    existing = db.query(Customer).filter(Customer.email == customer_data.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Customer with email '{customer_data.email}' already exists"
        )

    customer = Customer(
        name=customer_data.name,
        email=customer_data.email,
        phone=customer_data.phone,
        shipping_address=customer_data.shipping_address,
        country=customer_data.country.upper() if customer_data.country else None,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)

    return customer


@router.get("/", response_model=List[CustomerResponse])
async def list_customers(
    db: Session = Depends(get_db)
):
    """List all customers."""
    customers = db.query(Customer).order_by(Customer.name).all()
    return customers


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: UUID,
    db: Session = Depends(get_db)
):
    """Get a specific customer."""
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Customer {customer_id} not found"
        )
    return customer


@router.get("/{customer_id}/orders", response_model=List[OrderResponse])
async def get_customer_orders(
    customer_id: UUID,
    db: Session = Depends(get_db)
):
    """List a customer's orders, newest first."""
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Customer {customer_id} not found"
        )
    return list_customer_orders(db, customer_id)
