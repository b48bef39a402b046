"""Load demo accounts, pharmacies and medicines into an empty database."""
from __future__ import annotations

import asyncio
import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from quickdose.core.logging import configure_logging
from quickdose.db.models import InventoryItem
from quickdose.db.session import get_async_session, init_models
from quickdose.schemas.accounts import RegisterRequest
from quickdose.schemas.shops import ShopRegistration
from quickdose.services.accounts import get_user_by_email, register_user
from quickdose.services.shops import register_shop

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Demo123!"

# Pharmacies around central Delhi: (shop, seller e-mail, licence, lat, lon)
PHARMACIES = [
    ("Demo Pharmacy", "seller@demo.com", "LIC123456", 28.6139, 77.2090),
    ("City Pharmacy", "city@demo.com", "LIC200001", 28.6180, 77.2120),
    ("MedPlus", "medplus@demo.com", "LIC200002", 28.6250, 77.2200),
    ("Apollo Pharmacy", "apollo@demo.com", "LIC200003", 28.6300, 77.2300),
    ("Wellness Pharmacy", "wellness@demo.com", "LIC200004", 28.6100, 77.2150),
]

# (pharmacy, name, description, price, stock, category, expiry)
MEDICINES = [
    ("City Pharmacy", "Paracetamol 500mg", "Pain relief and fever reducer", 25, 150, "Pain Relief", date(2027, 12, 31)),
    ("MedPlus", "Amoxicillin 250mg", "Antibiotic for bacterial infections", 120, 75, "Antibiotic", date(2027, 8, 15)),
    ("Apollo Pharmacy", "Cetirizine 10mg", "Antihistamine for allergies", 45, 0, "Allergy", date(2027, 10, 20)),
    ("Wellness Pharmacy", "Omeprazole 20mg", "Proton pump inhibitor for acid reflux", 85, 40, "Gastro", date(2027, 6, 30)),
    ("City Pharmacy", "Metformin 500mg", "Diabetes medication", 95, 8, "Diabetes", date(2027, 3, 31)),
    ("Demo Pharmacy", "Ibuprofen 400mg", "Anti-inflammatory pain relief", 30, 60, "Pain Relief", date(2027, 9, 30)),
]


async def seed(session: AsyncSession) -> None:
    if await get_user_by_email(session, "buyer@demo.com") is not None:
        logger.info("Demo data already present, skipping")
        return

    await register_user(session, RegisterRequest(
        email="buyer@demo.com",
        password=DEMO_PASSWORD,
        name="Demo Buyer",
        phone="+91 9876543210",
        address="123 Demo Street, Demo City",
        user_type="buyer",
    ))

    shop_ids = {}
    for index, (shop_name, email, licence, lat, lon) in enumerate(PHARMACIES):
        phone = f"+91 98765432{11 + index}"
        owner = await register_user(session, RegisterRequest(
            email=email,
            password=DEMO_PASSWORD,
            name=f"{shop_name} Owner",
            phone=phone,
            address=f"{456 + index} Pharmacy Lane, New Delhi",
            user_type="seller",
            store_name=shop_name,
            license_number=licence,
        ))
        shop = await register_shop(session, owner_id=owner.id, registration=ShopRegistration(
            shop_name=shop_name,
            license_number=licence,
            owner_name=f"{shop_name} Owner",
            phone=phone,
            email=email,
            address=f"{456 + index} Pharmacy Lane",
            city="New Delhi",
            state="Delhi",
            postal_code="110001",
            latitude=lat,
            longitude=lon,
        ))
        shop_ids[shop_name] = shop.id

    for shop_name, name, description, price, stock, category, expiry in MEDICINES:
        session.add(InventoryItem(
            shop_id=shop_ids[shop_name],
            name=name,
            description=description,
            price=price,
            stock=stock,
            category=category,
            expiry_date=expiry,
        ))
    await session.commit()
    logger.info("Seeded %d pharmacies and %d medicines", len(PHARMACIES), len(MEDICINES))


async def main() -> None:
    await init_models()
    async with get_async_session() as session:
        await seed(session)


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main())
